"""Application configuration loading."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str
    log_level: str = "INFO"

    check_interval_seconds: int = 300
    outage_check_interval_seconds: int = 30
    target_cache_seconds: int = 300
    probe_timeout_s: int = 5
    ping_binary: str = "ping"
    restart_delay_s: float = 1.0

    enable_speed_test: bool = False
    speed_test_interval_seconds: int = 3600
    speed_test_initial_delay_s: float = 30.0
    speed_test_base_url: str = "https://speed.cloudflare.com"
    speed_test_download_bytes: int = 25_000_000
    speed_test_upload_bytes: int = 10_000_000
    speed_test_timeout_s: int = 60

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_secure: bool = False
    smtp_user: str | None = None
    smtp_pass: str | None = None
    email_from: str | None = None
    email_to: str | None = None
    app_url: str = "http://localhost:3000"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()
