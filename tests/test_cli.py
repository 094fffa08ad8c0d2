"""Test the cli module."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from wanwatch import cli
from wanwatch.config import get_settings

runner = CliRunner()


@pytest.fixture
def sqlite_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    url = f"sqlite+aiosqlite:///{tmp_path / 'wanwatch.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


def test_migrate_preserves_environment_for_migrations(monkeypatch: pytest.MonkeyPatch) -> None:
    """Migrate should pass existing env vars to migration subprocess."""
    captured: dict[str, object] = {}

    monkeypatch.setenv("TEST_SENTINEL", "present")
    monkeypatch.setattr(
        cli,
        "get_settings",
        lambda: SimpleNamespace(database_url="postgresql+asyncpg://u:p@localhost:5432/db"),
    )

    def _fake_run(cmd: list[str], env: dict[str, str] | None = None) -> SimpleNamespace:
        captured["cmd"] = cmd
        captured["env"] = env
        return SimpleNamespace(returncode=0)

    monkeypatch.setattr("subprocess.run", _fake_run)

    cli.migrate()

    env = captured["env"]
    assert isinstance(env, dict)
    assert env["TEST_SENTINEL"] == "present"
    assert env["DATABASE_URL"] == "postgresql+asyncpg://u:p@localhost:5432/db"
    assert captured["cmd"][-3:] == ["alembic", "upgrade", "head"]


def test_monitor_runs_migrations_before_monitoring(monkeypatch: pytest.MonkeyPatch) -> None:
    """Monitor should migrate the database before starting the scheduler."""
    calls: list[str] = []
    settings = SimpleNamespace(database_url="sqlite+aiosqlite:///./wanwatch.db")

    async def _fake_run_monitor(received: object) -> None:
        assert received is settings
        calls.append("monitor")

    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "run_migrations", lambda: calls.append("migrate"))
    monkeypatch.setattr("wanwatch.service.run_monitor", _fake_run_monitor)

    cli.monitor()

    assert calls == ["migrate", "monitor"]


def test_failed_migration_exits_nonzero(monkeypatch: pytest.MonkeyPatch) -> None:
    """A failing Alembic run should abort the command."""
    monkeypatch.setattr(
        cli,
        "get_settings",
        lambda: SimpleNamespace(database_url="sqlite+aiosqlite:///./wanwatch.db"),
    )
    monkeypatch.setattr("subprocess.run", lambda cmd, env=None: SimpleNamespace(returncode=1))

    with pytest.raises(cli.typer.Exit):
        cli.run_migrations()


def test_version_option() -> None:
    """The version flag prints the package name and exits cleanly."""
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert "wanwatch" in result.stdout


def test_intervals_set_rejects_invalid_pair(sqlite_env: str) -> None:
    """Out-of-bounds intervals are refused with a nonzero exit code."""
    result = runner.invoke(cli.app, ["intervals", "set", "5", "2"])

    assert result.exit_code == 1


def test_intervals_set_show_and_reset(sqlite_env: str) -> None:
    """Intervals can be stored, displayed and reset to the defaults."""
    result = runner.invoke(cli.app, ["intervals", "set", "120", "15"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli.app, ["intervals", "show"])
    assert result.exit_code == 0, result.output
    assert "120" in result.stdout
    assert "15" in result.stdout

    result = runner.invoke(cli.app, ["intervals", "reset"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli.app, ["intervals", "show"])
    assert "120" not in result.stdout
    assert "300" in result.stdout


def test_seed_targets_command_is_idempotent(sqlite_env: str) -> None:
    """Seeding twice only inserts the default targets once."""
    first = runner.invoke(cli.app, ["seed-targets"])
    second = runner.invoke(cli.app, ["seed-targets"])

    assert first.exit_code == 0, first.output
    assert "Seeded 15 monitoring targets" in first.stdout
    assert "nothing seeded" in second.stdout
