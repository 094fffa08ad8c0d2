"""SQLAlchemy models for targets, check history, outages and settings."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from wanwatch.monitoring.models import TargetKind, utcnow


class Base(DeclarativeBase):
    """Declarative base for ORM models."""

    pass


class MonitoringTarget(Base):
    """Reachability target used as a connectivity signal."""

    __tablename__ = "monitoring_targets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    target: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), default=TargetKind.DOMAIN.value, nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=100, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_monitoring_targets_is_enabled_priority", "is_enabled", "priority"),
    )

    def __repr__(self) -> str:
        """Return a concise representation of the target."""
        return (
            "<MonitoringTarget "
            f"id={self.id} "
            f"target={self.target} "
            f"kind={self.kind} "
            f"priority={self.priority} "
            f"is_enabled={self.is_enabled}>"
        )


class ConnectionCheck(Base):
    """Recorded verdict of one connectivity check."""

    __tablename__ = "connection_checks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    is_connected: Mapped[bool] = mapped_column(Boolean, nullable=False)
    latency_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    target: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (
        Index("ix_connection_checks_timestamp", "timestamp"),
        Index("ix_connection_checks_is_connected_timestamp", "is_connected", "timestamp"),
    )


class Outage(Base):
    """Contiguous interval during which every target failed."""

    __tablename__ = "outages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    duration_sec: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    checks_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    email_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_outages_is_resolved_start_time", "is_resolved", "start_time"),
        Index("ix_outages_start_time", "start_time"),
        # At most one unresolved outage.
        Index(
            "ux_outages_single_open",
            "is_resolved",
            unique=True,
            sqlite_where=text("is_resolved = 0"),
            postgresql_where=text("NOT is_resolved"),
        ),
    )


class MonitoringSettings(Base):
    """Persisted override of the polling intervals; holds at most one row."""

    __tablename__ = "monitoring_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    check_interval_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    outage_check_interval_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )


class SpeedTest(Base):
    """Recorded bandwidth measurement."""

    __tablename__ = "speed_tests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )
    download_mbps: Mapped[float] = mapped_column(Float, nullable=False)
    upload_mbps: Mapped[float] = mapped_column(Float, nullable=False)
    ping_ms: Mapped[float] = mapped_column(Float, nullable=False)
    jitter_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    server_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
