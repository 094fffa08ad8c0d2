"""SQLAlchemy-backed implementations of the monitor's storage interfaces."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select

from wanwatch.db.models import (
    ConnectionCheck,
    MonitoringSettings,
    MonitoringTarget,
    SpeedTest,
)
from wanwatch.db.models import Outage as OutageRow
from wanwatch.db.session import Database
from wanwatch.monitoring.models import (
    ConnectivityResult,
    MonitoringIntervals,
    Outage,
    Target,
    TargetKind,
)
from wanwatch.monitoring.speedtest import SpeedTestResult

logger = logging.getLogger(__name__)


def _to_target(row: MonitoringTarget) -> Target:
    return Target(
        address=row.target,
        display_name=row.display_name,
        kind=TargetKind(row.kind),
        priority=row.priority,
        enabled=row.is_enabled,
    )


def _to_outage(row: OutageRow) -> Outage:
    return Outage(
        id=row.id,
        start_time=row.start_time,
        end_time=row.end_time,
        duration_sec=row.duration_sec,
        is_resolved=row.is_resolved,
        checks_count=row.checks_count,
        email_sent=row.email_sent,
    )


class SqlTargetStore:
    """Target registry backing store."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def list_enabled(self) -> list[Target]:
        async with self.db.session() as session:
            result = await session.execute(
                select(MonitoringTarget)
                .where(MonitoringTarget.is_enabled.is_(True))
                .order_by(MonitoringTarget.priority, MonitoringTarget.id)
            )
            return [_to_target(row) for row in result.scalars().all()]

    async def count(self) -> int:
        async with self.db.session() as session:
            result = await session.execute(select(func.count()).select_from(MonitoringTarget))
            return int(result.scalar_one())

    async def add(self, target: Target) -> None:
        async with self.db.session() as session:
            session.add(
                MonitoringTarget(
                    target=target.address,
                    display_name=target.display_name,
                    kind=target.kind.value,
                    priority=target.priority,
                    is_enabled=target.enabled,
                )
            )


class SqlHistoryStore:
    """Connection check history and outage records."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def append_connectivity_result(self, result: ConnectivityResult) -> None:
        async with self.db.session() as session:
            session.add(
                ConnectionCheck(
                    timestamp=result.timestamp,
                    is_connected=result.is_connected,
                    latency_ms=result.latency_ms,
                    target=result.target,
                )
            )

    async def find_open_outage(self) -> Outage | None:
        async with self.db.session() as session:
            result = await session.execute(
                select(OutageRow)
                .where(OutageRow.is_resolved.is_(False))
                .order_by(OutageRow.start_time.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_outage(row) if row is not None else None

    async def create_outage(self, start_time: datetime, checks_count: int = 1) -> Outage:
        async with self.db.session() as session:
            row = OutageRow(start_time=start_time, checks_count=checks_count, is_resolved=False)
            session.add(row)
            await session.flush()
            return _to_outage(row)

    async def update_outage(self, outage_id: int, **fields: Any) -> Outage:
        async with self.db.session() as session:
            row = await session.get(OutageRow, outage_id)
            if row is None:
                raise LookupError(f"Outage {outage_id} not found")
            for name, value in fields.items():
                setattr(row, name, value)
            await session.flush()
            return _to_outage(row)


class SqlIntervalStore:
    """Single-row interval override table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def read(self) -> MonitoringIntervals | None:
        async with self.db.session() as session:
            result = await session.execute(
                select(MonitoringSettings).order_by(MonitoringSettings.updated_at.desc()).limit(1)
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None
            return MonitoringIntervals(
                check_interval_seconds=row.check_interval_seconds,
                outage_check_interval_seconds=row.outage_check_interval_seconds,
            )

    async def replace(self, intervals: MonitoringIntervals) -> None:
        async with self.db.session() as session:
            await session.execute(delete(MonitoringSettings))
            session.add(
                MonitoringSettings(
                    check_interval_seconds=intervals.check_interval_seconds,
                    outage_check_interval_seconds=intervals.outage_check_interval_seconds,
                )
            )

    async def clear(self) -> None:
        async with self.db.session() as session:
            await session.execute(delete(MonitoringSettings))


class SqlSpeedTestStore:
    """Speed test result history."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def save(self, result: SpeedTestResult) -> None:
        async with self.db.session() as session:
            session.add(
                SpeedTest(
                    timestamp=result.timestamp,
                    download_mbps=result.download_mbps,
                    upload_mbps=result.upload_mbps,
                    ping_ms=result.ping_ms,
                    jitter_ms=result.jitter_ms,
                    server_name=result.server_name,
                )
            )
        logger.debug("Saved speed test result", extra={"timestamp": result.timestamp.isoformat()})

    async def latest(self) -> SpeedTestResult | None:
        async with self.db.session() as session:
            result = await session.execute(
                select(SpeedTest).order_by(SpeedTest.timestamp.desc()).limit(1)
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None
            return SpeedTestResult(
                download_mbps=row.download_mbps,
                upload_mbps=row.upload_mbps,
                ping_ms=row.ping_ms,
                jitter_ms=row.jitter_ms,
                server_name=row.server_name,
                timestamp=row.timestamp,
            )
