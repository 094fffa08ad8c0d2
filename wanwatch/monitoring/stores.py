"""Storage interfaces consumed by the monitor."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from wanwatch.monitoring.models import ConnectivityResult, MonitoringIntervals, Outage, Target


class TargetStore(Protocol):
    """Read access to configured monitoring targets."""

    async def list_enabled(self) -> list[Target]: ...


class HistoryStore(Protocol):
    """Check history and outage records."""

    async def append_connectivity_result(self, result: ConnectivityResult) -> None: ...

    async def find_open_outage(self) -> Outage | None: ...

    async def create_outage(self, start_time: datetime, checks_count: int = 1) -> Outage: ...

    async def update_outage(self, outage_id: int, **fields: Any) -> Outage: ...


class IntervalStore(Protocol):
    """Single-row persisted override of the monitoring intervals."""

    async def read(self) -> MonitoringIntervals | None: ...

    async def replace(self, intervals: MonitoringIntervals) -> None: ...

    async def clear(self) -> None: ...


class RecoveryNotifier(Protocol):
    """Receives a callback when an outage is resolved."""

    async def notify(self, start_time: datetime, end_time: datetime, duration_sec: int) -> bool: ...
