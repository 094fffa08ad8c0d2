"""Value types shared by the connectivity monitor components."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

NO_TARGETS_CONFIGURED = "no-targets-configured"
ALL_TARGETS_FAILED = "all-targets-failed"


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, matching stored columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class TargetKind(str, Enum):
    """Kind of reachability destination."""

    DNS = "dns"
    DOMAIN = "domain"
    IP = "ip"


class MonitorMode(str, Enum):
    """Polling speed of the adaptive scheduler."""

    NORMAL = "normal"
    OUTAGE = "outage"


class OutageEvent(str, Enum):
    """Lifecycle transition produced by the outage tracker."""

    STARTED = "started"
    CONTINUED = "continued"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class Target:
    """Snapshot of one enabled monitoring target."""

    address: str
    display_name: str
    kind: TargetKind
    priority: int = 100
    enabled: bool = True


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single reachability attempt."""

    reached: bool
    latency_ms: float | None = None


@dataclass(frozen=True)
class ConnectivityResult:
    """Verdict of one connectivity check."""

    is_connected: bool
    latency_ms: float | None
    target: str
    timestamp: datetime


@dataclass(frozen=True)
class Outage:
    """Stored outage record."""

    id: int
    start_time: datetime
    end_time: datetime | None = None
    duration_sec: int | None = None
    is_resolved: bool = False
    checks_count: int = 0
    email_sent: bool = False


@dataclass(frozen=True)
class MonitoringIntervals:
    """Polling periods for the two scheduler modes, in seconds."""

    check_interval_seconds: int
    outage_check_interval_seconds: int

    def interval_for(self, mode: MonitorMode) -> int:
        """Return the timer period used in ``mode``."""
        if mode is MonitorMode.OUTAGE:
            return self.outage_check_interval_seconds
        return self.check_interval_seconds
