"""Adaptive WAN connectivity monitor."""

from .checker import ConnectivityChecker
from .intervals import IntervalSource, IntervalValidationError, validate_intervals
from .models import (
    ALL_TARGETS_FAILED,
    NO_TARGETS_CONFIGURED,
    ConnectivityResult,
    MonitoringIntervals,
    MonitorMode,
    Outage,
    OutageEvent,
    ProbeResult,
    Target,
    TargetKind,
)
from .notifier import EmailRecoveryNotifier
from .outages import OutageTracker
from .prober import PingProber
from .scheduler import AdaptiveScheduler
from .speedtest import SpeedTester, SpeedTestResult
from .targets import DEFAULT_TARGETS, TargetRegistry

__all__ = [
    "ALL_TARGETS_FAILED",
    "DEFAULT_TARGETS",
    "NO_TARGETS_CONFIGURED",
    "AdaptiveScheduler",
    "ConnectivityChecker",
    "ConnectivityResult",
    "EmailRecoveryNotifier",
    "IntervalSource",
    "IntervalValidationError",
    "MonitorMode",
    "MonitoringIntervals",
    "Outage",
    "OutageEvent",
    "OutageTracker",
    "PingProber",
    "ProbeResult",
    "SpeedTestResult",
    "SpeedTester",
    "Target",
    "TargetKind",
    "TargetRegistry",
    "validate_intervals",
]
