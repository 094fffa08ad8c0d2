"""Database models, session utilities and store implementations."""

from .models import Base, ConnectionCheck, MonitoringSettings, MonitoringTarget, Outage, SpeedTest
from .session import Database
from .stores import SqlHistoryStore, SqlIntervalStore, SqlSpeedTestStore, SqlTargetStore

__all__ = [
    "Base",
    "ConnectionCheck",
    "Database",
    "MonitoringSettings",
    "MonitoringTarget",
    "Outage",
    "SpeedTest",
    "SqlHistoryStore",
    "SqlIntervalStore",
    "SqlSpeedTestStore",
    "SqlTargetStore",
]
