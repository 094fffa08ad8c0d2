"""Wiring of the monitor components and long-running service entrypoints."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from wanwatch.config import Settings
from wanwatch.db.session import Database
from wanwatch.db.stores import SqlHistoryStore, SqlIntervalStore, SqlSpeedTestStore, SqlTargetStore
from wanwatch.monitoring.checker import ConnectivityChecker
from wanwatch.monitoring.intervals import IntervalSource
from wanwatch.monitoring.models import ConnectivityResult
from wanwatch.monitoring.notifier import EmailRecoveryNotifier
from wanwatch.monitoring.outages import OutageTracker
from wanwatch.monitoring.prober import PingProber
from wanwatch.monitoring.scheduler import AdaptiveScheduler
from wanwatch.monitoring.speedtest import SpeedTester
from wanwatch.monitoring.targets import DEFAULT_TARGETS, TargetRegistry

logger = logging.getLogger(__name__)


@dataclass
class Monitor:
    """Components of one monitor instance sharing a database."""

    db: Database
    checker: ConnectivityChecker
    tracker: OutageTracker
    interval_source: IntervalSource
    scheduler: AdaptiveScheduler


def build_monitor(settings: Settings, db: Database) -> Monitor:
    """Assemble the checker, outage tracker and scheduler from settings."""
    history = SqlHistoryStore(db)
    registry = TargetRegistry(SqlTargetStore(db), cache_seconds=settings.target_cache_seconds)
    prober = PingProber(timeout_s=settings.probe_timeout_s, ping_binary=settings.ping_binary)
    checker = ConnectivityChecker(registry, prober, history)
    tracker = OutageTracker(history, EmailRecoveryNotifier(settings))
    interval_source = IntervalSource.from_settings(SqlIntervalStore(db), settings)

    speed_tester = None
    if settings.enable_speed_test:
        speed_tester = SpeedTester.from_settings(SqlSpeedTestStore(db), settings)

    scheduler = AdaptiveScheduler(
        checker,
        tracker,
        interval_source,
        restart_delay_s=settings.restart_delay_s,
        speed_tester=speed_tester,
        speed_test_interval_s=settings.speed_test_interval_seconds,
        speed_test_initial_delay_s=settings.speed_test_initial_delay_s,
    )
    return Monitor(
        db=db,
        checker=checker,
        tracker=tracker,
        interval_source=interval_source,
        scheduler=scheduler,
    )


@asynccontextmanager
async def open_monitor(settings: Settings) -> AsyncGenerator[Monitor, None]:
    """Initialize the database, yield a monitor and tear both down."""
    db = Database(settings.database_url)
    await db.init()
    monitor = build_monitor(settings, db)
    try:
        yield monitor
    finally:
        await monitor.scheduler.stop()
        await db.close()


async def run_monitor(settings: Settings, stop_event: asyncio.Event | None = None) -> None:
    """Run the adaptive scheduler until ``stop_event`` is set or the task is cancelled."""
    stop_event = stop_event or asyncio.Event()
    async with open_monitor(settings) as monitor:
        await monitor.scheduler.start()
        _restart_on_sighup(monitor.scheduler)
        await stop_event.wait()


def _restart_on_sighup(scheduler: AdaptiveScheduler) -> None:
    """Reload intervals and targets when the process receives SIGHUP."""
    loop = asyncio.get_running_loop()
    restarts: set[asyncio.Task[None]] = set()

    def handle() -> None:
        logger.info("Received SIGHUP, restarting monitoring")
        task = loop.create_task(scheduler.restart())
        restarts.add(task)
        task.add_done_callback(restarts.discard)

    try:
        loop.add_signal_handler(signal.SIGHUP, handle)
    except (AttributeError, NotImplementedError):
        logger.debug("SIGHUP restart not supported on this platform")


async def check_once(settings: Settings) -> ConnectivityResult:
    """Run a single check and apply it to the outage state."""
    async with open_monitor(settings) as monitor:
        result = await monitor.checker.check()
        await monitor.tracker.on_result(result)
        return result


async def seed_targets(db: Database) -> int:
    """Insert the default targets when none exist; return how many were added."""
    store = SqlTargetStore(db)
    existing = await store.count()
    if existing > 0:
        logger.info("Targets already configured, skipping seed", extra={"count": existing})
        return 0

    for target in DEFAULT_TARGETS:
        await store.add(target)
    logger.info("Seeded monitoring targets", extra={"count": len(DEFAULT_TARGETS)})
    return len(DEFAULT_TARGETS)
