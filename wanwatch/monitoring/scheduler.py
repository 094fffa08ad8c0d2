"""Adaptive connectivity scheduler.

The scheduler polls at ``check_interval_seconds`` while the link is up and
switches to the shorter ``outage_check_interval_seconds`` as soon as a check
comes back disconnected. The first connected result switches it back.

Ticks run as independent tasks. A tick that fires while the previous one is
still probing is skipped, so the outage tracker never sees two results at
once. Start, stop and restart are serialized so only one timer is ever
armed. A tick always completes under the mode it started in; the mode
decision is taken from its result once it finishes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from wanwatch.monitoring.checker import ConnectivityChecker
from wanwatch.monitoring.intervals import IntervalSource, validate_intervals
from wanwatch.monitoring.models import ConnectivityResult, MonitoringIntervals, MonitorMode
from wanwatch.monitoring.outages import OutageTracker
from wanwatch.monitoring.speedtest import SpeedTester
from wanwatch.monitoring.timers import RepeatingTimer, TimerFactory, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_RESTART_DELAY_S = 1.0


class AdaptiveScheduler:
    """Drive the connectivity checker with a two-speed repeating timer."""

    def __init__(
        self,
        checker: ConnectivityChecker,
        tracker: OutageTracker,
        interval_source: IntervalSource,
        *,
        timer_factory: TimerFactory = RepeatingTimer,
        restart_delay_s: float = DEFAULT_RESTART_DELAY_S,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        speed_tester: SpeedTester | None = None,
        speed_test_interval_s: float = 3600,
        speed_test_initial_delay_s: float = 30,
    ) -> None:
        self._checker = checker
        self._tracker = tracker
        self._interval_source = interval_source
        self._timer_factory = timer_factory
        self._restart_delay_s = restart_delay_s
        self._sleep = sleep
        self._speed_tester = speed_tester
        self._speed_test_interval_s = speed_test_interval_s
        self._speed_test_initial_delay_s = speed_test_initial_delay_s

        self.mode = MonitorMode.NORMAL
        self.intervals: MonitoringIntervals | None = None
        self._timer: TimerHandle | None = None
        self._speed_test_timer: TimerHandle | None = None
        self._busy = False
        self._lifecycle_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def current_interval(self) -> int | None:
        if self.intervals is None:
            return None
        return self.intervals.interval_for(self.mode)

    async def start(self) -> None:
        """Load intervals and targets, arm the timer and run the first check.

        Errors while loading intervals or targets propagate and leave the
        scheduler stopped.
        """
        async with self._lifecycle_lock:
            started = await self._start_locked()
        if started:
            await self.run_tick()

    async def stop(self) -> None:
        """Stop arming timers; a check already in flight is left to finish."""
        async with self._lifecycle_lock:
            self._stop_locked()

    async def restart(self) -> None:
        """Stop, pause briefly, then start again with freshly loaded intervals."""
        logger.info("Restarting monitoring")
        async with self._lifecycle_lock:
            self._stop_locked()
            await self._sleep(self._restart_delay_s)
            started = await self._start_locked()
        if started:
            await self.run_tick()

    async def _start_locked(self) -> bool:
        if self.running:
            logger.info("Monitoring already running")
            return False

        intervals = await self._interval_source.get_intervals()
        validate_intervals(intervals)
        await self._checker.registry.refresh()

        self.intervals = intervals
        self.mode = MonitorMode.NORMAL
        self._timer = self._timer_factory(intervals.check_interval_seconds, self.run_tick)
        logger.info(
            "Monitoring started",
            extra={
                "interval_seconds": intervals.check_interval_seconds,
                "outage_interval_seconds": intervals.outage_check_interval_seconds,
            },
        )

        if self._speed_tester is not None:
            self._start_speed_test()
        return True

    def _stop_locked(self) -> None:
        if self._timer is None:
            logger.debug("Monitoring not running")
            return

        self._timer.cancel()
        self._timer = None
        self.mode = MonitorMode.NORMAL
        logger.info("Monitoring stopped")

        if self._speed_test_timer is not None:
            self._speed_test_timer.cancel()
            self._speed_test_timer = None
            logger.info("Speed test monitoring stopped")

    def refresh_targets(self) -> None:
        """Force the target list to be reloaded before the next check."""
        self._checker.registry.invalidate()
        logger.info("Monitoring targets cache invalidated")

    async def run_tick(self) -> ConnectivityResult | None:
        """Run one check and feed it to the outage tracker.

        Returns ``None`` when the tick was skipped or failed.
        """
        if self._busy:
            logger.warning("Previous connectivity check still running, skipping this tick")
            return None

        self._busy = True
        logger.debug("Running connectivity check", extra={"mode": self.mode.value})
        try:
            result = await self._checker.check()
            await self._tracker.on_result(result)
        except Exception:
            logger.exception("Error during connectivity check")
            return None
        finally:
            self._busy = False

        logger.debug(
            "Check complete: %s",
            "CONNECTED" if result.is_connected else "DISCONNECTED",
            extra={
                "target": result.target,
                "latency_ms": result.latency_ms,
                "mode": self.mode.value,
            },
        )
        self._adapt(result)
        return result

    def _adapt(self, result: ConnectivityResult) -> None:
        if not self.running:
            return
        if not result.is_connected and self.mode is MonitorMode.NORMAL:
            self._switch_mode(MonitorMode.OUTAGE)
        elif result.is_connected and self.mode is MonitorMode.OUTAGE:
            self._switch_mode(MonitorMode.NORMAL)

    def _switch_mode(self, mode: MonitorMode) -> None:
        if mode is self.mode or self.intervals is None:
            return

        previous_interval = self.intervals.interval_for(self.mode)
        new_interval = self.intervals.interval_for(mode)
        logger.info(
            "Switching to %s mode",
            mode.value,
            extra={
                "previous_interval_seconds": previous_interval,
                "new_interval_seconds": new_interval,
            },
        )

        if self._timer is not None:
            self._timer.cancel()
        self.mode = mode
        self._timer = self._timer_factory(new_interval, self.run_tick)

    def _start_speed_test(self) -> None:
        if self._speed_test_timer is not None:
            logger.debug("Speed test monitoring already running")
            return

        self._speed_test_timer = self._timer_factory(
            self._speed_test_interval_s,
            self._speed_tester.run,
            initial_delay_s=self._speed_test_initial_delay_s,
        )
        logger.info(
            "Speed test monitoring started",
            extra={"interval_seconds": self._speed_test_interval_s},
        )
