"""Polling interval resolution: persisted override first, static defaults second."""

from __future__ import annotations

import logging

from wanwatch.config import Settings
from wanwatch.monitoring.models import MonitoringIntervals
from wanwatch.monitoring.stores import IntervalStore

logger = logging.getLogger(__name__)

MIN_CHECK_INTERVAL_SECONDS = 10
MAX_CHECK_INTERVAL_SECONDS = 3600
MIN_OUTAGE_CHECK_INTERVAL_SECONDS = 5
MAX_OUTAGE_CHECK_INTERVAL_SECONDS = 600


class IntervalValidationError(ValueError):
    """Raised when monitoring intervals are outside their allowed bounds."""


def validate_intervals(intervals: MonitoringIntervals) -> None:
    """Raise ``IntervalValidationError`` unless ``intervals`` respect the bounds."""
    check = intervals.check_interval_seconds
    outage = intervals.outage_check_interval_seconds

    if not MIN_CHECK_INTERVAL_SECONDS <= check <= MAX_CHECK_INTERVAL_SECONDS:
        raise IntervalValidationError(
            f"check_interval_seconds must be between {MIN_CHECK_INTERVAL_SECONDS} "
            f"and {MAX_CHECK_INTERVAL_SECONDS}, got {check}"
        )
    if not MIN_OUTAGE_CHECK_INTERVAL_SECONDS <= outage <= MAX_OUTAGE_CHECK_INTERVAL_SECONDS:
        raise IntervalValidationError(
            f"outage_check_interval_seconds must be between {MIN_OUTAGE_CHECK_INTERVAL_SECONDS} "
            f"and {MAX_OUTAGE_CHECK_INTERVAL_SECONDS}, got {outage}"
        )
    if outage >= check:
        raise IntervalValidationError(
            "outage_check_interval_seconds must be less than check_interval_seconds, "
            f"got {outage} >= {check}"
        )


class IntervalSource:
    """Resolve and update the scheduler's polling intervals."""

    def __init__(self, store: IntervalStore, defaults: MonitoringIntervals) -> None:
        self._store = store
        self._defaults = defaults

    @classmethod
    def from_settings(cls, store: IntervalStore, settings: Settings) -> IntervalSource:
        return cls(
            store,
            MonitoringIntervals(
                check_interval_seconds=settings.check_interval_seconds,
                outage_check_interval_seconds=settings.outage_check_interval_seconds,
            ),
        )

    def default_intervals(self) -> MonitoringIntervals:
        return self._defaults

    async def get_intervals(self) -> MonitoringIntervals:
        """Return the stored override, or the defaults if none is stored or readable."""
        try:
            stored = await self._store.read()
        except Exception as e:
            logger.warning(
                "Failed to load monitoring intervals from store, using defaults",
                extra={"error": str(e)[:500]},
            )
            return self._defaults

        if stored is None:
            logger.debug(
                "No stored monitoring intervals, using defaults",
                extra={
                    "check_interval_seconds": self._defaults.check_interval_seconds,
                    "outage_check_interval_seconds": self._defaults.outage_check_interval_seconds,
                },
            )
            return self._defaults

        logger.debug(
            "Loaded monitoring intervals from store",
            extra={
                "check_interval_seconds": stored.check_interval_seconds,
                "outage_check_interval_seconds": stored.outage_check_interval_seconds,
            },
        )
        return stored

    async def set_intervals(self, intervals: MonitoringIntervals) -> None:
        """Validate and persist ``intervals``, superseding any previous override."""
        validate_intervals(intervals)
        await self._store.replace(intervals)
        logger.info(
            "Updated monitoring intervals",
            extra={
                "check_interval_seconds": intervals.check_interval_seconds,
                "outage_check_interval_seconds": intervals.outage_check_interval_seconds,
            },
        )

    async def reset_intervals(self) -> None:
        """Remove the stored override so the defaults apply again."""
        await self._store.clear()
        logger.info("Reset monitoring intervals to defaults")
