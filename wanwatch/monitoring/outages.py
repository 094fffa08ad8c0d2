"""Outage state machine driven by connectivity results."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from wanwatch.monitoring.models import ConnectivityResult, OutageEvent
from wanwatch.monitoring.stores import HistoryStore, RecoveryNotifier

logger = logging.getLogger(__name__)


class OutageTracker:
    """Open, extend and resolve the single open outage record.

    | open outage | connected | action   |
    |-------------|-----------|----------|
    | no          | False     | start    |
    | yes         | False     | continue |
    | yes         | True      | resolve  |
    | no          | True      | nothing  |
    """

    def __init__(self, history: HistoryStore, notifier: RecoveryNotifier | None = None) -> None:
        self._history = history
        self._notifier = notifier
        self._lock = asyncio.Lock()

    async def on_result(self, result: ConnectivityResult) -> OutageEvent | None:
        async with self._lock:
            open_outage = await self._history.find_open_outage()

            if not result.is_connected and open_outage is None:
                outage = await self._history.create_outage(result.timestamp, checks_count=1)
                logger.warning(
                    "Outage started",
                    extra={"outage_id": outage.id, "start_time": result.timestamp.isoformat()},
                )
                return OutageEvent.STARTED

            if not result.is_connected and open_outage is not None:
                checks_count = open_outage.checks_count + 1
                await self._history.update_outage(open_outage.id, checks_count=checks_count)
                logger.debug(
                    "Outage continues",
                    extra={"outage_id": open_outage.id, "checks_count": checks_count},
                )
                return OutageEvent.CONTINUED

            if result.is_connected and open_outage is not None:
                # Floor division: a sub-second outage resolves with duration 0.
                elapsed = result.timestamp - open_outage.start_time
                duration_sec = elapsed // timedelta(seconds=1)
                await self._history.update_outage(
                    open_outage.id,
                    end_time=result.timestamp,
                    duration_sec=duration_sec,
                    is_resolved=True,
                )
                logger.info(
                    "Outage resolved",
                    extra={
                        "outage_id": open_outage.id,
                        "duration_sec": duration_sec,
                        "start_time": open_outage.start_time.isoformat(),
                        "end_time": result.timestamp.isoformat(),
                    },
                )
                await self._notify(open_outage.id, open_outage.start_time, result, duration_sec)
                return OutageEvent.RESOLVED

            return None

    async def _notify(
        self, outage_id: int, start_time: datetime, result: ConnectivityResult, duration_sec: int
    ) -> None:
        if self._notifier is None:
            return
        delivered = await self._notifier.notify(start_time, result.timestamp, duration_sec)
        if delivered:
            await self._history.update_outage(outage_id, email_sent=True)
