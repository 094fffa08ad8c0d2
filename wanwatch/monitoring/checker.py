"""Connectivity check across the target registry."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from wanwatch.monitoring.models import (
    ALL_TARGETS_FAILED,
    NO_TARGETS_CONFIGURED,
    ConnectivityResult,
    ProbeResult,
    Target,
    utcnow,
)
from wanwatch.monitoring.stores import HistoryStore
from wanwatch.monitoring.targets import TargetRegistry

logger = logging.getLogger(__name__)


class Prober(Protocol):
    async def probe(self, target: Target) -> ProbeResult: ...


class ConnectivityChecker:
    """Try targets in priority order until one answers.

    Probing stops at the first reachable target. Every call writes exactly
    one record to the history store, whatever the outcome.
    """

    def __init__(
        self,
        registry: TargetRegistry,
        prober: Prober,
        history: HistoryStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self._prober = prober
        self._history = history
        self._clock = clock

    async def check(self) -> ConnectivityResult:
        timestamp = self._clock()
        targets = await self.registry.load_targets()

        if not targets:
            logger.error("No enabled monitoring targets configured")
            return await self._record(
                ConnectivityResult(
                    is_connected=False,
                    latency_ms=None,
                    target=NO_TARGETS_CONFIGURED,
                    timestamp=timestamp,
                )
            )

        for target in targets:
            try:
                probe = await self._prober.probe(target)
            except Exception as e:
                logger.debug(
                    "Probe raised", extra={"target": target.address, "error": str(e)[:500]}
                )
                continue

            if probe.reached:
                logger.debug(
                    "Target reachable",
                    extra={"target": target.address, "latency_ms": probe.latency_ms},
                )
                return await self._record(
                    ConnectivityResult(
                        is_connected=True,
                        latency_ms=probe.latency_ms,
                        target=target.address,
                        timestamp=timestamp,
                    )
                )

            logger.debug("Ping failed", extra={"target": target.address})

        logger.info("All targets failed", extra={"targets_attempted": len(targets)})
        return await self._record(
            ConnectivityResult(
                is_connected=False,
                latency_ms=None,
                target=ALL_TARGETS_FAILED,
                timestamp=timestamp,
            )
        )

    async def _record(self, result: ConnectivityResult) -> ConnectivityResult:
        await self._history.append_connectivity_result(result)
        return result
