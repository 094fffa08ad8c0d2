"""Repeating asyncio timers with an injectable factory."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol

TickCallback = Callable[[], Awaitable[object]]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerFactory(Protocol):
    def __call__(
        self, interval_s: float, callback: TickCallback, *, initial_delay_s: float | None = None
    ) -> TimerHandle: ...


class RepeatingTimer:
    """Fire ``callback`` every ``interval_s`` seconds on the running event loop.

    Each firing runs in its own task, so a slow callback does not delay the
    next firing. Cancelling the timer stops future firings only; callbacks
    already running are left to finish.
    """

    def __init__(
        self,
        interval_s: float,
        callback: TickCallback,
        *,
        initial_delay_s: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.interval_s = interval_s
        self._callback = callback
        self._initial_delay_s = interval_s if initial_delay_s is None else initial_delay_s
        self._sleep = sleep
        self._ticks: set[asyncio.Task[object]] = set()
        self.cancelled = False
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        await self._sleep(self._initial_delay_s)
        while True:
            tick = asyncio.create_task(self._callback())
            self._ticks.add(tick)
            tick.add_done_callback(self._ticks.discard)
            await self._sleep(self.interval_s)

    def cancel(self) -> None:
        self.cancelled = True
        self._task.cancel()
