"""Test the outage state machine."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest

from tests.fakes import InMemoryHistoryStore, RecordingNotifier
from wanwatch.monitoring.models import ConnectivityResult, OutageEvent
from wanwatch.monitoring.outages import OutageTracker

START = datetime(2025, 11, 15, 8, 30, 0)


def _result(connected: bool, at: datetime) -> ConnectivityResult:
    return ConnectivityResult(
        is_connected=connected,
        latency_ms=10.0 if connected else None,
        target="8.8.8.8" if connected else "all-targets-failed",
        timestamp=at,
    )


@pytest.mark.asyncio
async def test_first_disconnected_result_starts_outage(history: InMemoryHistoryStore) -> None:
    """The first failed check opens an outage."""
    tracker = OutageTracker(history)

    event = await tracker.on_result(_result(False, START))

    assert event is OutageEvent.STARTED
    [outage] = history.open_outages()
    assert outage.start_time == START
    assert outage.checks_count == 1
    assert outage.is_resolved is False


@pytest.mark.asyncio
async def test_connected_result_without_outage_is_noop(history: InMemoryHistoryStore) -> None:
    """A connected check with no open outage changes nothing."""
    tracker = OutageTracker(history)

    event = await tracker.on_result(_result(True, START))

    assert event is None
    assert history.outages == {}


@pytest.mark.asyncio
async def test_consecutive_failures_increment_checks_count(history: InMemoryHistoryStore) -> None:
    """N disconnected results leave one open outage with checks_count == N."""
    tracker = OutageTracker(history)

    events = [
        await tracker.on_result(_result(False, START + timedelta(seconds=30 * i)))
        for i in range(5)
    ]

    assert events[0] is OutageEvent.STARTED
    assert events[1:] == [OutageEvent.CONTINUED] * 4
    [outage] = history.open_outages()
    assert outage.checks_count == 5
    assert outage.start_time == START


@pytest.mark.asyncio
async def test_connected_result_resolves_with_floored_duration(
    history: InMemoryHistoryStore,
) -> None:
    """Reconnecting resolves the outage with a whole-second duration."""
    notifier = RecordingNotifier()
    tracker = OutageTracker(history, notifier)
    end = START + timedelta(seconds=300)

    await tracker.on_result(_result(False, START))
    event = await tracker.on_result(_result(True, end))

    assert event is OutageEvent.RESOLVED
    assert history.open_outages() == []
    [outage] = history.outages.values()
    assert outage.is_resolved is True
    assert outage.end_time == end
    assert outage.duration_sec == 300
    assert notifier.calls == [(START, end, 300)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("gap", "expected"),
    [
        (timedelta(milliseconds=500), 0),
        (timedelta(milliseconds=999), 0),
        (timedelta(seconds=59, milliseconds=999), 59),
        (timedelta(minutes=5), 300),
    ],
)
async def test_duration_is_floored_not_rounded(
    history: InMemoryHistoryStore, gap: timedelta, expected: int
) -> None:
    """Sub-second remainders are dropped, never rounded up."""
    tracker = OutageTracker(history)

    await tracker.on_result(_result(False, START))
    await tracker.on_result(_result(True, START + gap))

    [outage] = history.outages.values()
    assert outage.duration_sec == expected


@pytest.mark.asyncio
async def test_delivered_notification_marks_email_sent(history: InMemoryHistoryStore) -> None:
    """A delivered email flags the resolved outage."""
    tracker = OutageTracker(history, RecordingNotifier(delivered=True))

    await tracker.on_result(_result(False, START))
    await tracker.on_result(_result(True, START + timedelta(seconds=10)))

    [outage] = history.outages.values()
    assert outage.email_sent is True


@pytest.mark.asyncio
async def test_undelivered_notification_leaves_email_unsent(
    history: InMemoryHistoryStore,
) -> None:
    """An undelivered email leaves the flag unset."""
    tracker = OutageTracker(history, RecordingNotifier(delivered=False))

    await tracker.on_result(_result(False, START))
    await tracker.on_result(_result(True, START + timedelta(seconds=10)))

    [outage] = history.outages.values()
    assert outage.email_sent is False


@pytest.mark.asyncio
async def test_new_outage_after_resolution(history: InMemoryHistoryStore) -> None:
    """A later failure opens a fresh outage."""
    tracker = OutageTracker(history)
    pattern = [False, False, True, True, False, True, False]

    for i, connected in enumerate(pattern):
        await tracker.on_result(_result(connected, START + timedelta(minutes=i)))
        assert len(history.open_outages()) <= 1

    assert len(history.outages) == 3
    assert len(history.open_outages()) == 1
    resolved = sorted(
        (o for o in history.outages.values() if o.is_resolved), key=lambda o: o.start_time
    )
    assert [o.checks_count for o in resolved] == [2, 1]
    assert [o.duration_sec for o in resolved] == [120, 60]


@pytest.mark.asyncio
async def test_concurrent_results_create_single_outage() -> None:
    """Overlapping calls never both observe "no open outage"."""

    class SlowHistory(InMemoryHistoryStore):
        async def find_open_outage(self):
            found = await super().find_open_outage()
            await asyncio.sleep(0)
            return found

    history = SlowHistory()
    tracker = OutageTracker(history)

    await asyncio.gather(*[tracker.on_result(_result(False, START)) for _ in range(4)])

    [outage] = history.open_outages()
    assert outage.checks_count == 4
