"""Cached, priority-ordered view of the enabled monitoring targets."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from wanwatch.monitoring.models import Target, TargetKind
from wanwatch.monitoring.stores import TargetStore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SECONDS = 300

DEFAULT_TARGETS: list[Target] = [
    Target("8.8.8.8", "Google DNS", TargetKind.DNS, 1),
    Target("1.1.1.1", "Cloudflare DNS", TargetKind.DNS, 2),
    Target("google.com", "Google", TargetKind.DOMAIN, 10),
    Target("espn.com", "ESPN", TargetKind.DOMAIN, 11),
    Target("yahoo.com", "Yahoo", TargetKind.DOMAIN, 12),
    Target("bing.com", "Bing", TargetKind.DOMAIN, 13),
    Target("duckduckgo.com", "DuckDuckGo", TargetKind.DOMAIN, 14),
    Target("reddit.com", "Reddit", TargetKind.DOMAIN, 15),
    Target("twitter.com", "Twitter/X", TargetKind.DOMAIN, 16),
    Target("facebook.com", "Facebook", TargetKind.DOMAIN, 17),
    Target("instagram.com", "Instagram", TargetKind.DOMAIN, 18),
    Target("youtube.com", "YouTube", TargetKind.DOMAIN, 19),
    Target("twitch.tv", "Twitch", TargetKind.DOMAIN, 20),
    Target("discord.com", "Discord", TargetKind.DOMAIN, 21),
    Target("telegram.org", "Telegram", TargetKind.DOMAIN, 22),
]


class TargetRegistry:
    """Load targets from a store at most once per cache window."""

    def __init__(
        self,
        store: TargetStore,
        cache_seconds: float = DEFAULT_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._cache_seconds = cache_seconds
        self._clock = clock
        self._targets: list[Target] | None = None
        self._loaded_at = 0.0

    async def load_targets(self) -> list[Target]:
        """Return enabled targets in ascending priority, served from cache when fresh."""
        if self._targets is not None and self._clock() - self._loaded_at < self._cache_seconds:
            return self._targets
        return await self.refresh()

    async def refresh(self) -> list[Target]:
        """Reload targets from the store, bypassing and repopulating the cache."""
        loaded = await self._store.list_enabled()
        self._targets = sorted((t for t in loaded if t.enabled), key=lambda t: t.priority)
        self._loaded_at = self._clock()
        logger.debug("Loaded monitoring targets", extra={"count": len(self._targets)})
        return self._targets

    def invalidate(self) -> None:
        """Drop the cache so the next load reads the store."""
        self._targets = None
