"""HTTP bandwidth measurement that runs on its own timer."""

from __future__ import annotations

import logging
import statistics
import time
import urllib.parse
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

import httpx

from wanwatch.config import Settings
from wanwatch.monitoring.models import utcnow

logger = logging.getLogger(__name__)

PING_SAMPLES = 5


@dataclass(frozen=True)
class SpeedTestResult:
    """Measured throughput and latency."""

    download_mbps: float
    upload_mbps: float
    ping_ms: float
    jitter_ms: float | None = None
    server_name: str | None = None
    timestamp: datetime = field(default_factory=utcnow)


class SpeedTestStore(Protocol):
    async def save(self, result: SpeedTestResult) -> None: ...


def bytes_to_mbps(byte_count: int, seconds: float) -> float:
    """Convert a transfer of ``byte_count`` bytes over ``seconds`` to megabits per second."""
    if seconds <= 0:
        return 0.0
    return (byte_count * 8) / seconds / 1_000_000


class SpeedTester:
    """Measure ping, download and upload against an HTTP speed endpoint.

    Only one run is in flight at a time; a run requested while another is
    still going is skipped, not queued.
    """

    def __init__(
        self,
        store: SpeedTestStore,
        base_url: str = "https://speed.cloudflare.com",
        download_bytes: int = 25_000_000,
        upload_bytes: int = 10_000_000,
        timeout_s: int = 60,
    ) -> None:
        self._store = store
        self.base_url = base_url.rstrip("/")
        self.download_bytes = download_bytes
        self.upload_bytes = upload_bytes
        self.timeout_s = timeout_s
        self.is_running = False

    @classmethod
    def from_settings(cls, store: SpeedTestStore, settings: Settings) -> SpeedTester:
        return cls(
            store,
            base_url=settings.speed_test_base_url,
            download_bytes=settings.speed_test_download_bytes,
            upload_bytes=settings.speed_test_upload_bytes,
            timeout_s=settings.speed_test_timeout_s,
        )

    async def run(self) -> SpeedTestResult | None:
        if self.is_running:
            logger.warning("Speed test already running, skipping this interval")
            return None

        self.is_running = True
        logger.info("Starting speed test")
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                ping_ms, jitter_ms = await self._measure_ping(client)
                download_mbps = await self._measure_download(client)
                upload_mbps = await self._measure_upload(client)

            result = SpeedTestResult(
                download_mbps=download_mbps,
                upload_mbps=upload_mbps,
                ping_ms=ping_ms,
                jitter_ms=jitter_ms,
                server_name=urllib.parse.urlparse(self.base_url).hostname,
            )
            await self._store.save(result)
            logger.info(
                "Speed test completed",
                extra={
                    "download_mbps": round(download_mbps, 2),
                    "upload_mbps": round(upload_mbps, 2),
                    "ping_ms": round(ping_ms, 2),
                },
            )
            return result
        except httpx.HTTPError as e:
            logger.error("Speed test failed", extra={"error": str(e)[:500]})
            return None
        except Exception:
            logger.exception("Speed test failed")
            return None
        finally:
            self.is_running = False

    async def _measure_ping(self, client: httpx.AsyncClient) -> tuple[float, float | None]:
        samples: list[float] = []
        for _ in range(PING_SAMPLES):
            start = time.monotonic()
            response = await client.get(f"{self.base_url}/__down", params={"bytes": 0})
            response.raise_for_status()
            samples.append((time.monotonic() - start) * 1000)
        jitter = statistics.mean(abs(b - a) for a, b in zip(samples, samples[1:]))
        return min(samples), jitter

    async def _measure_download(self, client: httpx.AsyncClient) -> float:
        start = time.monotonic()
        received = 0
        async with client.stream(
            "GET", f"{self.base_url}/__down", params={"bytes": self.download_bytes}
        ) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                received += len(chunk)
        return bytes_to_mbps(received, time.monotonic() - start)

    async def _measure_upload(self, client: httpx.AsyncClient) -> float:
        payload = b"0" * self.upload_bytes
        start = time.monotonic()
        response = await client.post(f"{self.base_url}/__up", content=payload)
        response.raise_for_status()
        return bytes_to_mbps(len(payload), time.monotonic() - start)
