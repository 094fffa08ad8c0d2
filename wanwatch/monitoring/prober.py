"""Single-attempt ICMP reachability probe."""

from __future__ import annotations

import asyncio
import logging
import re

from wanwatch.monitoring.models import ProbeResult, Target, TargetKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5

_LATENCY_RE = re.compile(r"time[=<](\d+(?:\.\d+)?)")
_IPV4_RE = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$")
_HOSTNAME_RE = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def classify_address(address: str) -> TargetKind | None:
    """Return the kind suggested by an address, or ``None`` if it is not pingable."""
    if _IPV4_RE.match(address):
        if all(0 <= int(octet) <= 255 for octet in address.split(".")):
            return TargetKind.IP
        return None
    if _HOSTNAME_RE.match(address):
        return TargetKind.DOMAIN
    return None


def parse_latency(output: str) -> float | None:
    """Extract the round-trip time in milliseconds from ping output."""
    match = _LATENCY_RE.search(output)
    if not match:
        return None
    return float(match.group(1))


class PingProber:
    """Probe a target with one ``ping`` echo request."""

    def __init__(self, timeout_s: int = DEFAULT_TIMEOUT_S, ping_binary: str = "ping") -> None:
        self.timeout_s = timeout_s
        self.ping_binary = ping_binary

    def command(self, address: str) -> list[str]:
        return [self.ping_binary, "-c", "1", "-W", str(self.timeout_s), address]

    async def probe(self, target: Target) -> ProbeResult:
        """Ping ``target`` once; failures of any kind yield ``reached=False``."""
        if classify_address(target.address) is None:
            logger.warning("Refusing to probe malformed address", extra={"target": target.address})
            return ProbeResult(reached=False)

        try:
            process = await asyncio.create_subprocess_exec(
                *self.command(target.address),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(
                "Could not launch ping", extra={"target": target.address, "error": str(e)[:500]}
            )
            return ProbeResult(reached=False)

        try:
            # ping enforces -W itself; the extra second covers process startup.
            stdout, _stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_s + 1
            )
        except TimeoutError:
            process.kill()
            await process.wait()
            logger.debug("Ping timed out", extra={"target": target.address})
            return ProbeResult(reached=False)

        if process.returncode != 0:
            return ProbeResult(reached=False)

        latency_ms = parse_latency(stdout.decode(errors="replace"))
        return ProbeResult(reached=True, latency_ms=latency_ms)
