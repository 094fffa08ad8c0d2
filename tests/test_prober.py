"""Test the ping prober."""

from __future__ import annotations

import asyncio

import pytest

from tests.fakes import make_target
from wanwatch.monitoring.models import TargetKind
from wanwatch.monitoring.prober import PingProber, classify_address, parse_latency

PING_OK = b"""PING 8.8.8.8 (8.8.8.8) 56(84) bytes of data.
64 bytes from 8.8.8.8: icmp_seq=1 ttl=118 time=14.2 ms

--- 8.8.8.8 ping statistics ---
1 packets transmitted, 1 received, 0% packet loss, time 0ms
"""


class _DummyProcess:
    def __init__(self, returncode: int, stdout: bytes = b"", hang: bool = False) -> None:
        self.returncode = returncode
        self._stdout = stdout
        self._hang = hang
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self._hang:
            await asyncio.sleep(3600)
        return self._stdout, b""

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


def _patch_exec(monkeypatch: pytest.MonkeyPatch, process: _DummyProcess) -> list[tuple]:
    calls: list[tuple] = []

    async def fake_exec(*args, **_kwargs):
        calls.append(args)
        return process

    monkeypatch.setattr(
        "wanwatch.monitoring.prober.asyncio.create_subprocess_exec", fake_exec
    )
    return calls


@pytest.mark.asyncio
async def test_probe_reports_latency_on_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """A successful ping reports the parsed round-trip time."""
    calls = _patch_exec(monkeypatch, _DummyProcess(0, PING_OK))

    result = await PingProber(timeout_s=5).probe(make_target("8.8.8.8"))

    assert result.reached is True
    assert result.latency_ms == 14.2
    assert calls == [("ping", "-c", "1", "-W", "5", "8.8.8.8")]


@pytest.mark.asyncio
async def test_probe_success_without_latency(monkeypatch: pytest.MonkeyPatch) -> None:
    """A successful ping without a time field still counts as reached."""
    _patch_exec(monkeypatch, _DummyProcess(0, b"1 packets transmitted, 1 received"))

    result = await PingProber().probe(make_target("example.com"))

    assert result.reached is True
    assert result.latency_ms is None


@pytest.mark.asyncio
async def test_probe_nonzero_exit_is_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    """A nonzero ping exit status means unreachable."""
    _patch_exec(monkeypatch, _DummyProcess(1, b"1 packets transmitted, 0 received"))

    result = await PingProber().probe(make_target("example.com"))

    assert result.reached is False
    assert result.latency_ms is None


@pytest.mark.asyncio
async def test_probe_missing_binary_is_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing ping binary is reported as unreachable."""
    async def fake_exec(*_args, **_kwargs):
        raise FileNotFoundError("ping")

    monkeypatch.setattr("wanwatch.monitoring.prober.asyncio.create_subprocess_exec", fake_exec)

    result = await PingProber().probe(make_target("example.com"))

    assert result.reached is False


@pytest.mark.asyncio
async def test_probe_timeout_kills_process(monkeypatch: pytest.MonkeyPatch) -> None:
    """A hung ping is killed and reported as unreachable."""
    process = _DummyProcess(0, hang=True)
    _patch_exec(monkeypatch, process)

    prober = PingProber(timeout_s=0)
    result = await prober.probe(make_target("example.com"))

    assert result.reached is False
    assert process.killed is True


@pytest.mark.asyncio
async def test_probe_rejects_malformed_address(monkeypatch: pytest.MonkeyPatch) -> None:
    """Malformed addresses are never passed to ping."""
    calls = _patch_exec(monkeypatch, _DummyProcess(0, PING_OK))

    result = await PingProber().probe(make_target("-f example.com"))

    assert result.reached is False
    assert calls == []


@pytest.mark.parametrize(
    ("address", "kind"),
    [
        ("1.1.1.1", TargetKind.IP),
        ("google.com", TargetKind.DOMAIN),
        ("localhost", TargetKind.DOMAIN),
        ("999.1.1.1", None),
        ("-c", None),
        ("bad host", None),
        ("", None),
    ],
)
def test_classify_address(address: str, kind: TargetKind | None) -> None:
    """Addresses are classified as IP or domain."""
    assert classify_address(address) == kind


def test_parse_latency_handles_sub_millisecond_output() -> None:
    """Latency parsing accepts the time<1 form."""
    assert parse_latency("64 bytes from 127.0.0.1: icmp_seq=1 ttl=64 time<1 ms") == 1.0
    assert parse_latency("64 bytes from 127.0.0.1: icmp_seq=1 ttl=64 time=0.045 ms") == 0.045
    assert parse_latency("Request timeout for icmp_seq 0") is None
