"""
Unit tests for per-port classification in the TCP scanner.
sock_connect is replaced so every failure branch runs without a network;
anything other than a clean connect or a refusal must come back filtered,
and every probe socket must be closed exactly once.
"""
import asyncio
import errno
import socket

import pytest

from netdash.engine import port_scanner as scanner_module
from netdash.engine.port_scanner import PortScanner

ADDRESS = (socket.AF_INET, "127.0.0.1")


@pytest.fixture
def probes(monkeypatch):
    """Record every probe socket the scanner creates and how often it is closed."""
    created = []

    class _TrackedSocket(scanner_module._ProbeSocket):
        def __init__(self, family):
            super().__init__(family)
            self.close_calls = 0
            created.append(self)

        def close(self):
            self.close_calls += 1
            super().close()

    monkeypatch.setattr(scanner_module, "_ProbeSocket", _TrackedSocket)
    return created


def _patch_connect(monkeypatch, behaviour):
    loop = asyncio.get_running_loop()

    async def fake_connect(sock, address):
        return await behaviour()

    monkeypatch.setattr(loop, "sock_connect", fake_connect)


def _assert_closed_once(probes):
    assert len(probes) == 1
    assert probes[0].closed is True
    assert probes[0].close_calls == 1
    assert probes[0].sock.fileno() == -1


@pytest.mark.asyncio
async def test_connect_timeout_is_filtered(monkeypatch, probes):
    async def hang():
        await asyncio.sleep(10)

    _patch_connect(monkeypatch, hang)
    state = await PortScanner(timeout_ms=50).probe(ADDRESS, 8080)

    assert state.state == "filtered"
    assert state.response_time is None
    _assert_closed_once(probes)


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [errno.EHOSTUNREACH, errno.ENETUNREACH, errno.ECONNRESET])
async def test_network_errors_are_filtered(monkeypatch, probes, code):
    async def fail():
        raise OSError(code, "network error")

    _patch_connect(monkeypatch, fail)
    state = await PortScanner(timeout_ms=500).probe(ADDRESS, 22)

    assert state.state == "filtered"
    _assert_closed_once(probes)


@pytest.mark.asyncio
async def test_refused_is_closed(monkeypatch, probes):
    async def refuse():
        raise ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")

    _patch_connect(monkeypatch, refuse)
    state = await PortScanner(timeout_ms=500).probe(ADDRESS, 22)

    assert state.state == "closed"
    assert state.service == "SSH"
    _assert_closed_once(probes)


@pytest.mark.asyncio
async def test_refused_errno_without_subclass_is_closed(monkeypatch, probes):
    async def refuse():
        raise OSError(errno.ECONNREFUSED, "Connection refused")

    _patch_connect(monkeypatch, refuse)
    state = await PortScanner(timeout_ms=500).probe(ADDRESS, 443)

    assert state.state == "closed"
    _assert_closed_once(probes)


@pytest.mark.asyncio
async def test_successful_connect_is_open(monkeypatch, probes):
    async def connect():
        return None

    _patch_connect(monkeypatch, connect)
    state = await PortScanner(timeout_ms=500).probe(ADDRESS, 80)

    assert state.state == "open"
    assert state.response_time is not None
    _assert_closed_once(probes)


@pytest.mark.asyncio
async def test_socket_creation_failure_marks_only_that_port(monkeypatch):
    real_socket = scanner_module._ProbeSocket
    attempts = []

    def flaky_socket(family):
        attempts.append(family)
        if len(attempts) == 2:
            raise OSError(errno.EMFILE, "Too many open files")
        return real_socket(family)

    async def refuse():
        raise ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")

    async def fake_resolve(self, host):
        return ADDRESS

    monkeypatch.setattr(scanner_module, "_ProbeSocket", flaky_socket)
    monkeypatch.setattr(PortScanner, "resolve", fake_resolve)
    _patch_connect(monkeypatch, refuse)

    results = await PortScanner(timeout_ms=500, concurrency=3).scan("localhost", [21, 22, 23])

    assert [r.port for r in results] == [21, 22, 23]
    assert [r.state for r in results] == ["closed", "filtered", "closed"]
