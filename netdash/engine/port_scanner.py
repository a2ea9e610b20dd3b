"""
netdash/engine/port_scanner.py
TCP connect scanner.

Ports are probed in sequential batches of `concurrency`; all probes within a
batch run concurrently and the whole batch settles before the next starts.
That caps simultaneous sockets at `concurrency` regardless of list length.

Per-port classification:
    connected                         -> open (with response time)
    connect timed out                 -> filtered
    connection refused                -> closed
    unreachable / reset / anything    -> filtered
    socket could not be created       -> filtered
"""

from __future__ import annotations

import asyncio
import errno
import logging
import socket
import time
from typing import List, Sequence, Tuple

from netdash.errors import ErrorCode, ResolutionError
from netdash.models import PortState
from netdash.toolkit.services import get_service_name

logger = logging.getLogger(__name__)

Address = Tuple[int, str]

_REFUSED_ERRNOS = {errno.ECONNREFUSED, getattr(errno, "WSAECONNREFUSED", 10061)}


class _ProbeSocket:
    """Non-blocking TCP socket whose close() is safe to call more than once."""

    def __init__(self, family: int):
        self.sock = socket.socket(family, socket.SOCK_STREAM)
        self._closed = False
        try:
            self.sock.setblocking(False)
        except OSError:
            self.close()
            raise

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.sock.close()

    @property
    def closed(self) -> bool:
        return self._closed


class PortScanner:
    def __init__(self, timeout_ms: int = 3000, concurrency: int = 50):
        self.timeout_ms = timeout_ms
        self.concurrency = max(1, concurrency)

    async def resolve(self, host: str) -> Address:
        """Resolve once per scan; every probe reuses the same address."""
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as exc:
            raise ResolutionError(
                ErrorCode.SOCKET_RESOLUTION_FAILED,
                f"Could not resolve host '{host}': {exc}",
                details={"host": host},
            )
        if not infos:
            raise ResolutionError(
                ErrorCode.SOCKET_RESOLUTION_FAILED,
                f"Could not resolve host '{host}'",
                details={"host": host},
            )
        family, _type, _proto, _canon, sockaddr = infos[0]
        return family, sockaddr[0]

    async def probe(self, address: Address, port: int) -> PortState:
        family, ip = address
        loop = asyncio.get_running_loop()
        target = (ip, port) if family == socket.AF_INET else (ip, port, 0, 0)
        state = "filtered"
        response_time = None

        probe = None
        started = time.perf_counter()
        try:
            probe = _ProbeSocket(family)
            await asyncio.wait_for(loop.sock_connect(probe.sock, target), timeout=self.timeout_ms / 1000)
            state = "open"
            response_time = round((time.perf_counter() - started) * 1000, 2)
        except asyncio.TimeoutError:
            state = "filtered"
        except ConnectionRefusedError:
            state = "closed"
        except OSError as exc:
            # Unreachable, reset and everything else stay filtered.
            state = "closed" if exc.errno in _REFUSED_ERRNOS else "filtered"
        finally:
            if probe is not None:
                probe.close()

        return PortState(
            port=port,
            state=state,
            service=get_service_name(port),
            response_time=response_time,
        )

    async def scan(self, host: str, ports: Sequence[int]) -> List[PortState]:
        address = await self.resolve(host)
        results: List[PortState] = []
        for start in range(0, len(ports), self.concurrency):
            batch = ports[start:start + self.concurrency]
            results.extend(await asyncio.gather(*(self.probe(address, port) for port in batch)))

        open_count = sum(1 for r in results if r.state == "open")
        logger.info(
            "Scanned %d ports on %s (%s): %d open",
            len(results), host, address[1], open_count,
        )
        return results


async def scan_ports(host: str, ports: Sequence[int], timeout_ms: int = 3000, concurrency: int = 50) -> List[PortState]:
    """Scan already-validated ports on an already-validated host."""
    return await PortScanner(timeout_ms=timeout_ms, concurrency=concurrency).scan(host, ports)
