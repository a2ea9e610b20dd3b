from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from netdash.engine.diagnostics import DiagnosticsService, get_service
from netdash.models import Hop
from netdash.server.routers.auth import verify_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/network", tags=["network"], dependencies=[Depends(verify_token)])


class _Body(BaseModel):
    # Bodies carry raw values; the facade validates and clamps every field.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def options(self, *exclude: str) -> Dict[str, Any]:
        """Remaining fields as a camelCase options record for the facade."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude=set(exclude))


class PingBody(_Body):
    host: Any = None
    timeout_ms: Any = None
    count: Any = None


class TracerouteBody(_Body):
    host: Any = None
    max_hops: Any = None
    timeout_ms: Any = None


class PortScanBody(_Body):
    host: Any = None
    ports: Any = None
    timeout_ms: Any = None
    concurrency: Any = None


class DnsBody(_Body):
    hostname: Any = None
    server: Any = None
    type: Any = None


@router.post("/ping")
async def ping(body: PingBody, service: DiagnosticsService = Depends(get_service)):
    result = await service.ping(body.host, body.options("host"))
    return result.to_wire()


@router.post("/traceroute")
async def traceroute(body: TracerouteBody, service: DiagnosticsService = Depends(get_service)):
    result = await service.traceroute(body.host, body.options("host"))
    return result.to_wire()


@router.post("/traceroute/stream")
async def traceroute_stream(body: TracerouteBody, service: DiagnosticsService = Depends(get_service)):
    """
    NDJSON stream: one {"type": "hop", ...} line per hop as it is printed,
    then a final {"type": "result", ...} line with the complete result.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def on_hop(hop: Hop) -> None:
        await queue.put({"type": "hop", **hop.to_wire()})

    async def run() -> None:
        try:
            result = await service.traceroute(body.host, body.options("host"), on_hop=on_hop)
            await queue.put({"type": "result", **result.to_wire()})
        finally:
            await queue.put(None)

    async def events() -> AsyncIterator[str]:
        task = asyncio.create_task(run())
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                yield json.dumps(item) + "\n"
        finally:
            if not task.done():
                task.cancel()

    return StreamingResponse(events(), media_type="application/x-ndjson")


@router.post("/port-scan")
async def port_scan(body: PortScanBody, service: DiagnosticsService = Depends(get_service)):
    result = await service.port_scan(body.host, body.ports, body.options("host", "ports"))
    return result.to_wire()


@router.post("/dns")
async def dns_lookup(body: DnsBody, service: DiagnosticsService = Depends(get_service)):
    result = await service.dns_lookup(body.hostname, body.options("hostname"))
    return result.to_wire()


@router.get("/interfaces")
async def interfaces(service: DiagnosticsService = Depends(get_service)):
    return (await service.get_interfaces()).to_wire()


@router.get("/arp")
async def arp_scan(service: DiagnosticsService = Depends(get_service)):
    return (await service.arp_scan()).to_wire()
