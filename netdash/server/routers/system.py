from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from netdash.engine.diagnostics import DiagnosticsService, get_service
from netdash.server.routers.auth import verify_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"], dependencies=[Depends(verify_token)])


@router.get("/info")
async def system_info(service: DiagnosticsService = Depends(get_service)):
    """Hostname, platform, arch, CPU count, total memory and uptime."""
    return (await service.get_system_info()).to_wire()
