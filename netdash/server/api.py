# netdash/server/api.py
# Local FastAPI server: the request/response boundary the desktop UI talks to.

from __future__ import annotations

import logging
from typing import Any, List, Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from netdash import __version__
from netdash.base.config import get_config, is_network_exposed, setup_logging
from netdash.engine.diagnostics import OPERATIONS, DiagnosticsService, get_service
from netdash.errors import NetDashError
from netdash.server.routers import network, system
from netdash.server.routers.auth import is_origin_allowed, verify_token

logger = logging.getLogger(__name__)

# --- Models ---

class InvokeRequest(BaseModel):
    """Operation name plus positional arguments, exactly as the UI bridge sends them."""
    operation: str = Field(..., min_length=1, max_length=64)
    args: List[Any] = Field(default_factory=list, max_length=8)


# --- App Setup ---

app = FastAPI(
    title="NetDash Engine",
    description="Native network diagnostics for the NetDash desktop UI",
    version=__version__,
)

# All operation endpoints live under /v1 so later versions can coexist.
v1_router = APIRouter(
    prefix="/v1",
    tags=["v1"],
    responses={404: {"description": "Not found"}},
)


@app.exception_handler(NetDashError)
async def netdash_error_handler(request: Request, exc: NetDashError):
    """Render transport-level NetDashError (auth, protocol) as JSON."""
    logger.error("[API] %s: %s", exc.code.value, exc.message, extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


def setup_cors():
    """
    CORS with wildcard-port origin patterns.

    Credentials require an exact Access-Control-Allow-Origin, so the matched
    origin is echoed back instead of "*".
    """
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.responses import Response

    config = get_config()
    allowed_patterns = config.security.allowed_origins

    cors_headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
        "Access-Control-Max-Age": "600",
    }

    class DynamicCORSMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request, call_next):
            origin = request.headers.get("origin")

            if request.method == "OPTIONS" and origin:
                if is_origin_allowed(origin, allowed_patterns):
                    return Response(
                        status_code=200,
                        headers={"Access-Control-Allow-Origin": origin, **cors_headers},
                    )
                return Response(status_code=403)

            response = await call_next(request)
            if origin and is_origin_allowed(origin, allowed_patterns):
                response.headers["Access-Control-Allow-Origin"] = origin
                response.headers.update(cors_headers)
            return response

    app.add_middleware(DynamicCORSMiddleware)


setup_cors()


@app.get("/health")
async def health_check():
    """Liveness probe for the UI shell; never requires a token."""
    return {"status": "ok", "version": __version__}


@v1_router.post("/invoke", dependencies=[Depends(verify_token)])
async def invoke(body: InvokeRequest, service: DiagnosticsService = Depends(get_service)):
    """Generic bridge: {operation, args} -> dispatch(operation, *args)."""
    result = await service.dispatch(body.operation, *body.args)
    return result.to_wire()


@v1_router.get("/operations", dependencies=[Depends(verify_token)])
async def list_operations():
    return {"operations": sorted(OPERATIONS)}


v1_router.include_router(network.router)
v1_router.include_router(system.router)

# Must run after every @v1_router route is declared.
app.include_router(v1_router)


def serve(port: Optional[int] = None, host: Optional[str] = None):
    """Run the API with uvicorn on the configured (loopback by default) address."""
    config = get_config()
    setup_logging(config)
    bind_host = host or config.api_host
    if is_network_exposed(bind_host) and not config.security.require_auth:
        logger.warning(
            "Binding to %s without NETDASH_REQUIRE_AUTH; diagnostics are reachable from the network",
            bind_host,
        )
    uvicorn.run(app, host=bind_host, port=port or config.api_port, log_level="info")


if __name__ == "__main__":
    serve()
