from __future__ import annotations

import logging
import secrets
from typing import Iterable, Optional
from urllib.parse import urlparse

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from netdash.base.config import get_config
from netdash.errors import ErrorCode, NetDashError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> bool:
    config = get_config()

    if not config.security.require_auth:
        return True

    if credentials is None:
        raise NetDashError(
            ErrorCode.AUTH_TOKEN_MISSING,
            "Authentication token required",
            details={"endpoint": str(request.url.path)},
        )

    if not secrets.compare_digest(credentials.credentials, config.security.api_token):
        logger.warning("Rejected request with invalid token on %s", request.url.path)
        raise NetDashError(
            ErrorCode.AUTH_TOKEN_INVALID,
            "Invalid authentication token",
            details={"endpoint": str(request.url.path)},
        )

    return True


# ---------------------------------------------------------------------------
# Origin validation
# ---------------------------------------------------------------------------

def is_origin_allowed(origin: str, allowed_patterns: Iterable[str]) -> bool:
    """
    Check if an origin matches any of the allowed patterns.

    Patterns support:
    - Exact matches: "app://."
    - Wildcard ports: "http://localhost:*" matches any port on localhost
    """
    if not origin:
        return False

    parsed = urlparse(origin)
    origin_netloc = parsed.netloc

    for pattern in allowed_patterns:
        if pattern == "*":
            return True
        if pattern == origin:
            return True

        parsed_pattern = urlparse(pattern)
        if parsed.scheme != parsed_pattern.scheme:
            continue

        pattern_netloc = parsed_pattern.netloc
        if pattern_netloc.endswith(":*"):
            pattern_host = pattern_netloc[:-2]
            if origin_netloc == pattern_host or origin_netloc.startswith(f"{pattern_host}:"):
                return True
        elif origin_netloc == pattern_netloc:
            return True

    return False
