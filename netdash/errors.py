"""Structured error taxonomy for the diagnostics engine."""
#
# PURPOSE:
# Every failure inside the engine is expressed as a NetDashError carrying an
# ErrorCode. The diagnostics facade converts these into the `error` field of
# the operation's result, so nothing crosses the request boundary as a raw
# exception.
#
# ERROR CODE FORMAT:
# - VALIDATION_XXX: Malformed or unsafe input (raised before any process/socket)
# - PROCESS_XXX: External diagnostic binary problems
# - PARSE_XXX: Tool output that yielded nothing usable
# - SOCKET_XXX: Port scanner transport problems
# - DNS_XXX: Resolution problems
# - AUTH_XXX / IPC_XXX: Request boundary problems
# - SYSTEM_XXX: Everything else
#
# USAGE:
#   from netdash.errors import ProcessError, ErrorCode
#
#   raise ProcessError(
#       ErrorCode.PROCESS_NOT_FOUND,
#       "'traceroute' was not found. Is it installed?",
#       details={"command": "traceroute"},
#   )
#
from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(Enum):
    # Validation Errors
    VALIDATION_REQUIRED = "VALIDATION_001"
    VALIDATION_TOO_LONG = "VALIDATION_002"
    VALIDATION_UNSAFE = "VALIDATION_003"
    VALIDATION_INVALID = "VALIDATION_004"
    VALIDATION_OUT_OF_RANGE = "VALIDATION_005"

    # Process Errors
    PROCESS_NOT_FOUND = "PROCESS_001"
    PROCESS_PERMISSION_DENIED = "PROCESS_002"
    PROCESS_TIMEOUT = "PROCESS_003"
    PROCESS_SPAWN_FAILED = "PROCESS_004"
    PROCESS_FAILED = "PROCESS_005"

    # Parse
    PARSE_INCONCLUSIVE = "PARSE_001"

    # Socket Errors
    SOCKET_RESOLUTION_FAILED = "SOCKET_001"

    # DNS Errors
    DNS_NXDOMAIN = "DNS_001"
    DNS_NO_ANSWER = "DNS_002"
    DNS_TIMEOUT = "DNS_003"
    DNS_NO_NAMESERVERS = "DNS_004"
    DNS_FAILED = "DNS_005"

    # Auth Errors
    AUTH_TOKEN_INVALID = "AUTH_001"
    AUTH_TOKEN_MISSING = "AUTH_002"

    # IPC Errors
    IPC_UNKNOWN_OPERATION = "IPC_001"
    IPC_PROTOCOL_ERROR = "IPC_002"

    # System Errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class NetDashError(Exception):
    """
    Base exception with structured error information.

    Attributes:
        code: ErrorCode enum value
        message: Human-readable error message (this is what ends up in a
            result's `error` field)
        details: Optional dictionary with additional context
        http_status: Suggested HTTP status code for API responses
    """

    HTTP_STATUS_MAP: Dict[ErrorCode, int] = {
        ErrorCode.VALIDATION_REQUIRED: 400,
        ErrorCode.VALIDATION_TOO_LONG: 400,
        ErrorCode.VALIDATION_UNSAFE: 400,
        ErrorCode.VALIDATION_INVALID: 400,
        ErrorCode.VALIDATION_OUT_OF_RANGE: 400,

        ErrorCode.PROCESS_NOT_FOUND: 503,
        ErrorCode.PROCESS_PERMISSION_DENIED: 403,
        ErrorCode.PROCESS_TIMEOUT: 408,
        ErrorCode.PROCESS_SPAWN_FAILED: 500,
        ErrorCode.PROCESS_FAILED: 502,

        ErrorCode.PARSE_INCONCLUSIVE: 200,

        ErrorCode.SOCKET_RESOLUTION_FAILED: 502,

        ErrorCode.DNS_NXDOMAIN: 404,
        ErrorCode.DNS_NO_ANSWER: 404,
        ErrorCode.DNS_TIMEOUT: 504,
        ErrorCode.DNS_NO_NAMESERVERS: 502,
        ErrorCode.DNS_FAILED: 502,

        ErrorCode.AUTH_TOKEN_INVALID: 401,
        ErrorCode.AUTH_TOKEN_MISSING: 401,

        ErrorCode.IPC_UNKNOWN_OPERATION: 404,
        ErrorCode.IPC_PROTOCOL_ERROR: 400,

        ErrorCode.SYSTEM_INTERNAL_ERROR: 500,
    }

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.http_status = http_status or self.HTTP_STATUS_MAP.get(code, 500)
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "http_status": self.http_status,
        }


class ValidationError(NetDashError):
    """Malformed or unsafe input, rejected before a process or socket is touched."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_INVALID,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)


class ProcessError(NetDashError):
    """
    Failure to run an external diagnostic binary.

    `kind` gives the short category used in logs and by callers that branch
    on the failure mode (NotFound, PermissionDenied, Timeout, SpawnFailed,
    Failed).
    """

    KINDS: Dict[ErrorCode, str] = {
        ErrorCode.PROCESS_NOT_FOUND: "NotFound",
        ErrorCode.PROCESS_PERMISSION_DENIED: "PermissionDenied",
        ErrorCode.PROCESS_TIMEOUT: "Timeout",
        ErrorCode.PROCESS_SPAWN_FAILED: "SpawnFailed",
        ErrorCode.PROCESS_FAILED: "Failed",
    }

    @property
    def kind(self) -> str:
        return self.KINDS.get(self.code, "SpawnFailed")


class ResolutionError(NetDashError):
    """DNS or address resolution failure."""


def handle_error(error: Exception, context: Optional[str] = None) -> NetDashError:
    """
    Convert a generic exception to a NetDashError.

    Used at the facade boundary to wrap anything unexpected so it can still be
    rendered as a structured result.
    """
    if isinstance(error, NetDashError):
        return error

    error_type = type(error).__name__
    if isinstance(error, PermissionError):
        code = ErrorCode.PROCESS_PERMISSION_DENIED
    else:
        code = ErrorCode.SYSTEM_INTERNAL_ERROR

    message = str(error) or error_type
    if context:
        message = f"{context}: {message}"

    return NetDashError(
        code=code,
        message=message,
        details={
            "original_type": error_type,
            "original_message": str(error),
        },
    )


__all__ = [
    "ErrorCode",
    "NetDashError",
    "ValidationError",
    "ProcessError",
    "ResolutionError",
    "handle_error",
]
