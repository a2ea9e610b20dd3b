"""
netdash/toolkit/validation.py
Input validation for hosts, port lists and DNS servers.

This is the command-injection firewall: every string that will end up in a
process argument vector or a socket call passes through here first. The
checks run in a fixed order and stop at the first failure.
"""

from __future__ import annotations

import ipaddress
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar

from netdash.base.config import get_config
from netdash.errors import ErrorCode, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_HOST_LENGTH = 253
MAX_LABEL_LENGTH = 63

# Shell metacharacters and control whitespace. Nothing containing one of
# these may reach a spawn call, even though the executor never uses a shell.
UNSAFE_CHARACTERS = frozenset(";&|`$(){}[]<>\\'\"!\n\r\t")

_IPV4_OCTET = r"(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)"
_IPV4_RE = re.compile(rf"^{_IPV4_OCTET}(?:\.{_IPV4_OCTET}){{3}}$")
_LABEL_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
# DNS owner names (SRV, DMARC, DKIM) use underscore labels such as _sip._tcp.
_DNS_LABEL_RE = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9_])?$")

SUPPORTED_RECORD_TYPES = ("A", "AAAA", "CNAME", "MX", "NS", "TXT", "SOA", "PTR", "SRV")


@dataclass(frozen=True)
class Validated(Generic[T]):
    """Outcome of a validation call: either ok with a sanitized value or an error."""

    ok: bool
    sanitized: Optional[T] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None

    @classmethod
    def success(cls, value: T) -> "Validated[T]":
        return cls(ok=True, sanitized=value)

    @classmethod
    def failure(cls, message: str, code: ErrorCode = ErrorCode.VALIDATION_INVALID) -> "Validated[T]":
        return cls(ok=False, error=message, code=code)

    def unwrap(self) -> T:
        """Return the sanitized value or raise ValidationError."""
        if not self.ok:
            raise ValidationError(self.error or "Invalid input", code=self.code or ErrorCode.VALIDATION_INVALID)
        return self.sanitized  # type: ignore[return-value]


def _preview(value: str, limit: int = 40) -> str:
    return repr(value[:limit] + ("..." if len(value) > limit else ""))


def is_ipv4(value: str) -> bool:
    return bool(_IPV4_RE.match(value))


def is_ipv6(value: str) -> bool:
    # Zone identifiers (fe80::1%eth0) are not accepted.
    if ":" not in value or "%" in value:
        return False
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def is_hostname(value: str, allow_underscore: bool = False) -> bool:
    """
    RFC-1123 hostname check on an already-lowercased value.

    With `allow_underscore`, labels may also contain "_" (DNS lookups only;
    such names never reach a process argument vector).
    """
    if value.endswith("."):
        value = value[:-1]
    if not value or len(value) > MAX_HOST_LENGTH:
        return False
    labels = value.split(".")
    label_re = _DNS_LABEL_RE if allow_underscore else _LABEL_RE
    if not all(label_re.match(label) for label in labels):
        return False
    # An all-numeric name is a malformed IPv4 address, not a hostname.
    if all(label.isdigit() for label in labels):
        return False
    return True


def contains_unsafe(value: str) -> bool:
    return any(ch in UNSAFE_CHARACTERS for ch in value)


def validate_host(raw: Any, allow_underscore: bool = False) -> Validated[str]:
    """
    Validate a host string into a sanitized host.

    Order: required, length, unsafe characters, then IPv4 / IPv6 / hostname
    classification. IP literals are returned unchanged; hostnames are
    lowercased with any trailing dot removed.
    """
    if not isinstance(raw, str) or not raw:
        return Validated.failure("Host is required", ErrorCode.VALIDATION_REQUIRED)

    if len(raw) > MAX_HOST_LENGTH:
        return Validated.failure(
            f"Host is too long (max {MAX_HOST_LENGTH} characters)", ErrorCode.VALIDATION_TOO_LONG
        )

    if contains_unsafe(raw):
        logger.warning("Rejected host with unsafe characters: %s", _preview(raw))
        return Validated.failure("Host contains unsafe characters", ErrorCode.VALIDATION_UNSAFE)

    value = raw.strip(" ")
    if not value:
        return Validated.failure("Host is required", ErrorCode.VALIDATION_REQUIRED)

    if is_ipv4(value):
        return Validated.success(value)
    if is_ipv6(value):
        return Validated.success(value)

    lowered = value.lower()
    if is_hostname(lowered, allow_underscore):
        return Validated.success(lowered.rstrip("."))

    logger.info("Rejected malformed host: %s", _preview(raw))
    return Validated.failure("Invalid hostname or IP address")


def validate_ports(raw: Any, max_ports: Optional[int] = None) -> Validated[List[int]]:
    """
    Validate a port list.

    The list itself must hold 1..max_ports elements, defaulting to the
    configured `limits.scan_max_ports`. Elements that are not integers in
    1..65535 are dropped; if nothing survives, the list is an
    error. Duplicates are removed, first occurrence wins.
    """
    if not isinstance(raw, (list, tuple)):
        return Validated.failure("Ports must be a list of integers", ErrorCode.VALIDATION_REQUIRED)
    if not raw:
        return Validated.failure("At least one port is required", ErrorCode.VALIDATION_REQUIRED)
    if max_ports is None:
        max_ports = get_config().limits.scan_max_ports
    if len(raw) > max_ports:
        return Validated.failure(
            f"Too many ports (max {max_ports})", ErrorCode.VALIDATION_OUT_OF_RANGE
        )

    seen = set()
    ports: List[int] = []
    for item in raw:
        # bool is an int subclass; True is not port 1.
        if isinstance(item, bool) or not isinstance(item, int):
            continue
        if 1 <= item <= 65535 and item not in seen:
            seen.add(item)
            ports.append(item)

    if not ports:
        return Validated.failure("No valid ports (must be integers 1-65535)")

    dropped = len(raw) - len(ports)
    if dropped:
        logger.debug("Dropped %d invalid or duplicate ports", dropped)
    return Validated.success(ports)


def validate_dns_server(raw: Any) -> Validated[Optional[str]]:
    """
    Validate an optional DNS server override.

    Empty or missing means "use the system resolver" and is not an error.
    Otherwise the value must be a safe host AND an IPv4 literal; hostnames
    would need their own unvalidated resolution step.
    """
    if raw is None or raw == "":
        return Validated.success(None)

    host = validate_host(raw)
    if not host.ok:
        return Validated.failure(f"Invalid DNS server: {host.error}", host.code or ErrorCode.VALIDATION_INVALID)
    if not is_ipv4(host.sanitized or ""):
        return Validated.failure("DNS server must be an IPv4 address")
    return Validated.success(host.sanitized)


def validate_record_type(raw: Any) -> Validated[str]:
    """Missing means A; anything outside SUPPORTED_RECORD_TYPES is an error."""
    if raw is None or raw == "":
        return Validated.success("A")
    if not isinstance(raw, str):
        return Validated.failure("Record type must be a string")
    record_type = raw.strip().upper()
    if record_type not in SUPPORTED_RECORD_TYPES:
        return Validated.failure(
            f"Unsupported record type '{raw}' (supported: {', '.join(SUPPORTED_RECORD_TYPES)})"
        )
    return Validated.success(record_type)


def clamp(value: Any, low: int, high: int, default: int) -> int:
    """Clamp a caller-supplied number into [low, high]; non-numbers get the default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value != value:  # NaN
        return default
    return int(max(low, min(high, value)))
