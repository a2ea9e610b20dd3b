"""
netdash/parsers/traceroute.py
Parses traceroute (Unix) and tracert (Windows) output into Hop records.

Formats handled:
    Unix numeric:   " 1  192.168.1.1  1.234 ms  1.456 ms  1.789 ms"
    Unix named:     " 2  router.lan (192.168.1.1)  1.2 ms  1.4 ms  1.7 ms"
    Unix timeout:   " 3  * * *"
    Windows:        "  1    <1 ms    <1 ms    <1 ms  192.168.1.1"
    Windows named:  "  2     5 ms     4 ms     6 ms  router.isp.net [10.0.0.1]"
    Windows timeout:"  3     *        *        *     Request timed out."

A hop is a timeout when it has no address and no RTT samples.
"""

import ipaddress
import re
from typing import List, Optional, Tuple

from netdash.models import Hop
from netdash.parsers import is_windows

# Header / footer lines skipped before any hop matching is attempted.
SKIP_PREFIXES = (
    "traceroute",
    "traceroute6",
    "tracing route",
    "over a maximum",
    "trace complete",
)

_HOP_RE = re.compile(r"^\s*(\d+)\s+(.*)$")
_RTT_RE = re.compile(r"(?<![\w.])<?(\d+(?:\.\d+)?)\s*ms\b", re.IGNORECASE)
_UNIX_NAMED_RE = re.compile(r"([^\s()]+)\s+\(([0-9a-fA-F:.]+)\)")
_WINDOWS_NAMED_RE = re.compile(r"(\S+)\s+\[([0-9a-fA-F:.]+)\]")
_WINDOWS_COLUMNS_RE = re.compile(r"^(?:(?:<?\d+\s*ms|\*)\s*){1,3}", re.IGNORECASE)

MAX_SAMPLES = 3


def _is_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _rtts(text: str) -> List[float]:
    samples: List[float] = []
    for raw in _RTT_RE.findall(text):
        try:
            samples.append(float(raw))
        except ValueError:
            continue
    return samples[:MAX_SAMPLES]


def _unix_address(rest: str) -> Tuple[str, Optional[str]]:
    named = _UNIX_NAMED_RE.search(rest)
    if named and _is_ip(named.group(2)):
        hostname, ip = named.group(1), named.group(2)
        return ip, (hostname if hostname != ip else None)
    for token in rest.split():
        if _is_ip(token):
            return token, None
    return "*", None


def _windows_address(rest: str) -> Tuple[str, Optional[str]]:
    tail = _WINDOWS_COLUMNS_RE.sub("", rest.strip()).strip()
    named = _WINDOWS_NAMED_RE.search(tail)
    if named and _is_ip(named.group(2)):
        return named.group(2), named.group(1)
    first = tail.split()[0].rstrip(":") if tail else ""
    if _is_ip(first):
        return first, None
    return "*", None


def parse_traceroute_line(line: str, platform_name: str) -> Optional[Hop]:
    """Parse a single line; None for headers, footers and anything unrecognised."""
    stripped = (line or "").strip()
    if not stripped or stripped.lower().startswith(SKIP_PREFIXES):
        return None

    match = _HOP_RE.match(line)
    if not match:
        return None

    hop_index = int(match.group(1))
    rest = match.group(2)

    if is_windows(platform_name):
        ip, hostname = _windows_address(rest)
    else:
        ip, hostname = _unix_address(rest)
    rtt = _rtts(rest)

    return Hop(
        hop=hop_index,
        ip=ip,
        hostname=hostname,
        rtt=rtt,
        timeout=(ip == "*" and not rtt),
    )


def parse_traceroute_output(output: str, platform_name: str) -> List[Hop]:
    """Hops in the order the tool reported them."""
    hops: List[Hop] = []
    for line in (output or "").splitlines():
        hop = parse_traceroute_line(line, platform_name)
        if hop is not None:
            hops.append(hop)
    return hops
