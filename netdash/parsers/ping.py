"""
netdash/parsers/ping.py
Extracts round-trip times from ping output.

Unix:     "64 bytes from 1.1.1.1: icmp_seq=1 ttl=57 time=12.3 ms"
Windows:  "Reply from 1.1.1.1: bytes=32 time=12ms TTL=57"
          "Reply from 192.168.1.1: bytes=32 time<1ms TTL=64"
Localised Windows replies translate "time" (Zeit=, idő=, ...) but keep the
"<n>ms ... TTL" shape, which is matched as a fallback.
"""

import re
from typing import List, Optional

from netdash.parsers import is_windows

_UNIX_TIME_RE = re.compile(r"time=(\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)
_WINDOWS_TIME_RE = re.compile(r"time[=<](\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)
_WINDOWS_LOCALISED_RE = re.compile(r"[=<](\d+(?:\.\d+)?)\s*ms\s+TTL", re.IGNORECASE)

# Resolved address echoed in the header: "PING host (1.2.3.4)" / "Pinging host [1.2.3.4]"
_ADDRESS_RE = re.compile(r"[\[(]([0-9a-fA-F:.]*[0-9a-fA-F])[\])]")


def parse_ping_output(output: str, platform_name: str) -> List[float]:
    """Return one RTT (ms) per reply line, in output order."""
    times: List[float] = []
    windows = is_windows(platform_name)

    for line in (output or "").splitlines():
        if windows:
            match = _WINDOWS_TIME_RE.search(line) or _WINDOWS_LOCALISED_RE.search(line)
        else:
            match = _UNIX_TIME_RE.search(line)
        if not match:
            continue
        try:
            times.append(float(match.group(1)))
        except ValueError:
            continue

    return times


def parse_ping_address(output: str) -> Optional[str]:
    """Address the tool resolved the target to, taken from its header line."""
    for line in (output or "").splitlines():
        if not line.strip():
            continue
        match = _ADDRESS_RE.search(line)
        if match and ("." in match.group(1) or ":" in match.group(1)):
            return match.group(1)
        break
    return None
