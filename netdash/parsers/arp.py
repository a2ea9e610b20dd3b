"""
netdash/parsers/arp.py
Neighbour-table parsing for `arp -a` (Windows / Unix) and `ip neigh show`.

Windows:   "  192.168.1.1           00-11-22-33-44-55     dynamic"
Unix arp:  "? (192.168.1.1) at 0:11:22:33:44:55 on en0 ifscope [ethernet]"
           "gateway (192.168.1.1) at 00:11:22:33:44:55 [ether] on eth0"
ip neigh:  "192.168.1.1 dev eth0 lladdr 00:11:22:33:44:55 REACHABLE"

Incomplete entries and lines whose MAC does not normalise are skipped.
"""

import re
from typing import List, Optional

from netdash.models import ArpEntry
from netdash.parsers import is_windows
from netdash.toolkit.services import lookup_vendor, normalize_mac

_WINDOWS_RE = re.compile(
    r"^\s*(\d{1,3}(?:\.\d{1,3}){3})\s+([0-9a-f]{2}(?:-[0-9a-f]{2}){5})\s+(?:dynamic|static)",
    re.IGNORECASE,
)
_UNIX_RE = re.compile(
    r"\(([0-9a-fA-F.:]+)\)\s+at\s+([0-9a-fA-F:.-]+)(?:\s+\[\w+\])?(?:\s+on\s+(\S+))?",
    re.IGNORECASE,
)
_NEIGH_RE = re.compile(
    r"^\s*([0-9a-fA-F.:]+)\s+dev\s+(\S+)\s+lladdr\s+([0-9a-fA-F:]+)",
    re.IGNORECASE,
)
# Windows groups entries under "Interface: 192.168.1.10 --- 0xb"
_WINDOWS_IFACE_RE = re.compile(r"^\s*Interface:\s+(\S+)", re.IGNORECASE)


def _entry(ip: str, raw_mac: str, interface: Optional[str]) -> Optional[ArpEntry]:
    mac = normalize_mac(raw_mac)
    if mac is None:
        return None
    return ArpEntry(ip=ip, mac=mac, interface=interface, vendor=lookup_vendor(mac))


def parse_arp_output(output: str, platform_name: str) -> List[ArpEntry]:
    """Parse `arp -a` output for the given platform."""
    entries: List[ArpEntry] = []
    windows = is_windows(platform_name)
    interface: Optional[str] = None

    for line in (output or "").splitlines():
        if windows:
            header = _WINDOWS_IFACE_RE.match(line)
            if header:
                interface = header.group(1)
                continue
            match = _WINDOWS_RE.match(line)
            if not match:
                continue
            entry = _entry(match.group(1), match.group(2), interface)
        else:
            match = _UNIX_RE.search(line)
            if not match:
                continue
            entry = _entry(match.group(1), match.group(2), match.group(3))
        if entry is not None:
            entries.append(entry)

    return entries


def parse_ip_neigh_output(output: str) -> List[ArpEntry]:
    """Parse `ip neigh show`; FAILED/INCOMPLETE rows have no lladdr and drop out."""
    entries: List[ArpEntry] = []
    for line in (output or "").splitlines():
        match = _NEIGH_RE.match(line)
        if not match:
            continue
        entry = _entry(match.group(1), match.group(3), match.group(2))
        if entry is not None:
            entries.append(entry)
    return entries
