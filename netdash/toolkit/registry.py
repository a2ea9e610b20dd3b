"""Binary location tables and executable resolution for diagnostic tools."""
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

_SYSTEM_ROOT = os.environ.get("SystemRoot", r"C:\Windows")
_SYSTEM32 = str(Path(_SYSTEM_ROOT) / "System32")

# Known install locations per tool and platform family, checked in order
# before falling back to a PATH lookup. Distributions disagree about where
# ping and friends live (/bin vs /usr/bin vs /sbin), and GUI-launched
# processes often inherit a minimal PATH without the sbin directories.
BINARY_LOCATIONS: Dict[str, Dict[str, List[str]]] = {
    "ping": {
        "linux": ["/bin/ping", "/usr/bin/ping", "/sbin/ping", "/usr/sbin/ping"],
        "darwin": ["/sbin/ping"],
        "windows": [os.path.join(_SYSTEM32, "PING.EXE")],
    },
    "ping6": {
        "linux": ["/bin/ping6", "/usr/bin/ping6", "/sbin/ping6"],
        "darwin": ["/sbin/ping6"],
        "windows": [],
    },
    "traceroute": {
        "linux": ["/usr/bin/traceroute", "/usr/sbin/traceroute", "/bin/traceroute", "/sbin/traceroute"],
        "darwin": ["/usr/sbin/traceroute"],
        "windows": [],
    },
    "traceroute6": {
        "linux": ["/usr/bin/traceroute6", "/usr/sbin/traceroute6"],
        "darwin": ["/usr/sbin/traceroute6"],
        "windows": [],
    },
    "tracert": {
        "linux": [],
        "darwin": [],
        "windows": [os.path.join(_SYSTEM32, "TRACERT.EXE")],
    },
    "arp": {
        "linux": ["/usr/sbin/arp", "/sbin/arp", "/usr/bin/arp"],
        "darwin": ["/usr/sbin/arp"],
        "windows": [os.path.join(_SYSTEM32, "ARP.EXE")],
    },
    "ip": {
        "linux": ["/usr/sbin/ip", "/sbin/ip", "/usr/bin/ip", "/bin/ip"],
        "darwin": [],
        "windows": [],
    },
}

INSTALL_HINTS: Dict[str, str] = {
    "traceroute": "install the 'traceroute' package (e.g. apt install traceroute)",
    "traceroute6": "install the 'traceroute' package",
    "ping": "install the 'iputils-ping' package (e.g. apt install iputils-ping)",
    "ping6": "install the 'iputils-ping' package",
    "arp": "install the 'net-tools' package (e.g. apt install net-tools)",
    "ip": "install the 'iproute2' package",
}


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_binary(name: str, platform_family: str) -> Optional[str]:
    """
    Resolve a tool name to an absolute executable path.

    1. An absolute path is accepted as-is if it is executable.
    2. Known locations for the platform family, in table order.
    3. PATH lookup via shutil.which as a last resort.
    """
    if os.path.isabs(name):
        return name if _is_executable(name) else None

    for candidate in BINARY_LOCATIONS.get(name, {}).get(platform_family, []):
        if _is_executable(candidate):
            return candidate

    found = shutil.which(name)
    if found:
        logger.debug("Resolved %s via PATH: %s", name, found)
    return found


def install_hint(name: str) -> str:
    hint = INSTALL_HINTS.get(name)
    if hint:
        return f"'{name}' was not found. Is it installed? ({hint})"
    return f"'{name}' was not found. Is it installed?"
