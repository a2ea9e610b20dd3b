"""
netdash/toolkit/platforms.py
Per-platform argument builders for the diagnostic binaries.

One profile per OS family, selected once at startup. Each profile is a flag
table (class attributes); the build methods on the base class read the table,
so adding a platform means filling in a table rather than adding branches.
Canonical requests use milliseconds; profiles convert to whatever unit their
binary expects.
"""

from __future__ import annotations

import logging
import math
import platform
import subprocess
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from netdash.toolkit.validation import is_ipv6

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCommand:
    """A binary name plus a discrete argument vector (never a shell string)."""

    binary: str
    args: Tuple[str, ...]

    def argv(self) -> List[str]:
        return [self.binary, *self.args]


@dataclass(frozen=True)
class PingRequest:
    host: str
    count: int
    timeout_ms: int


@dataclass(frozen=True)
class TracerouteRequest:
    host: str
    max_hops: int
    timeout_ms: int


def _wait_value(timeout_ms: int, unit: str) -> str:
    if unit == "ms":
        return str(max(1, int(timeout_ms)))
    return str(max(1, math.ceil(timeout_ms / 1000)))


class PlatformProfile:
    """Flag table shared by every OS family; subclasses override the entries."""

    name = "base"
    encoding = "utf-8"

    ping_binary = "ping"
    ping6_binary = "ping"
    ping_count_flag = "-c"
    ping_wait_flag: Optional[str] = "-W"
    ping6_wait_flag: Optional[str] = "-W"
    ping_wait_unit = "s"
    ping_extra_flags: Tuple[str, ...] = ("-n",)

    traceroute_binary = "traceroute"
    traceroute6_binary = "traceroute"
    traceroute_hops_flag = "-m"
    traceroute_wait_flag = "-w"
    traceroute_wait_unit = "s"
    traceroute_extra_flags: Tuple[str, ...] = ("-n", "-q", "3")

    # Neighbour-table commands, tried in order until one is installed.
    arp_commands: Tuple[ToolCommand, ...] = (ToolCommand("arp", ("-a",)),)

    def ping_command(self, request: PingRequest) -> ToolCommand:
        v6 = is_ipv6(request.host)
        wait_flag = self.ping6_wait_flag if v6 else self.ping_wait_flag
        args: List[str] = [self.ping_count_flag, str(request.count)]
        if wait_flag:
            args += [wait_flag, _wait_value(request.timeout_ms, self.ping_wait_unit)]
        args += list(self.ping_extra_flags)
        args.append(request.host)
        return ToolCommand(self.ping6_binary if v6 else self.ping_binary, tuple(args))

    def traceroute_command(self, request: TracerouteRequest) -> ToolCommand:
        v6 = is_ipv6(request.host)
        args: List[str] = list(self.traceroute_extra_flags)
        args += [self.traceroute_hops_flag, str(request.max_hops)]
        args += [self.traceroute_wait_flag, _wait_value(request.timeout_ms, self.traceroute_wait_unit)]
        args.append(request.host)
        return ToolCommand(self.traceroute6_binary if v6 else self.traceroute_binary, tuple(args))

    def ping_deadline_ms(self, request: PingRequest) -> int:
        """Hard deadline for the whole ping process."""
        return request.timeout_ms * request.count + 5000

    def traceroute_deadline_ms(self, request: TracerouteRequest) -> int:
        return request.timeout_ms * request.max_hops + 10000

    def spawn_options(self) -> Dict[str, int]:
        """Extra keyword arguments for create_subprocess_exec."""
        return {}


class LinuxProfile(PlatformProfile):
    # iputils ping: -W takes seconds; IPv6 literals are auto-detected.
    name = "linux"
    arp_commands = (
        ToolCommand("arp", ("-a", "-n")),
        ToolCommand("ip", ("neigh", "show")),
    )


class MacProfile(PlatformProfile):
    # BSD ping: -W is in milliseconds. ping6/traceroute6 are separate binaries
    # and ping6 has no per-probe wait flag.
    name = "darwin"
    ping6_binary = "ping6"
    ping6_wait_flag = None
    ping_wait_unit = "ms"
    traceroute6_binary = "traceroute6"
    arp_commands = (ToolCommand("arp", ("-a", "-n")),)


class WindowsProfile(PlatformProfile):
    # ping.exe/tracert.exe: waits in milliseconds, -d disables reverse DNS.
    name = "windows"
    # Console tools print in the OEM code page.
    encoding = "cp850"

    ping_count_flag = "-n"
    ping_wait_flag = "-w"
    ping6_wait_flag = "-w"
    ping_wait_unit = "ms"
    ping_extra_flags = ()

    traceroute_binary = "tracert"
    traceroute6_binary = "tracert"
    traceroute_hops_flag = "-h"
    traceroute_wait_flag = "-w"
    traceroute_wait_unit = "ms"
    traceroute_extra_flags = ("-d",)
    arp_commands = (ToolCommand("arp", ("-a",)),)

    def spawn_options(self) -> Dict[str, int]:
        flags = getattr(subprocess, "CREATE_NO_WINDOW", 0)
        return {"creationflags": flags} if flags else {}


PROFILES: Dict[str, PlatformProfile] = {
    "linux": LinuxProfile(),
    "darwin": MacProfile(),
    "windows": WindowsProfile(),
}

# BSDs share the macOS flag semantics.
_SYSTEM_ALIASES = {
    "freebsd": "darwin",
    "openbsd": "darwin",
    "netbsd": "darwin",
    "win32": "windows",
    "cygwin": "windows",
}


def get_profile(system: Optional[str] = None) -> PlatformProfile:
    """Profile for an explicit platform name, or for the running OS."""
    if system is None:
        return current_profile()
    key = system.lower()
    key = _SYSTEM_ALIASES.get(key, key)
    return PROFILES.get(key, PROFILES["linux"])


@lru_cache(maxsize=1)
def current_profile() -> PlatformProfile:
    profile = get_profile(platform.system() or "linux")
    logger.debug("Selected %s platform profile", profile.name)
    return profile
