"""Local host inspection: network interfaces and system facts, read through psutil."""

from __future__ import annotations

import ipaddress
import logging
import os
import platform
import socket
import sys
import time
from typing import List

import psutil

from netdash.models import InterfaceInfo, SystemInfo
from netdash.toolkit.services import normalize_mac

logger = logging.getLogger(__name__)

NULL_MAC = "00:00:00:00:00:00"


def _is_loopback(address: str) -> bool:
    try:
        return ipaddress.ip_address(address.split("%")[0]).is_loopback
    except ValueError:
        return False


def list_interfaces() -> List[InterfaceInfo]:
    """
    Snapshot of the OS interface table at call time (never cached).

    The first IPv4 and first IPv6 address of each interface are reported;
    IPv6 zone suffixes (%eth0) are stripped.
    """
    interfaces: List[InterfaceInfo] = []
    for name, addrs in psutil.net_if_addrs().items():
        mac = NULL_MAC
        ipv4 = netmask = ipv6 = None
        internal = name.lower().startswith("lo")

        for addr in addrs:
            if addr.family == psutil.AF_LINK:
                mac = normalize_mac(addr.address or "") or mac
            elif addr.family == socket.AF_INET and ipv4 is None:
                ipv4 = addr.address
                netmask = addr.netmask
                internal = internal or _is_loopback(addr.address)
            elif addr.family == socket.AF_INET6 and ipv6 is None:
                ipv6 = addr.address.split("%")[0]
                internal = internal or _is_loopback(ipv6)

        interfaces.append(
            InterfaceInfo(
                name=name,
                mac=mac,
                ipv4=ipv4,
                netmask=netmask,
                ipv6=ipv6,
                internal=internal,
            )
        )
    return interfaces


def system_info() -> SystemInfo:
    return SystemInfo(
        hostname=socket.gethostname(),
        platform=sys.platform,
        arch=platform.machine(),
        cpu_count=psutil.cpu_count() or os.cpu_count() or 0,
        total_memory=psutil.virtual_memory().total,
        uptime=round(time.time() - psutil.boot_time(), 1),
    )
