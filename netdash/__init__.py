"""
netdash: native network-diagnostics engine.

Performs the operations a sandboxed front end cannot: ICMP ping, traceroute,
TCP port scanning, typed DNS lookups, interface and ARP inspection.
"""

__version__ = "1.0.0"
