"""
NetDash CLI: run the local API or a single diagnostic from a terminal.

Usage examples:
    netdash serve --port 8765
    netdash ping 1.1.1.1 --count 3
    netdash traceroute example.com --max-hops 20
    netdash scan 192.168.1.1 --ports 22,80,443 --concurrency 100
    netdash dns example.com --type MX --server 8.8.8.8
    netdash interfaces
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from netdash import __version__
from netdash.base.config import get_config, setup_logging
from netdash.engine.diagnostics import DiagnosticsService
from netdash.models import Hop


def parse_port_spec(spec: str) -> List[int]:
    """Expand "22,80,8000-8010" into a port list. Malformed pieces raise ValueError."""
    ports: List[int] = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            low, high = (int(p) for p in part.split("-", 1))
            if low > high:
                raise ValueError(f"Invalid port range '{part}'")
            ports.extend(range(low, high + 1))
        else:
            ports.append(int(part))
    return ports


def _port_list(value: str) -> List[int]:
    try:
        return parse_port_spec(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="netdash", description="NetDash network diagnostics engine")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the local HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    ping = sub.add_parser("ping", help="ICMP echo via the system ping binary")
    ping.add_argument("host")
    ping.add_argument("--count", type=int, default=None)
    ping.add_argument("--timeout", type=int, default=None, help="Per-probe timeout (ms)")

    trace = sub.add_parser("traceroute", help="Trace the route to a host")
    trace.add_argument("host")
    trace.add_argument("--max-hops", type=int, default=None)
    trace.add_argument("--timeout", type=int, default=None, help="Per-probe timeout (ms)")
    trace.add_argument("--follow", action="store_true", help="Print each hop as it arrives")

    scan = sub.add_parser("scan", help="TCP connect scan")
    scan.add_argument("host")
    scan.add_argument("--ports", type=_port_list, required=True, help="e.g. 22,80,8000-8010")
    scan.add_argument("--timeout", type=int, default=None, help="Per-port timeout (ms)")
    scan.add_argument("--concurrency", type=int, default=None)

    dns = sub.add_parser("dns", help="DNS lookup")
    dns.add_argument("hostname")
    dns.add_argument("--type", default=None, help="A, AAAA, CNAME, MX, NS, TXT, SOA, PTR, SRV")
    dns.add_argument("--server", default=None, help="IPv4 nameserver override")

    sub.add_parser("interfaces", help="List network interfaces")
    sub.add_parser("arp", help="Show the neighbour (ARP) table")
    sub.add_parser("sysinfo", help="Host facts")
    return parser


def _options(**values: Any) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


async def run_command(args: argparse.Namespace, service: Optional[DiagnosticsService] = None) -> Dict[str, Any]:
    """Execute one diagnostic command and return its wire-format result."""
    service = service or DiagnosticsService()

    if args.command == "ping":
        result = await service.ping(args.host, _options(count=args.count, timeoutMs=args.timeout))
    elif args.command == "traceroute":
        on_hop = None
        if args.follow:
            def on_hop(hop: Hop) -> None:
                print(json.dumps(hop.to_wire()), file=sys.stderr)
        result = await service.traceroute(
            args.host, _options(maxHops=args.max_hops, timeoutMs=args.timeout), on_hop=on_hop
        )
    elif args.command == "scan":
        result = await service.port_scan(
            args.host, args.ports, _options(timeoutMs=args.timeout, concurrency=args.concurrency)
        )
    elif args.command == "dns":
        result = await service.dns_lookup(args.hostname, _options(type=args.type, server=args.server))
    elif args.command == "interfaces":
        result = await service.get_interfaces()
    elif args.command == "arp":
        result = await service.arp_scan()
    elif args.command == "sysinfo":
        result = await service.get_system_info()
    else:
        raise ValueError(f"Unknown command '{args.command}'")
    return result.to_wire()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    if args.debug:
        config.debug = True
    setup_logging(config)

    if args.command == "serve":
        from netdash.server.api import serve

        serve(port=args.port, host=args.host)
        return 0

    payload = asyncio.run(run_command(args))
    _emit(payload)
    return 1 if payload.get("error") else 0


if __name__ == "__main__":
    sys.exit(main())
