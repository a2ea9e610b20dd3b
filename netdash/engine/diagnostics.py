"""
netdash/engine/diagnostics.py
The diagnostics facade: the one request/response boundary of the engine.

Every operation follows validate -> delegate -> structured result. Nothing
raises across this boundary; failures land in the result's `error` field and
unexpected exceptions are logged with their traceback first.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from netdash.base.config import LimitsConfig, get_config
from netdash.engine.executor import ProcessExecutor
from netdash.engine.port_scanner import PortScanner
from netdash.errors import ErrorCode, NetDashError, ProcessError, ValidationError, handle_error
from netdash.models import (
    ArpEntry,
    ArpScanResult,
    DiagnosticsResult,
    DnsLookupResult,
    ErrorResult,
    Hop,
    InterfacesResult,
    PingResult,
    PortScanResult,
    SystemInfo,
    TracerouteResult,
)
from netdash.net import host as host_info
from netdash.net.dns import SYSTEM_SERVER, DnsResolver
from netdash.parsers.arp import parse_arp_output, parse_ip_neigh_output
from netdash.parsers.ping import parse_ping_address, parse_ping_output
from netdash.parsers.traceroute import parse_traceroute_line, parse_traceroute_output
from netdash.toolkit.platforms import PingRequest, PlatformProfile, TracerouteRequest, current_profile
from netdash.toolkit.validation import (
    clamp,
    validate_dns_server,
    validate_host,
    validate_ports,
    validate_record_type,
)

logger = logging.getLogger(__name__)

Options = Optional[Mapping[str, Any]]
HopCallback = Callable[[Hop], Union[None, Awaitable[None]]]

# Boundary operation name -> DiagnosticsService method.
OPERATIONS: Dict[str, str] = {
    "ping": "ping",
    "traceroute": "traceroute",
    "portScan": "port_scan",
    "dnsLookup": "dns_lookup",
    "getInterfaces": "get_interfaces",
    "arpScan": "arp_scan",
    "getSystemInfo": "get_system_info",
}


def _option(options: Options, *names: str) -> Any:
    """First non-None value among `names` (camelCase aliases accepted)."""
    if not options:
        return None
    for name in names:
        value = options.get(name)
        if value is not None:
            return value
    return None


def _host_label(raw: Any) -> str:
    return raw if isinstance(raw, str) else ""


def _describe(error: NetDashError) -> str:
    return error.message


def _ping_count(raw: Any, limits: LimitsConfig) -> int:
    if raw is None:
        return limits.ping_count_default
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValidationError("Count must be an integer", ErrorCode.VALIDATION_INVALID)
    if isinstance(raw, float) and not raw.is_integer():
        raise ValidationError("Count must be an integer", ErrorCode.VALIDATION_INVALID)
    count = int(raw)
    if not 1 <= count <= limits.ping_count_max:
        raise ValidationError(
            f"Count must be between 1 and {limits.ping_count_max}",
            ErrorCode.VALIDATION_OUT_OF_RANGE,
        )
    return count


def packet_loss(sent: int, received: int) -> float:
    """Percentage of probes without a reply; never negative."""
    if sent <= 0:
        return 100.0
    return round(max(0.0, (sent - received) / sent * 100), 1)


class DiagnosticsService:
    """
    Facade over validation, platform profiles, the executor, the scanner,
    the parsers and the DNS resolver.

    Instances are stateless apart from their collaborators; concurrent calls
    share nothing.
    """

    def __init__(
        self,
        executor: Optional[ProcessExecutor] = None,
        profile: Optional[PlatformProfile] = None,
        resolver: Optional[DnsResolver] = None,
        limits: Optional[LimitsConfig] = None,
    ):
        self.profile = profile or (executor.profile if executor else current_profile())
        self.executor = executor or ProcessExecutor(profile=self.profile)
        self.resolver = resolver or DnsResolver()
        self.limits = limits or get_config().limits

    # ------------------------------------------------------------------
    # Boundary dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, operation: str, *args: Any) -> DiagnosticsResult:
        """Route a named operation with positional arguments."""
        method_name = OPERATIONS.get(operation)
        if method_name is None:
            logger.warning("Unknown operation requested: %r", operation)
            return ErrorResult(
                operation=str(operation),
                code=ErrorCode.IPC_UNKNOWN_OPERATION.value,
                error=f"Unknown operation '{operation}'",
            )
        method = getattr(self, method_name)
        try:
            return await method(*args)
        except TypeError as exc:
            # Operations never raise; a TypeError here is a bad argument list.
            logger.warning("Bad arguments for %s: %s", operation, exc)
            return ErrorResult(
                operation=operation,
                code=ErrorCode.IPC_PROTOCOL_ERROR.value,
                error=f"Invalid arguments for '{operation}'",
            )

    # ------------------------------------------------------------------
    # ping
    # ------------------------------------------------------------------

    async def ping(self, host: Any, options: Options = None) -> PingResult:
        started = time.perf_counter()
        label = _host_label(host)
        try:
            target = validate_host(host).unwrap()
            count = _ping_count(_option(options, "count"), self.limits)
            timeout_ms = clamp(
                _option(options, "timeoutMs", "timeout", "timeout_ms"),
                self.limits.ping_timeout_ms_min,
                self.limits.ping_timeout_ms_max,
                self.limits.ping_timeout_ms_default,
            )
            request = PingRequest(host=target, count=count, timeout_ms=timeout_ms)
            command = self.profile.ping_command(request)
            output = await self.executor.execute(
                command.binary, command.args, self.profile.ping_deadline_ms(request)
            )
        except NetDashError as exc:
            logger.warning("ping %s failed: %s", label or "<invalid>", exc)
            return PingResult(host=label, error=_describe(exc), elapsed_ms=self._elapsed(started))
        except Exception as exc:
            logger.exception("Unexpected error during ping")
            return PingResult(host=label, error=_describe(handle_error(exc, "ping")),
                              elapsed_ms=self._elapsed(started))

        times = parse_ping_output(output.stdout, self.profile.name)
        result = PingResult(
            host=target,
            alive=bool(times),
            resolved_ip=parse_ping_address(output.stdout),
            min=round(min(times), 3) if times else 0.0,
            max=round(max(times), 3) if times else 0.0,
            avg=round(sum(times) / len(times), 3) if times else 0.0,
            times=times,
            packet_loss=packet_loss(count, len(times)),
            elapsed_ms=self._elapsed(started),
            partial=output.partial,
            inconclusive=not times,
        )
        logger.info("ping %s: %d/%d replies", target, len(times), count)
        return result

    # ------------------------------------------------------------------
    # traceroute
    # ------------------------------------------------------------------

    async def traceroute(
        self,
        host: Any,
        options: Options = None,
        *,
        on_hop: Optional[HopCallback] = None,
    ) -> TracerouteResult:
        """
        Trace the path to `host`.

        With `on_hop`, each hop is handed over as soon as its line is printed;
        the returned result still carries the complete hop list.
        """
        label = _host_label(host)
        try:
            target = validate_host(host).unwrap()
            max_hops = clamp(
                _option(options, "maxHops", "max_hops"),
                self.limits.traceroute_max_hops_min,
                self.limits.traceroute_max_hops_max,
                self.limits.traceroute_max_hops_default,
            )
            timeout_ms = clamp(
                _option(options, "timeoutMs", "timeout", "timeout_ms"),
                self.limits.traceroute_timeout_ms_min,
                self.limits.traceroute_timeout_ms_max,
                self.limits.traceroute_timeout_ms_default,
            )
            request = TracerouteRequest(host=target, max_hops=max_hops, timeout_ms=timeout_ms)
            command = self.profile.traceroute_command(request)

            on_line = None
            if on_hop is not None:
                platform_name = self.profile.name

                async def on_line(line: str) -> None:
                    hop = parse_traceroute_line(line, platform_name)
                    if hop is None:
                        return
                    emitted = on_hop(hop)
                    if asyncio.iscoroutine(emitted):
                        await emitted

            output = await self.executor.execute(
                command.binary,
                command.args,
                self.profile.traceroute_deadline_ms(request),
                on_line=on_line,
            )
        except NetDashError as exc:
            logger.warning("traceroute %s failed: %s", label or "<invalid>", exc)
            return TracerouteResult(destination=label, error=_describe(exc))
        except Exception as exc:
            logger.exception("Unexpected error during traceroute")
            return TracerouteResult(destination=label, error=_describe(handle_error(exc, "traceroute")))

        hops = parse_traceroute_output(output.stdout, self.profile.name)
        logger.info("traceroute %s: %d hops%s", target, len(hops), " (partial)" if output.partial else "")
        return TracerouteResult(
            destination=target,
            hops=hops,
            partial=output.partial,
            inconclusive=not hops,
        )

    # ------------------------------------------------------------------
    # port scan
    # ------------------------------------------------------------------

    async def port_scan(self, host: Any, ports: Any = None, options: Options = None) -> PortScanResult:
        label = _host_label(host)
        try:
            target = validate_host(host).unwrap()
            port_list = validate_ports(ports, self.limits.scan_max_ports).unwrap()
            timeout_ms = clamp(
                _option(options, "timeoutMs", "timeout", "timeout_ms"),
                self.limits.scan_timeout_ms_min,
                self.limits.scan_timeout_ms_max,
                self.limits.scan_timeout_ms_default,
            )
            concurrency = clamp(
                _option(options, "concurrency", "concurrent"),
                self.limits.scan_concurrency_min,
                self.limits.scan_concurrency_max,
                self.limits.scan_concurrency_default,
            )
            scanner = PortScanner(timeout_ms=timeout_ms, concurrency=concurrency)
            states = await scanner.scan(target, port_list)
        except NetDashError as exc:
            logger.warning("port scan %s failed: %s", label or "<invalid>", exc)
            return PortScanResult(host=label, error=_describe(exc))
        except Exception as exc:
            logger.exception("Unexpected error during port scan")
            return PortScanResult(host=label, error=_describe(handle_error(exc, "portScan")))

        return PortScanResult(host=target, ports=states)

    # ------------------------------------------------------------------
    # DNS
    # ------------------------------------------------------------------

    async def dns_lookup(self, hostname: Any, options: Options = None) -> DnsLookupResult:
        started = time.perf_counter()
        label = _host_label(hostname)
        record_type = "A"
        server_label = SYSTEM_SERVER
        try:
            record_type = validate_record_type(_option(options, "type", "recordType")).unwrap()
            server = validate_dns_server(_option(options, "server")).unwrap()
            server_label = server or SYSTEM_SERVER
            target = validate_host(hostname, allow_underscore=True).unwrap()
            records = await self.resolver.resolve(target, record_type, server)
        except NetDashError as exc:
            logger.warning("dns lookup %s %s failed: %s", label or "<invalid>", record_type, exc)
            return DnsLookupResult(
                hostname=label,
                record_type=record_type,
                server=server_label,
                response_time=self._elapsed(started),
                error=_describe(exc),
            )
        except Exception as exc:
            logger.exception("Unexpected error during DNS lookup")
            return DnsLookupResult(
                hostname=label,
                record_type=record_type,
                server=server_label,
                response_time=self._elapsed(started),
                error=_describe(handle_error(exc, "dnsLookup")),
            )

        return DnsLookupResult(
            hostname=target,
            record_type=record_type,
            records=records,
            server=server_label,
            response_time=self._elapsed(started),
        )

    # ------------------------------------------------------------------
    # Local host (no untrusted input)
    # ------------------------------------------------------------------

    async def get_interfaces(self) -> InterfacesResult:
        try:
            return InterfacesResult(interfaces=host_info.list_interfaces())
        except Exception as exc:
            logger.exception("Failed to enumerate interfaces")
            return InterfacesResult(error=_describe(handle_error(exc, "getInterfaces")))

    async def get_system_info(self) -> SystemInfo:
        try:
            return host_info.system_info()
        except Exception as exc:
            logger.exception("Failed to read system info")
            return SystemInfo(error=_describe(handle_error(exc, "getSystemInfo")))

    async def arp_scan(self, subnet: Any = None) -> ArpScanResult:
        """
        Read the OS neighbour table.

        `subnet` is accepted for callers that always send one and is not used;
        the table covers every attached network.

        The profile lists candidate commands in preference order; a missing
        binary moves on to the next one.
        """
        last_error: Optional[NetDashError] = None
        for command in self.profile.arp_commands:
            try:
                output = await self.executor.execute(
                    command.binary, command.args, self.limits.arp_timeout_ms
                )
            except ProcessError as exc:
                last_error = exc
                if exc.kind == "NotFound":
                    logger.info("%s not available, trying next neighbour-table command", command.binary)
                    continue
                logger.warning("arp scan failed: %s", exc)
                return ArpScanResult(error=_describe(exc))
            except Exception as exc:
                logger.exception("Unexpected error during arp scan")
                return ArpScanResult(error=_describe(handle_error(exc, "arpScan")))

            entries = self._parse_neighbours(command.binary, output.stdout)
            logger.info("arp scan via %s: %d entries", command.binary, len(entries))
            return ArpScanResult(entries=entries, inconclusive=not entries and bool(output.stdout.strip()))

        message = _describe(last_error) if last_error else "No neighbour-table command available"
        return ArpScanResult(error=message)

    def _parse_neighbours(self, binary: str, stdout: str) -> List[ArpEntry]:
        if binary == "ip":
            return parse_ip_neigh_output(stdout)
        return parse_arp_output(stdout, self.profile.name)

    @staticmethod
    def _elapsed(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)


_service: Optional[DiagnosticsService] = None


def get_service() -> DiagnosticsService:
    """Shared facade instance for the server and CLI."""
    global _service
    if _service is None:
        _service = DiagnosticsService()
    return _service


def set_service(service: Optional[DiagnosticsService]) -> None:
    global _service
    _service = service
