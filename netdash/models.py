"""
netdash/models.py
Result types returned across the request boundary.

Every top-level result carries a literal `kind` so the boundary hands back a
tagged union, and an optional `error` instead of raising. Python attributes
are snake_case; the wire format is camelCase to match the UI.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------------
# Ping
# ---------------------------------------------------------------------------

class PingResult(WireModel):
    kind: Literal["ping"] = "ping"
    host: str
    alive: bool = False
    resolved_ip: Optional[str] = None
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    times: List[float] = Field(default_factory=list)
    packet_loss: float = 100.0
    elapsed_ms: float = 0.0
    partial: bool = False
    inconclusive: bool = False
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Traceroute
# ---------------------------------------------------------------------------

class Hop(WireModel):
    hop: int
    ip: str = "*"
    hostname: Optional[str] = None
    rtt: List[float] = Field(default_factory=list)
    timeout: bool = False


class TracerouteResult(WireModel):
    kind: Literal["traceroute"] = "traceroute"
    destination: str
    hops: List[Hop] = Field(default_factory=list)
    partial: bool = False
    inconclusive: bool = False
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Port scan
# ---------------------------------------------------------------------------

PortStateName = Literal["open", "closed", "filtered"]


class PortState(WireModel):
    port: int
    state: PortStateName
    service: Optional[str] = None
    response_time: Optional[float] = None


class PortScanResult(WireModel):
    kind: Literal["port_scan"] = "port_scan"
    host: str
    ports: List[PortState] = Field(default_factory=list)
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# DNS
# ---------------------------------------------------------------------------

class DnsRecord(WireModel):
    type: str
    value: str
    ttl: Optional[int] = None


class DnsLookupResult(WireModel):
    kind: Literal["dns_lookup"] = "dns_lookup"
    hostname: str
    record_type: str = "A"
    records: List[DnsRecord] = Field(default_factory=list)
    server: str = "system"
    response_time: float = 0.0
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Host inspection
# ---------------------------------------------------------------------------

class InterfaceInfo(WireModel):
    name: str
    mac: str = "00:00:00:00:00:00"
    ipv4: Optional[str] = None
    netmask: Optional[str] = None
    ipv6: Optional[str] = None
    internal: bool = False


class InterfacesResult(WireModel):
    kind: Literal["interfaces"] = "interfaces"
    interfaces: List[InterfaceInfo] = Field(default_factory=list)
    error: Optional[str] = None


class ArpEntry(WireModel):
    ip: str
    mac: str
    interface: Optional[str] = None
    vendor: Optional[str] = None


class ArpScanResult(WireModel):
    kind: Literal["arp_scan"] = "arp_scan"
    entries: List[ArpEntry] = Field(default_factory=list)
    inconclusive: bool = False
    error: Optional[str] = None


class SystemInfo(WireModel):
    kind: Literal["system_info"] = "system_info"
    hostname: str = ""
    platform: str = ""
    arch: str = ""
    cpu_count: int = 0
    total_memory: int = 0
    uptime: float = 0.0
    error: Optional[str] = None


class ErrorResult(WireModel):
    """Returned by the dispatcher when the request itself cannot be routed."""

    kind: Literal["error"] = "error"
    operation: str
    code: str
    error: str


DiagnosticsResult = Union[
    PingResult,
    TracerouteResult,
    PortScanResult,
    DnsLookupResult,
    InterfacesResult,
    ArpScanResult,
    SystemInfo,
    ErrorResult,
]
