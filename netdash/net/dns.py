"""
netdash/net/dns.py
Typed DNS lookups through dnspython.

Each lookup builds its own resolver instance. A custom server is configured
on that instance only, so an override can never leak into a later or
concurrent lookup; there is no process-wide resolver state to save and
restore.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import dns.asyncresolver
import dns.exception
import dns.resolver
import dns.reversename

from netdash.base.config import get_config
from netdash.errors import ErrorCode, ResolutionError
from netdash.models import DnsRecord
from netdash.toolkit.validation import is_ipv4, is_ipv6

logger = logging.getLogger(__name__)

SYSTEM_SERVER = "system"


def _strip_dot(name) -> str:
    return str(name).rstrip(".")


def format_rdata(record_type: str, rdata) -> str:
    """Render one answer record as the single-line value the UI shows."""
    if record_type in ("A", "AAAA"):
        return rdata.address
    if record_type in ("CNAME", "NS", "PTR"):
        return _strip_dot(rdata.target)
    if record_type == "MX":
        return f"{rdata.preference} {_strip_dot(rdata.exchange)}"
    if record_type == "TXT":
        return "".join(part.decode("utf-8", errors="replace") for part in rdata.strings)
    if record_type == "SOA":
        return (
            f"{_strip_dot(rdata.mname)} {_strip_dot(rdata.rname)} {rdata.serial} "
            f"{rdata.refresh} {rdata.retry} {rdata.expire} {rdata.minimum}"
        )
    if record_type == "SRV":
        return f"{rdata.priority} {rdata.weight} {rdata.port} {_strip_dot(rdata.target)}"
    return rdata.to_text()


class DnsResolver:
    """
    Per-call resolver factory.

    `server=None` uses the system configuration (resolv.conf / registry);
    otherwise a resolver is built with `configure=False` and the single
    override nameserver.
    """

    def __init__(self, timeout_ms: Optional[int] = None):
        self.timeout_ms = timeout_ms if timeout_ms is not None else get_config().limits.dns_timeout_ms

    def make_resolver(self, server: Optional[str]) -> dns.asyncresolver.Resolver:
        if server:
            resolver = dns.asyncresolver.Resolver(configure=False)
            resolver.nameservers = [server]
        else:
            resolver = dns.asyncresolver.Resolver()
        resolver.lifetime = self.timeout_ms / 1000
        resolver.timeout = min(resolver.lifetime, 2.0)
        return resolver

    async def resolve(self, hostname: str, record_type: str = "A", server: Optional[str] = None) -> List[DnsRecord]:
        """
        Resolve `hostname` for `record_type`.

        PTR lookups against an IP literal are converted to the reverse name.
        Raises ResolutionError on any DNS failure.
        """
        qname = hostname
        if record_type == "PTR" and (is_ipv4(hostname) or is_ipv6(hostname)):
            qname = dns.reversename.from_address(hostname).to_text()

        try:
            resolver = self.make_resolver(server)
            answer = await resolver.resolve(qname, record_type)
        except dns.resolver.NXDOMAIN:
            raise ResolutionError(ErrorCode.DNS_NXDOMAIN, f"Domain '{hostname}' does not exist")
        except dns.resolver.NoAnswer:
            raise ResolutionError(ErrorCode.DNS_NO_ANSWER, f"No {record_type} records found for '{hostname}'")
        except dns.resolver.NoNameservers as exc:
            raise ResolutionError(ErrorCode.DNS_NO_NAMESERVERS, f"No nameserver could answer: {exc}")
        except dns.exception.Timeout:
            raise ResolutionError(ErrorCode.DNS_TIMEOUT, f"DNS query timed out after {self.timeout_ms}ms")
        except dns.exception.DNSException as exc:
            raise ResolutionError(ErrorCode.DNS_FAILED, f"DNS lookup failed: {exc}")

        ttl = answer.rrset.ttl if answer.rrset is not None else None
        records = [
            DnsRecord(type=record_type, value=format_rdata(record_type, rdata), ttl=ttl)
            for rdata in answer
        ]
        logger.debug(
            "Resolved %s %s via %s: %d records",
            hostname, record_type, server or SYSTEM_SERVER, len(records),
        )
        return records
