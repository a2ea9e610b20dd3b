import pytest

from netdash.toolkit.services import get_service_name, lookup_vendor, normalize_mac


def test_service_names():
    assert get_service_name(22) == "SSH"
    assert get_service_name(443) == "HTTPS"
    assert get_service_name(3389) == "RDP"
    assert get_service_name(31337) is None


@pytest.mark.parametrize("raw,expected", [
    ("00:11:22:33:44:55", "00:11:22:33:44:55"),
    ("00-1A-2B-3C-4D-5E", "00:1a:2b:3c:4d:5e"),
    ("0011.2233.4455", "00:11:22:33:44:55"),
    ("001122334455", "00:11:22:33:44:55"),
    ("0:1b:2:3c:4:5", "00:1b:02:3c:04:05"),
    (" AA:BB:CC:DD:EE:FF ", "aa:bb:cc:dd:ee:ff"),
])
def test_normalize_mac(raw, expected):
    assert normalize_mac(raw) == expected


@pytest.mark.parametrize("raw", ["", "00:11:22:33:44", "00:11:22:33:44:55:66", "zz:11:22:33:44:55", "(incomplete)"])
def test_normalize_mac_rejects_invalid(raw):
    assert normalize_mac(raw) is None


def test_lookup_vendor():
    assert lookup_vendor("00:50:56:aa:bb:cc") == "VMware"
    assert lookup_vendor("b8:27:eb:01:02:03") == "Raspberry Pi Foundation"
    assert lookup_vendor("02:00:00:00:00:01") is None
    assert lookup_vendor("") is None
