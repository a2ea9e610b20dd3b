"""ARP / neighbour-table parser tests pinned to literal tool output."""
from netdash.parsers.arp import parse_arp_output, parse_ip_neigh_output

WINDOWS_OUTPUT = """
Interface: 192.168.1.10 --- 0xb
  Internet Address      Physical Address      Type
  192.168.1.1           00-50-56-c0-00-08     dynamic
  192.168.1.255         ff-ff-ff-ff-ff-ff     static
  224.0.0.22            01-00-5e-00-00-16     static
"""

MACOS_OUTPUT = """? (192.168.1.1) at 0:50:56:c0:0:8 on en0 ifscope [ethernet]
? (192.168.1.23) at b8:27:eb:12:34:56 on en0 ifscope [ethernet]
? (192.168.1.99) at (incomplete) on en0 ifscope [ethernet]
"""

LINUX_OUTPUT = """? (10.0.0.1) at 52:54:00:12:34:56 [ether] on eth0
gateway (10.0.0.254) at 00:0c:29:aa:bb:cc [ether] on eth1
? (10.0.0.7) at <incomplete> on eth0
"""

IP_NEIGH_OUTPUT = """10.0.0.1 dev eth0 lladdr 52:54:00:12:34:56 REACHABLE
10.0.0.9 dev eth0  FAILED
fe80::1 dev eth0 lladdr 00:50:56:aa:bb:cc router STALE
"""


def test_windows_arp():
    entries = parse_arp_output(WINDOWS_OUTPUT, "windows")
    assert len(entries) == 3
    first = entries[0]
    assert first.ip == "192.168.1.1"
    assert first.mac == "00:50:56:c0:00:08"
    assert first.interface == "192.168.1.10"
    assert first.vendor == "VMware"


def test_macos_arp_pads_octets_and_skips_incomplete():
    entries = parse_arp_output(MACOS_OUTPUT, "darwin")
    assert [e.ip for e in entries] == ["192.168.1.1", "192.168.1.23"]
    assert entries[0].mac == "00:50:56:c0:00:08"
    assert entries[0].interface == "en0"
    assert entries[1].vendor == "Raspberry Pi Foundation"


def test_linux_arp():
    entries = parse_arp_output(LINUX_OUTPUT, "linux")
    assert [(e.ip, e.interface) for e in entries] == [("10.0.0.1", "eth0"), ("10.0.0.254", "eth1")]
    assert entries[0].vendor == "QEMU/KVM"


def test_ip_neigh():
    entries = parse_ip_neigh_output(IP_NEIGH_OUTPUT)
    assert [e.ip for e in entries] == ["10.0.0.1", "fe80::1"]
    assert entries[0].interface == "eth0"
    assert entries[1].mac == "00:50:56:aa:bb:cc"


def test_invalid_mac_lines_skipped():
    assert parse_arp_output("? (10.0.0.1) at zz:zz:zz:zz:zz:zz on eth0", "linux") == []
    assert parse_arp_output("", "windows") == []
    assert parse_ip_neigh_output("nonsense") == []
