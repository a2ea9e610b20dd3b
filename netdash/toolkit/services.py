"""Static lookup tables: well-known TCP services, MAC vendor prefixes."""
import re
from typing import Dict, Optional

# Informational only; a port being listed here says nothing about what is
# actually listening on it.
SERVICE_NAMES: Dict[int, str] = {
    20: "FTP-DATA",
    21: "FTP",
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    67: "DHCP",
    69: "TFTP",
    80: "HTTP",
    110: "POP3",
    123: "NTP",
    135: "MSRPC",
    139: "NetBIOS",
    143: "IMAP",
    161: "SNMP",
    179: "BGP",
    389: "LDAP",
    443: "HTTPS",
    445: "SMB",
    465: "SMTPS",
    514: "Syslog",
    587: "Submission",
    636: "LDAPS",
    993: "IMAPS",
    995: "POP3S",
    1433: "MSSQL",
    1521: "Oracle",
    1723: "PPTP",
    2049: "NFS",
    3306: "MySQL",
    3389: "RDP",
    5060: "SIP",
    5432: "PostgreSQL",
    5900: "VNC",
    6379: "Redis",
    8080: "HTTP-Proxy",
    8443: "HTTPS-Alt",
    9200: "Elasticsearch",
    27017: "MongoDB",
}

# First three octets, upper-case, colon separated.
OUI_VENDORS: Dict[str, str] = {
    # Cisco
    "00:00:0C": "Cisco Systems",
    "00:01:42": "Cisco Systems",
    "00:1A:A1": "Cisco Systems",
    "00:1B:54": "Cisco Systems",
    "00:26:0B": "Cisco Systems",
    "58:97:BD": "Cisco Systems",
    "F4:CF:E2": "Cisco Systems",
    # Juniper
    "00:05:85": "Juniper Networks",
    "00:12:1E": "Juniper Networks",
    "2C:6B:F5": "Juniper Networks",
    "84:B5:9C": "Juniper Networks",
    # Arista
    "00:1C:73": "Arista Networks",
    "28:99:3A": "Arista Networks",
    "44:4C:A8": "Arista Networks",
    # HPE / Aruba
    "00:0B:86": "Aruba Networks",
    "94:B4:0F": "Aruba Networks",
    "3C:D9:2B": "Hewlett Packard",
    # Fortinet / Palo Alto
    "00:09:0F": "Fortinet",
    "90:6C:AC": "Fortinet",
    "00:1B:17": "Palo Alto Networks",
    "8C:EA:1B": "Palo Alto Networks",
    # Ubiquiti / MikroTik
    "24:A4:3C": "Ubiquiti Networks",
    "68:72:51": "Ubiquiti Networks",
    "78:8A:20": "Ubiquiti Networks",
    "FC:EC:DA": "Ubiquiti Networks",
    "4C:5E:0C": "MikroTik",
    "E4:8D:8C": "MikroTik",
    # Virtualisation
    "00:05:69": "VMware",
    "00:0C:29": "VMware",
    "00:50:56": "VMware",
    "08:00:27": "Oracle VirtualBox",
    "52:54:00": "QEMU/KVM",
    "00:15:5D": "Microsoft Hyper-V",
    # Common endpoints
    "B8:27:EB": "Raspberry Pi Foundation",
    "DC:A6:32": "Raspberry Pi Trading",
    "00:1E:C2": "Apple",
    "3C:22:FB": "Apple",
    "F0:18:98": "Apple",
    "00:1A:11": "Google",
    "F4:F5:D8": "Google",
}

_HEX_RE = re.compile(r"[^0-9a-fA-F]")


def get_service_name(port: int) -> Optional[str]:
    return SERVICE_NAMES.get(port)


def normalize_mac(raw: str) -> Optional[str]:
    """
    Normalise a MAC address to colon-separated lowercase hex.

    Accepts colon/hyphen separated, Cisco dotted (0011.2233.4455) and the
    unpadded octets macOS prints (0:1b:2:3c:4:5). Returns None for anything
    that is not six octets.
    """
    if not raw:
        return None
    value = raw.strip()
    parts = re.split(r"[:-]", value)
    if len(parts) == 6 and all(1 <= len(p) <= 2 for p in parts):
        if _HEX_RE.search("".join(parts)):
            return None
        return ":".join(p.zfill(2).lower() for p in parts)

    cleaned = _HEX_RE.sub("", value)
    if len(cleaned) != 12 or len(value) - len(cleaned) > 5:
        return None
    cleaned = cleaned.lower()
    return ":".join(cleaned[i:i + 2] for i in range(0, 12, 2))


def lookup_vendor(mac: str) -> Optional[str]:
    cleaned = _HEX_RE.sub("", mac or "").upper()
    if len(cleaned) < 6:
        return None
    oui = f"{cleaned[0:2]}:{cleaned[2:4]}:{cleaned[4:6]}"
    return OUI_VENDORS.get(oui)
