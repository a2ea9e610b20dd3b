# ============================================================================
# netdash/toolkit/__init__.py
# Toolkit Package - external tool integration layer
# ============================================================================
#
# PURPOSE:
# Everything needed to turn a validated request into an exact command line
# for the local platform's diagnostic binaries, without the rest of the
# engine knowing which OS it runs on.
#
# KEY MODULES:
# - **validation.py**: Host / port / DNS-server validation (injection firewall)
# - **platforms.py**: Per-OS argument builders for ping, traceroute and arp
# - **registry.py**: Binary location tables and path resolution
# - **services.py**: Static port→service and OUI→vendor lookup tables
#
# ============================================================================
