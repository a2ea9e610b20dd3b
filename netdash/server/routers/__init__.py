"""
Router initialization module.

Exports the API routers mounted under /v1.
"""
from netdash.server.routers import auth, network, system

__all__ = [
    "auth",
    "network",
    "system",
]
