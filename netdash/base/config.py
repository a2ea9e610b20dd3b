# ============================================================================
# netdash/base/config.py
# Engine Configuration
# ============================================================================
#
# PURPOSE:
# Every tunable of the diagnostics engine lives here: the clamp bounds applied
# to caller-supplied options, process-execution timings, logging, and the
# local API server binding.
#
# KEY CONCEPTS:
# 1. Frozen dataclasses grouped per concern
# 2. Environment variables (NETDASH_*) override defaults via from_env()
# 3. One shared instance reached through get_config(); tests swap it with
#    set_config()
#
# ============================================================================

from __future__ import annotations

import ipaddress
import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


# ============================================================================
# Operation Limits
# ============================================================================
# Caller-supplied numeric options are clamped into these ranges. Ping count
# and port-list size are the exceptions: exceeding them is a hard error.

@dataclass(frozen=True)
class LimitsConfig:
    ping_count_default: int = 4
    ping_count_max: int = 10
    ping_timeout_ms_default: int = 5000
    ping_timeout_ms_min: int = 100
    ping_timeout_ms_max: int = 30000

    traceroute_max_hops_default: int = 30
    traceroute_max_hops_min: int = 1
    traceroute_max_hops_max: int = 64
    traceroute_timeout_ms_default: int = 5000
    traceroute_timeout_ms_min: int = 100
    traceroute_timeout_ms_max: int = 10000

    scan_timeout_ms_default: int = 3000
    scan_timeout_ms_min: int = 500
    scan_timeout_ms_max: int = 10000
    scan_concurrency_default: int = 50
    scan_concurrency_min: int = 1
    scan_concurrency_max: int = 200
    scan_max_ports: int = 10000

    dns_timeout_ms: int = 5000

    # Delay between the cooperative terminate and the forceful kill of a
    # diagnostic process that outlived its deadline.
    kill_grace_ms: int = 2000

    arp_timeout_ms: int = 10000


# ============================================================================
# Security & Access Control
# ============================================================================

@dataclass(frozen=True)
class SecurityConfig:
    api_token: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    require_auth: bool = False
    allowed_origins: tuple = ("http://127.0.0.1:*", "http://localhost:*", "app://.")


# ============================================================================
# Storage
# ============================================================================

@dataclass(frozen=True)
class StorageConfig:
    base_dir: Path = field(default_factory=lambda: Path.home() / ".netdash")


# ============================================================================
# Logging
# ============================================================================

@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file_enabled: bool = False
    file_name: str = "netdash.log"
    max_file_size_mb: int = 10
    backup_count: int = 5


# ============================================================================
# Master Configuration Container
# ============================================================================

@dataclass
class NetDashConfig:
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log: LogConfig = field(default_factory=LogConfig)
    debug: bool = False
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    @classmethod
    def from_env(cls) -> "NetDashConfig":
        limits = LimitsConfig(
            dns_timeout_ms=int(os.getenv("NETDASH_DNS_TIMEOUT_MS", "5000")),
            kill_grace_ms=int(os.getenv("NETDASH_KILL_GRACE_MS", "2000")),
            scan_max_ports=int(os.getenv("NETDASH_SCAN_MAX_PORTS", "10000")),
        )

        token = os.getenv("NETDASH_API_TOKEN")
        if not token:
            token = secrets.token_urlsafe(32)

        origins_str = os.getenv("NETDASH_ALLOWED_ORIGINS", "")
        origins = (
            tuple(o.strip() for o in origins_str.split(",") if o.strip())
            if origins_str
            else SecurityConfig.allowed_origins
        )

        security = SecurityConfig(
            api_token=token,
            require_auth=_env_bool("NETDASH_REQUIRE_AUTH"),
            allowed_origins=origins,
        )

        base_dir = Path(os.getenv("NETDASH_DATA_DIR", str(Path.home() / ".netdash")))
        storage = StorageConfig(base_dir=base_dir)

        log_file = os.getenv("NETDASH_LOG_FILE")
        log = LogConfig(
            level=os.getenv("NETDASH_LOG_LEVEL", "INFO"),
            file_enabled=bool(log_file),
            file_name=log_file or LogConfig.file_name,
        )

        return cls(
            limits=limits,
            security=security,
            storage=storage,
            log=log,
            debug=_env_bool("NETDASH_DEBUG"),
            api_host=os.getenv("NETDASH_API_HOST", "127.0.0.1"),
            api_port=int(os.getenv("NETDASH_API_PORT", "8765")),
        )


def is_network_exposed(host: str) -> bool:
    """True when the API would listen on something other than loopback."""
    if host in ("localhost", ""):
        return host == ""
    try:
        return not ipaddress.ip_address(host).is_loopback
    except ValueError:
        return True


# ============================================================================
# Global Configuration Singleton
# ============================================================================

_config: Optional[NetDashConfig] = None


def get_config() -> NetDashConfig:
    """Return the shared configuration, loading it from the environment once."""
    global _config
    if _config is None:
        _config = NetDashConfig.from_env()
    return _config


def set_config(config: Optional[NetDashConfig]) -> None:
    """Replace the shared configuration (tests). Passing None forces a reload."""
    global _config
    _config = config


def setup_logging(config: Optional[NetDashConfig] = None) -> None:
    """
    Configure the root logger from LogConfig.

    Console output always; a rotating file under the data directory when
    file logging is enabled. Call once at startup.
    """
    cfg = config or get_config()

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_enabled:
        from logging.handlers import RotatingFileHandler

        log_path = Path(cfg.log.file_name)
        if not log_path.is_absolute():
            log_path = cfg.storage.base_dir / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path,
                maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
                backupCount=cfg.log.backup_count,
                encoding="utf-8",
            )
        )

    level = logging.DEBUG if cfg.debug else getattr(logging, cfg.log.level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
    logger.debug("Logging configured at %s", logging.getLevelName(level))
