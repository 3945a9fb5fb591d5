# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for connection pools, DSNs and probe heuristics
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Values that are not part of the YAML file but that operators may still
want to tune. Each group can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PoolDefaults:
    """
    Connection pool policy applied to every probe target.

    A probe needs exactly one connection per target. Lifetime and idle
    bounds force fresh connections so a socket the server already dropped
    is not silently reused.
    """
    max_open: int = 1
    max_idle: int = 1
    max_lifetime_seconds: float = 300.0  # 5 min
    max_idle_seconds: float = 120.0  # 2 min

    @classmethod
    def from_env(cls) -> "PoolDefaults":
        """Create from environment variables."""
        return cls(
            max_lifetime_seconds=float(os.getenv("DB_PROBE_POOL_MAX_LIFETIME_SECONDS", 300)),
            max_idle_seconds=float(os.getenv("DB_PROBE_POOL_MAX_IDLE_SECONDS", 120)),
        )


@dataclass(frozen=True)
class ConnectionDefaults:
    """
    Defaults used when synthesising connection strings.
    """
    # MySQL dial / read / write timeouts (seconds)
    mysql_timeout_seconds: int = 5

    # Oracle service name when the config leaves it empty
    oracle_service_name: str = "ORCL"

    # Connect timeout = clamp(2 x probe_timeout, min, max)
    connect_timeout_factor: float = 2.0
    connect_timeout_min_seconds: int = 3
    connect_timeout_max_seconds: int = 10

    # PostgreSQL maintenance database used for probing
    postgres_database: str = "postgres"

    def connect_timeout(self, probe_timeout: float) -> int:
        """Connect timeout derived from the probe timeout, in whole seconds."""
        seconds = int(probe_timeout * self.connect_timeout_factor)
        return max(self.connect_timeout_min_seconds, min(seconds, self.connect_timeout_max_seconds))

    @classmethod
    def from_env(cls) -> "ConnectionDefaults":
        """Create from environment variables."""
        return cls(
            mysql_timeout_seconds=int(os.getenv("DB_PROBE_MYSQL_TIMEOUT_SECONDS", 5)),
            oracle_service_name=os.getenv("DB_PROBE_ORACLE_SERVICE_NAME", "ORCL"),
        )


@dataclass(frozen=True)
class ReconnectDefaults:
    """
    Thresholds for the reconnect heuristic.

    A successful ping after a gap longer than ``gap_factor`` probe
    intervals that also took longer than ``min_ping_seconds`` is counted
    as a reconnect.
    """
    gap_factor: float = 2.0
    min_ping_seconds: float = 0.05  # 50 ms


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    pool: PoolDefaults = field(default_factory=PoolDefaults)
    connection: ConnectionDefaults = field(default_factory=ConnectionDefaults)
    reconnect: ReconnectDefaults = field(default_factory=ReconnectDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            pool=PoolDefaults.from_env(),
            connection=ConnectionDefaults.from_env(),
            reconnect=ReconnectDefaults(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PoolDefaults",
    "ConnectionDefaults",
    "ReconnectDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
