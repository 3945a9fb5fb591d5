# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides the YAML-backed prober settings and tunable defaults.
"""

from core.config.defaults import (
    PoolDefaults,
    ConnectionDefaults,
    ReconnectDefaults,
    get_defaults,
)
from core.config.settings import (
    ConfigError,
    ProbeConfig,
    load_config,
    parse_duration,
    validate_config,
)

__all__ = [
    "PoolDefaults",
    "ConnectionDefaults",
    "ReconnectDefaults",
    "get_defaults",
    "ConfigError",
    "ProbeConfig",
    "load_config",
    "parse_duration",
    "validate_config",
]
