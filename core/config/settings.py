# ============================================================================
# PROBER SETTINGS
# ============================================================================
# STATUS: Core - Configuration loading and validation
# PURPOSE: Load the YAML target list and probe timings, apply env overrides
# CREATED: 19 OCT 2026
# ============================================================================
"""
Prober Settings

Loads ``configs/config.yaml`` (or the file named by ``DB_PROBE_CONFIG``)
into a validated ``ProbeConfig``.

Top-level scalars can be overridden from the environment:
    DB_PROBE_LISTEN_ADDRESS
    DB_PROBE_PROBE_INTERVAL
    DB_PROBE_PROBE_TIMEOUT

Durations accept plain numbers (seconds) or strings with a unit:
    "2s", "800ms", "1.5s", "1m"
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from core.logging import ComponentType, get_logger
from core.models.target import TargetDescriptor

logger = get_logger(__name__, ComponentType.CONFIG)

DEFAULT_CONFIG_PATH = "configs/config.yaml"
ENV_PREFIX = "DB_PROBE_"

# Keys that may be overridden by DB_PROBE_<KEY>
_ENV_OVERRIDABLE = ("listen_address", "probe_interval", "probe_timeout")

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class ConfigError(ValueError):
    """Raised when the configuration cannot be loaded or is invalid."""


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Args:
        value: Number of seconds, or a string such as "2s" / "800ms"

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"invalid duration: {value!r}")

    amount, unit = match.groups()
    return float(amount) * _UNIT_SECONDS[(unit or "s").lower()]


class ProbeConfig(BaseModel):
    """
    Root configuration.

    Example YAML:
        listen_address: ":8080"
        probe_interval: 2s
        probe_timeout: 1s
        databases:
          - name: orders-primary
            type: mysql
            ...
    """

    listen_address: str = Field(default=":8080")
    probe_interval: float = Field(default=2.0, description="Seconds between probe cycles")
    probe_timeout: float = Field(default=1.0, description="Deadline of one probe cycle")
    databases: List[TargetDescriptor] = Field(default_factory=list)

    @field_validator("probe_interval", "probe_timeout", mode="before")
    @classmethod
    def _parse_duration(cls, v: Any) -> float:
        return parse_duration(v)

    @property
    def listen_host(self) -> str:
        host, _ = _split_address(self.listen_address)
        return host

    @property
    def listen_port(self) -> int:
        _, port = _split_address(self.listen_address)
        return port


def _split_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` (``:port`` means all interfaces)."""
    host, _, port = address.rpartition(":")
    return host or "0.0.0.0", int(port)


# ============================================================================
# VALIDATION
# ============================================================================

def validate_config(cfg: ProbeConfig) -> None:
    """
    Validate a parsed configuration.

    Raises:
        ConfigError: On the first invalid setting
    """
    if cfg.probe_interval <= 0:
        raise ConfigError("probe_interval must be greater than 0")
    if cfg.probe_timeout <= 0:
        raise ConfigError("probe_timeout must be greater than 0")

    # A timeout longer than the interval would let one cycle eat into the next
    if cfg.probe_timeout > cfg.probe_interval:
        raise ConfigError(
            f"probe_timeout ({cfg.probe_timeout}s) must not exceed probe_interval "
            f"({cfg.probe_interval}s); 40%-60% of the interval is recommended"
        )

    recommended = cfg.probe_interval / 2
    min_timeout = cfg.probe_interval / 3
    max_timeout = cfg.probe_interval * 3 / 5

    if cfg.probe_timeout < min_timeout:
        logger.warning(
            "probe_timeout is short, normal network latency may be reported as timeouts",
            extra={
                "probe_timeout": cfg.probe_timeout,
                "probe_interval": cfg.probe_interval,
                "recommended_timeout": recommended,
                "min_timeout": min_timeout,
            },
        )
    elif cfg.probe_timeout > max_timeout:
        logger.warning(
            "probe_timeout is long and may delay the next probe; 40%-60% of the interval is recommended",
            extra={
                "probe_timeout": cfg.probe_timeout,
                "probe_interval": cfg.probe_interval,
                "recommended_timeout": recommended,
                "max_timeout": max_timeout,
            },
        )

    if not cfg.databases:
        raise ConfigError("databases must not be empty")

    seen = set()
    for i, db in enumerate(cfg.databases):
        if not db.name:
            raise ConfigError(f"databases[{i}].name must not be empty")
        if db.name in seen:
            raise ConfigError(f"duplicate database name: {db.name}")
        seen.add(db.name)

        if not db.project:
            raise ConfigError(f"databases[{i}].project must not be empty")
        if not db.env:
            raise ConfigError(f"databases[{i}].env must not be empty")

        # Without a DSN every connection field is required
        if not db.dsn:
            for field_name in ("host", "port", "user", "password"):
                if not getattr(db, field_name):
                    raise ConfigError(
                        f"databases[{i}].{field_name} must not be empty when dsn is not set"
                    )


# ============================================================================
# LOADING
# ============================================================================

def _apply_env_overrides(data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """Overlay DB_PROBE_<KEY> environment variables on top-level keys."""
    merged = dict(data)
    for key in _ENV_OVERRIDABLE:
        env_key = f"{ENV_PREFIX}{key.upper()}"
        if env_key in environ:
            merged[key] = environ[env_key]
    return merged


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProbeConfig:
    """
    Load and validate the prober configuration.

    Args:
        path: Config file path (defaults to DB_PROBE_CONFIG or configs/config.yaml)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated ProbeConfig

    Raises:
        ConfigError: If the file is missing, malformed or invalid
    """
    environ = os.environ if environ is None else environ
    config_path = Path(path or environ.get(f"{ENV_PREFIX}CONFIG", DEFAULT_CONFIG_PATH))

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"failed to read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a mapping")

    data = _apply_env_overrides(data, environ)

    try:
        cfg = ProbeConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration in {config_path}: {e}") from e

    validate_config(cfg)

    logger.info(f"Configuration loaded: {config_path}")
    return cfg


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "ProbeConfig",
    "parse_duration",
    "validate_config",
    "load_config",
]
