# ============================================================================
# PROBE TARGET
# ============================================================================
# STATUS: Prober - Runtime state of one configured database
# PURPOSE: Descriptor + open connection + labels + lock-guarded health state
# CREATED: 19 OCT 2026
# ============================================================================
"""
Probe Target

A ProbeTarget is built once at startup from a TargetDescriptor and lives
until shutdown. It bundles:
- The descriptor and the driver that serves its family
- One pooled SQLConnection, used only by the target's own probe loop
- The metric label set, derived once (including the resolved IP)
- A small health block (last successful ping, last up/down, last error)

The health block is written by the probe loop and read by the HTTP status
endpoints, which may run in another thread, so it is guarded by a lock.
"""

import asyncio
import ipaddress
import socket
import threading
from dataclasses import asdict, dataclass, replace
from typing import Callable, Dict, Optional

from pydantic import BaseModel, Field

from core.contracts import DatabaseFamily
from core.logging import ComponentType, get_logger
from core.models.target import TargetDescriptor
from infrastructure.drivers import ProberDriver, SQLConnection, UnsupportedDatabaseError, get_driver
from infrastructure.metrics import ProbeMetrics

logger = get_logger(__name__, ComponentType.PROBER)


class TargetConstructionError(Exception):
    """A target could not be built; fatal to startup."""

    def __init__(self, target_name: str, message: str):
        self.target_name = target_name
        super().__init__(f"failed to initialise database target [{target_name}]: {message}")


# ============================================================================
# LABELS
# ============================================================================

@dataclass(frozen=True)
class TargetLabels:
    """Fixed metric label set of a target."""
    project: str
    env: str
    db_name: str
    db_type: str
    db_host: str
    db_ip: str
    role: str = ""

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_descriptor(cls, descriptor: TargetDescriptor, ip: str) -> "TargetLabels":
        return cls(
            project=descriptor.project,
            env=descriptor.env,
            db_name=descriptor.name,
            db_type=descriptor.type.value,
            db_host=descriptor.host,
            db_ip=ip,
            role=descriptor.role,
        )


async def resolve_ip(host: str) -> str:
    """
    Resolve a host to the IP used in the ``db_ip`` label.

    Literal addresses are normalised and returned as-is. Names are looked
    up, preferring an IPv4 result. Any failure falls back to the host
    string itself.
    """
    if not host:
        return host

    try:
        return str(ipaddress.ip_address(host.strip("[]")))
    except ValueError:
        pass

    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except (OSError, UnicodeError) as e:
        logger.warning(f"Could not resolve {host}, using host name as db_ip: {e}")
        return host

    for family, _, _, _, sockaddr in infos:
        if family == socket.AF_INET:
            return sockaddr[0]
    if infos:
        return infos[0][4][0]
    return host


# ============================================================================
# HEALTH STATE
# ============================================================================

@dataclass
class TargetHealth:
    """Mutable health block; only touched under ProbeTarget's lock."""
    # Monotonic time of the most recent successful ping, None if never
    last_ping_time: Optional[float] = None
    # None until the first cycle completes
    last_up_status: Optional[bool] = None
    last_error: Optional[str] = None


class TargetInfo(BaseModel):
    """Status snapshot exposed by /targets."""
    name: str
    type: str
    host: str
    ip: str
    last_error: Optional[str] = Field(default=None)


class ProbeTarget:
    """One database endpoint under continuous probing."""

    def __init__(
        self,
        descriptor: TargetDescriptor,
        driver: ProberDriver,
        connection: SQLConnection,
        labels: TargetLabels,
        ip: str,
        query: str,
        masked_dsn: str,
    ):
        self.descriptor = descriptor
        self.driver = driver
        self.connection = connection
        self.labels = labels
        self.ip = ip
        self.query = query
        self.masked_dsn = masked_dsn

        self._lock = threading.Lock()
        self._health = TargetHealth()

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def family(self) -> DatabaseFamily:
        return self.descriptor.type

    @property
    def service_name(self) -> Optional[str]:
        return self.driver.service_name(self.descriptor)

    # ------------------------------------------------------------------
    # Health state
    # ------------------------------------------------------------------

    @property
    def last_ping_time(self) -> Optional[float]:
        with self._lock:
            return self._health.last_ping_time

    def mark_ping_success(self, now: float) -> None:
        with self._lock:
            self._health.last_ping_time = now

    def record_outcome(self, up: bool, error: Optional[str]) -> bool:
        """
        Store the cycle result.

        Returns:
            True if the up/down status changed (always True on the first cycle)
        """
        with self._lock:
            changed = self._health.last_up_status is None or self._health.last_up_status != up
            self._health.last_up_status = up
            self._health.last_error = error
        return changed

    def health(self) -> TargetHealth:
        """Copy of the health block."""
        with self._lock:
            return replace(self._health)

    def info(self) -> TargetInfo:
        with self._lock:
            last_error = self._health.last_error
        return TargetInfo(
            name=self.name,
            type=self.family.value,
            host=self.descriptor.host,
            ip=self.ip,
            last_error=last_error or None,
        )

    async def close(self) -> None:
        await self.connection.close()

    def __repr__(self) -> str:
        return f"ProbeTarget(name={self.name!r}, type={self.family.value}, ip={self.ip!r})"


# ============================================================================
# CONSTRUCTION
# ============================================================================

async def build_target(
    descriptor: TargetDescriptor,
    probe_timeout: float,
    metrics: ProbeMetrics,
    driver_factory: Callable[[DatabaseFamily], ProberDriver] = get_driver,
) -> ProbeTarget:
    """
    Build a ProbeTarget and register its label set with the metrics sink.

    Raises:
        TargetConstructionError: Unknown family or the connection could not be opened
    """
    try:
        driver = driver_factory(descriptor.type)
    except UnsupportedDatabaseError as e:
        raise TargetConstructionError(descriptor.name, str(e)) from e

    ip = await resolve_ip(descriptor.host)
    dsn = driver.connection_string(descriptor, probe_timeout)

    try:
        connection = await driver.open(dsn, descriptor, probe_timeout)
    except Exception as e:
        raise TargetConstructionError(
            descriptor.name, f"failed to open database connection: {e}"
        ) from e

    labels = TargetLabels.from_descriptor(descriptor, ip)
    metrics.set_target_info(labels.as_dict())

    target = ProbeTarget(
        descriptor=descriptor,
        driver=driver,
        connection=connection,
        labels=labels,
        ip=ip,
        query=driver.effective_query(descriptor),
        masked_dsn=driver.mask_dsn(dsn),
    )

    fields = {
        "db_name": descriptor.name,
        "db_type": descriptor.type.value,
        "db_host": descriptor.host,
        "db_port": descriptor.port,
        "db_ip": ip,
        "dsn": target.masked_dsn,
        "driver": driver.driver_name,
    }
    service_name = target.service_name
    if service_name:
        fields["service_name"] = service_name
        if not descriptor.service_name:
            logger.warning(
                f"Oracle service_name not set for {descriptor.name}, "
                f"using default {service_name}; confirm this is correct",
                extra={"db_name": descriptor.name, "config_service_name": descriptor.service_name},
            )

    logger.info("Database target initialised", extra=fields)
    return target


__all__ = [
    "TargetConstructionError",
    "TargetLabels",
    "TargetHealth",
    "TargetInfo",
    "ProbeTarget",
    "resolve_ip",
    "build_target",
]
