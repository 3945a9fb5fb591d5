"""Fake SQLConnection and driver for testing.

Scripts ping and query behaviour per call so prober tests can drive a
target through up/down transitions without a database.
"""

import asyncio
from typing import Any, ClassVar, List, Optional, Union

from core.contracts import DatabaseFamily
from core.models.target import TargetDescriptor
from infrastructure.drivers.base import ProberDriver, scalar_from_row

# A scripted step is either a value/None (success) or an exception to raise
Step = Union[BaseException, Any]


class FakeSQLConnection:
    """In-memory SQLConnection spy.

    Usage:
        conn = FakeSQLConnection(ping_steps=[ConnectionRefusedError("refused"), None])
        await conn.ping()   # raises
        await conn.ping()   # succeeds
    """

    def __init__(
        self,
        ping_steps: Optional[List[Step]] = None,
        query_steps: Optional[List[Step]] = None,
        ping_delay: float = 0.0,
        query_delay: float = 0.0,
    ) -> None:
        self.ping_steps = list(ping_steps or [])
        self.query_steps = list(query_steps or [])
        self.ping_delay = ping_delay
        self.query_delay = query_delay
        self.ping_calls: int = 0
        self.queries: List[str] = []
        self.closed: bool = False
        self.active: int = 0
        self.max_active: int = 0

    @staticmethod
    def _next(steps: List[Step], default: Any) -> Any:
        step = steps.pop(0) if steps else default
        if isinstance(step, BaseException):
            raise step
        return step

    async def _enter(self, delay: float) -> None:
        if self.closed:
            raise RuntimeError("connection used after close")
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if delay:
                await asyncio.sleep(delay)
        except BaseException:
            self.active -= 1
            raise

    async def ping(self) -> None:
        self.ping_calls += 1
        await self._enter(self.ping_delay)
        try:
            self._next(self.ping_steps, None)
        finally:
            self.active -= 1

    async def query_scalar(self, query: str) -> int:
        self.queries.append(query)
        await self._enter(self.query_delay)
        try:
            return scalar_from_row((self._next(self.query_steps, 1),))
        finally:
            self.active -= 1

    async def close(self) -> None:
        self.closed = True


class FakeDriver(ProberDriver):
    """Driver handing out a pre-built FakeSQLConnection."""

    family: ClassVar[DatabaseFamily] = DatabaseFamily.MYSQL
    driver_name = "fake"

    def __init__(
        self,
        fake_connection: Optional[FakeSQLConnection] = None,
        open_error: Optional[BaseException] = None,
        family: Optional[DatabaseFamily] = None,
    ) -> None:
        super().__init__()
        self.fake_connection = fake_connection or FakeSQLConnection()
        self.open_error = open_error
        if family is not None:
            self.family = family
        if self.family.is_oracle_compatible:
            self.default_query = "SELECT 1 FROM dual"
        self.opened_with: Optional[str] = None

    def service_name(self, descriptor: TargetDescriptor) -> Optional[str]:
        if self.family.is_oracle_compatible:
            return descriptor.service_name or self.connection.oracle_service_name
        return None

    def build_dsn(self, descriptor: TargetDescriptor, probe_timeout: float) -> str:
        return f"fake://{descriptor.user}:{descriptor.password}@{descriptor.host}:{descriptor.port}/"

    async def open(
        self,
        dsn: str,
        descriptor: TargetDescriptor,
        probe_timeout: float,
    ) -> FakeSQLConnection:
        if self.open_error is not None:
            raise self.open_error
        self.opened_with = dsn
        return self.fake_connection


__all__ = ["FakeSQLConnection", "FakeDriver"]
