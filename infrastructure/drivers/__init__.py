# ============================================================================
# DRIVERS MODULE
# ============================================================================
# STATUS: Infrastructure - Driver registry
# PURPOSE: Map database families to their ProberDriver
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database drivers for the prober.

Usage:
    from infrastructure.drivers import get_driver

    driver = get_driver(DatabaseFamily.ORACLE)
    dsn = driver.connection_string(descriptor, probe_timeout=1.0)
    conn = await driver.open(dsn, descriptor, probe_timeout=1.0)
"""

from typing import Dict, Type, Union

from core.contracts import DatabaseFamily
from infrastructure.drivers.base import (
    ProberDriver,
    QueryResultError,
    SQLConnection,
    UnsupportedDatabaseError,
    mask_dsn,
    scalar_from_row,
)
from infrastructure.drivers.fake import FakeDriver, FakeSQLConnection
from infrastructure.drivers.mysql import MySQLDriver, TiDBDriver
from infrastructure.drivers.oracle import OracleDriver
from infrastructure.drivers.postgresql import PostgreSQLDriver

_DRIVERS: Dict[DatabaseFamily, Type[ProberDriver]] = {
    DatabaseFamily.MYSQL: MySQLDriver,
    DatabaseFamily.TIDB: TiDBDriver,
    DatabaseFamily.ORACLE: OracleDriver,
    DatabaseFamily.POSTGRES: PostgreSQLDriver,
}


def get_driver(family: Union[DatabaseFamily, str]) -> ProberDriver:
    """
    Get the driver for a database family.

    Raises:
        UnsupportedDatabaseError: If the family is unknown
    """
    try:
        driver_cls = _DRIVERS[DatabaseFamily(family)]
    except (KeyError, ValueError):
        raise UnsupportedDatabaseError(family) from None
    return driver_cls()


__all__ = [
    "ProberDriver",
    "SQLConnection",
    "QueryResultError",
    "UnsupportedDatabaseError",
    "mask_dsn",
    "scalar_from_row",
    "get_driver",
    "MySQLDriver",
    "TiDBDriver",
    "OracleDriver",
    "PostgreSQLDriver",
    "FakeDriver",
    "FakeSQLConnection",
]
