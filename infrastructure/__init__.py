# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Database drivers and metrics adapters
# PURPOSE: Everything the prober needs from the outside world
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for the database prober.

Provides:
- get_driver: Per-family ProberDriver (aiomysql, oracledb, psycopg)
- PrometheusProbeMetrics: prometheus_client backed metrics sink

Usage:
    from infrastructure import get_driver, PrometheusProbeMetrics

    metrics = PrometheusProbeMetrics()
    driver = get_driver("mysql")
"""

from infrastructure.drivers import (
    ProberDriver,
    QueryResultError,
    SQLConnection,
    UnsupportedDatabaseError,
    get_driver,
)
from infrastructure.metrics import (
    FakeProbeMetrics,
    ProbeMetrics,
    PrometheusProbeMetrics,
)

__all__ = [
    # Drivers
    'ProberDriver',
    'SQLConnection',
    'QueryResultError',
    'UnsupportedDatabaseError',
    'get_driver',
    # Metrics
    'ProbeMetrics',
    'PrometheusProbeMetrics',
    'FakeProbeMetrics',
]
