"""Prometheus implementation of the ProbeMetrics protocol.

Thirteen series on a dedicated CollectorRegistry, all keyed by the same
fixed label schema. Counters for a target are initialised to zero when the
target registers, so it shows up in aggregate queries before its first
failure.
"""

import time
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    disable_created_metrics,
    generate_latest,
)

from infrastructure.metrics.protocol import LABEL_NAMES, Labels, ProbeMetrics

# Counters expose only their *_total series
disable_created_metrics()


class PrometheusProbeMetrics(ProbeMetrics):
    """Prometheus-backed database probe metrics."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self._registry = registry or CollectorRegistry()
        labels = list(LABEL_NAMES)

        self._up = Gauge(
            "db_probe_up",
            "Database availability status (1=up, 0=down)",
            labels,
            registry=self._registry,
        )

        self._duration = Gauge(
            "db_probe_duration_seconds",
            "Database probe duration in seconds",
            labels,
            registry=self._registry,
        )

        self._last_timestamp = Gauge(
            "db_probe_last_timestamp",
            "Last probe timestamp (Unix timestamp)",
            labels,
            registry=self._registry,
        )

        self._target_info = Gauge(
            "db_probe_target_info",
            "Database target information (static labels)",
            labels,
            registry=self._registry,
        )

        self._ping_up = Gauge(
            "db_probe_ping_up",
            "Database ping status (1=success, 0=failure)",
            labels,
            registry=self._registry,
        )

        self._ping_duration = Gauge(
            "db_probe_ping_duration_seconds",
            "Database ping duration in seconds",
            labels,
            registry=self._registry,
        )

        self._query_up = Gauge(
            "db_probe_query_up",
            "Database query execution status (1=success, 0=failure)",
            labels,
            registry=self._registry,
        )

        self._query_duration = Gauge(
            "db_probe_query_duration_seconds",
            "Database query execution duration in seconds",
            labels,
            registry=self._registry,
        )

        self._reconnects = Counter(
            "db_probe_connection_reconnects_total",
            "Total number of database connection reconnects",
            labels,
            registry=self._registry,
        )

        self._reconnect_duration = Gauge(
            "db_probe_connection_reconnect_duration_seconds",
            "Database connection reconnect duration in seconds",
            labels,
            registry=self._registry,
        )

        self._failures = Counter(
            "db_probe_failures_total",
            "Total number of database probe failures",
            labels,
            registry=self._registry,
        )

        self._ping_failures = Counter(
            "db_probe_ping_failures_total",
            "Total number of database ping failures",
            labels,
            registry=self._registry,
        )

        self._query_failures = Counter(
            "db_probe_query_failures_total",
            "Total number of database query failures",
            labels,
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    # -- ProbeMetrics protocol methods --

    def set_target_info(self, labels: Labels) -> None:
        self._target_info.labels(**labels).set(1)

        # Static value, set once. Counters exist at 0 from here on.
        for counter in (self._failures, self._ping_failures, self._query_failures, self._reconnects):
            counter.labels(**labels).inc(0)

    def update_probe_result(
        self,
        labels: Labels,
        up: bool,
        duration_seconds: float,
        timestamp: Optional[float] = None,
    ) -> None:
        self._up.labels(**labels).set(1 if up else 0)
        self._duration.labels(**labels).set(duration_seconds)
        self._last_timestamp.labels(**labels).set(int(time.time() if timestamp is None else timestamp))

    def update_ping_result(self, labels: Labels, success: bool, duration_seconds: float) -> None:
        self._ping_up.labels(**labels).set(1 if success else 0)
        self._ping_duration.labels(**labels).set(duration_seconds)

    def update_query_result(self, labels: Labels, success: bool, duration_seconds: float) -> None:
        self._query_up.labels(**labels).set(1 if success else 0)
        self._query_duration.labels(**labels).set(duration_seconds)

    def record_reconnect(self, labels: Labels, duration_seconds: float) -> None:
        self._reconnects.labels(**labels).inc()
        self._reconnect_duration.labels(**labels).set(duration_seconds)

    def record_failure(self, labels: Labels) -> None:
        self._failures.labels(**labels).inc()

    def record_ping_failure(self, labels: Labels) -> None:
        self._ping_failures.labels(**labels).inc()

    def record_query_failure(self, labels: Labels) -> None:
        self._query_failures.labels(**labels).inc()

    # -- exposition --

    def generate(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self._registry)
