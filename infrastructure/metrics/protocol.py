"""ProbeMetrics protocol for per-target probe instrumentation.

Abstracts metric recording so the prober depends on a protocol rather than
a concrete library. Production uses Prometheus; tests inject a fake that
records observations in memory.

Every method takes the target's label set, a mapping with exactly the keys
of ``LABEL_NAMES``.
"""

from typing import Mapping, Optional, Protocol, Tuple, runtime_checkable

LABEL_NAMES: Tuple[str, ...] = ("project", "env", "db_name", "db_type", "db_host", "db_ip", "role")

Labels = Mapping[str, str]


@runtime_checkable
class ProbeMetrics(Protocol):
    """Protocol for database probe metrics collection."""

    content_type: str

    def set_target_info(self, labels: Labels) -> None:
        """Register a target: info gauge = 1 and every counter at 0."""
        ...

    def update_probe_result(
        self,
        labels: Labels,
        up: bool,
        duration_seconds: float,
        timestamp: Optional[float] = None,
    ) -> None:
        """Publish the overall outcome of one cycle.

        Args:
            labels: Target label set.
            up: Overall availability.
            duration_seconds: Total cycle duration.
            timestamp: Unix time of the probe (defaults to now).
        """
        ...

    def update_ping_result(self, labels: Labels, success: bool, duration_seconds: float) -> None:
        ...

    def update_query_result(self, labels: Labels, success: bool, duration_seconds: float) -> None:
        ...

    def record_reconnect(self, labels: Labels, duration_seconds: float) -> None:
        """Count one (estimated) reconnect and remember its cost."""
        ...

    def record_failure(self, labels: Labels) -> None:
        ...

    def record_ping_failure(self, labels: Labels) -> None:
        ...

    def record_query_failure(self, labels: Labels) -> None:
        ...

    def generate(self) -> bytes:
        """Render every series for the /metrics endpoint."""
        ...


__all__ = ["LABEL_NAMES", "Labels", "ProbeMetrics"]
