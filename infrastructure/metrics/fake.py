"""Fake ProbeMetrics for testing.

Records every observation keyed by ``db_name`` so tests can assert on
gauge and counter values without reaching into prometheus-client internals.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from infrastructure.metrics.protocol import Labels


@dataclass
class TargetSeries:
    """Everything recorded for one target."""
    labels: Dict[str, str]
    target_info: Optional[float] = None
    up: Optional[bool] = None
    duration: Optional[float] = None
    last_timestamp: Optional[float] = None
    ping_up: Optional[bool] = None
    ping_duration: Optional[float] = None
    query_up: Optional[bool] = None
    query_duration: Optional[float] = None
    reconnect_duration: Optional[float] = None
    counters: Dict[str, int] = field(default_factory=dict)
    ping_updates: int = 0
    query_updates: int = 0
    probe_updates: int = 0


class FakeProbeMetrics:
    """In-memory spy implementing the ProbeMetrics protocol.

    Usage:
        fake = FakeProbeMetrics()
        fake.record_failure(labels)
        assert fake.counter("orders-primary", "failures") == 1
    """

    content_type = "text/plain; charset=utf-8"

    def __init__(self) -> None:
        self.series: Dict[str, TargetSeries] = {}
        self.calls: List[Tuple[str, str]] = []

    def _get(self, labels: Labels) -> TargetSeries:
        name = labels["db_name"]
        if name not in self.series:
            self.series[name] = TargetSeries(labels=dict(labels))
        return self.series[name]

    def _inc(self, labels: Labels, counter: str, amount: int = 1) -> None:
        series = self._get(labels)
        series.counters[counter] = series.counters.get(counter, 0) + amount

    def set_target_info(self, labels: Labels) -> None:
        self.calls.append(("set_target_info", labels["db_name"]))
        self._get(labels).target_info = 1
        for counter in ("failures", "ping_failures", "query_failures", "reconnects"):
            self._inc(labels, counter, 0)

    def update_probe_result(
        self,
        labels: Labels,
        up: bool,
        duration_seconds: float,
        timestamp: Optional[float] = None,
    ) -> None:
        self.calls.append(("update_probe_result", labels["db_name"]))
        series = self._get(labels)
        series.up = up
        series.duration = duration_seconds
        series.last_timestamp = time.time() if timestamp is None else timestamp
        series.probe_updates += 1

    def update_ping_result(self, labels: Labels, success: bool, duration_seconds: float) -> None:
        self.calls.append(("update_ping_result", labels["db_name"]))
        series = self._get(labels)
        series.ping_up = success
        series.ping_duration = duration_seconds
        series.ping_updates += 1

    def update_query_result(self, labels: Labels, success: bool, duration_seconds: float) -> None:
        self.calls.append(("update_query_result", labels["db_name"]))
        series = self._get(labels)
        series.query_up = success
        series.query_duration = duration_seconds
        series.query_updates += 1

    def record_reconnect(self, labels: Labels, duration_seconds: float) -> None:
        self.calls.append(("record_reconnect", labels["db_name"]))
        self._inc(labels, "reconnects")
        self._get(labels).reconnect_duration = duration_seconds

    def record_failure(self, labels: Labels) -> None:
        self.calls.append(("record_failure", labels["db_name"]))
        self._inc(labels, "failures")

    def record_ping_failure(self, labels: Labels) -> None:
        self.calls.append(("record_ping_failure", labels["db_name"]))
        self._inc(labels, "ping_failures")

    def record_query_failure(self, labels: Labels) -> None:
        self.calls.append(("record_query_failure", labels["db_name"]))
        self._inc(labels, "query_failures")

    def generate(self) -> bytes:
        lines = [f"{name} up={s.up}" for name, s in sorted(self.series.items())]
        return ("\n".join(lines) + "\n").encode()

    # -- test helpers --

    def counter(self, db_name: str, name: str) -> Optional[int]:
        """Counter value, or None if the counter was never touched."""
        series = self.series.get(db_name)
        if series is None:
            return None
        return series.counters.get(name)

    def clear(self) -> None:
        """Reset all recorded state."""
        self.series.clear()
        self.calls.clear()
