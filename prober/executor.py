# ============================================================================
# PROBE EXECUTOR
# ============================================================================
# STATUS: Prober - One ping-then-query cycle
# PURPOSE: Run a cycle against a target, classify failures, publish metrics
# CREATED: 19 OCT 2026
# ============================================================================
"""
Probe Executor

One cycle:
    1. Ping, bounded by the cycle deadline.
       Failure -> classify, count, skip the query.
       Success -> reconnect heuristic, remember the ping time.
    2. Query (only after a successful ping), bounded by what is left of
       the deadline. The first column of the single row must be an integer.
    3. Store the outcome on the target and learn whether up/down changed.
    4. Publish the overall gauges and emit exactly one log record:
       WARNING when the status changed, INFO otherwise.

Reconnect heuristic:
    The drivers give no reconnect hook, so a reconnect is inferred when a
    successful ping follows the previous successful ping by more than
    ``gap_factor`` probe intervals AND itself took longer than
    ``min_ping_seconds``. A slow ping after a long gap is indistinguishable
    from a reconnect, and a reconnect after a short gap goes unnoticed.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from core.config.defaults import ReconnectDefaults, get_defaults
from core.contracts import FailureStage
from core.logging import ComponentType, get_logger, log_context
from infrastructure.metrics import ProbeMetrics
from prober.classifier import classify, error_message
from prober.target import ProbeTarget

logger = get_logger(__name__, ComponentType.PROBER)

# Event loop timers may fire up to one clock tick early
_CLOCK_RESOLUTION = time.get_clock_info("monotonic").resolution


class ProbeDeadlineExceeded(TimeoutError):
    """A probe phase did not finish before the cycle deadline."""

    def __init__(self, phase: str, timeout: float):
        self.phase = phase
        self.timeout = timeout
        super().__init__(f"{phase}: context deadline exceeded (probe_timeout={format_seconds(timeout)})")


@dataclass
class ProbeOutcome:
    """Result of one cycle; consumed immediately, never stored."""
    ping_succeeded: bool = False
    ping_duration: float = 0.0
    # None when the query phase did not run
    query_succeeded: Optional[bool] = None
    query_duration: float = 0.0
    total_duration: float = 0.0
    error: Optional[BaseException] = None
    failure_stage: Optional[FailureStage] = None
    failure_detail: Optional[str] = None
    # Enriched error text stored on the target
    error_text: Optional[str] = None
    status_changed: bool = False
    reconnect_detected: bool = False

    @property
    def up(self) -> bool:
        return self.ping_succeeded and bool(self.query_succeeded)

    @property
    def query_ran(self) -> bool:
        return self.query_succeeded is not None


def format_seconds(seconds: float) -> str:
    """Compact duration text, e.g. ``1s`` or ``0.5s``."""
    return f"{seconds:g}s"


def detect_reconnect(
    last_ping_time: Optional[float],
    now: float,
    ping_duration: float,
    probe_interval: float,
    defaults: Optional[ReconnectDefaults] = None,
) -> bool:
    """
    Decide whether a successful ping looks like a silent reconnect.

    Args:
        last_ping_time: Time of the previous successful ping (None = never)
        now: Time of this successful ping
        ping_duration: How long this ping took, in seconds
        probe_interval: Configured probe interval, in seconds
    """
    defaults = defaults or get_defaults().reconnect
    if last_ping_time is None:
        return False
    gap = now - last_ping_time
    return gap > defaults.gap_factor * probe_interval and ping_duration > defaults.min_ping_seconds


def enrich_error(
    stage: FailureStage,
    detail: str,
    target: ProbeTarget,
    probe_timeout: float,
    query_phase: bool,
) -> str:
    """Error text stored on the target and shown by /targets."""
    context = [
        f"host={target.descriptor.host}",
        f"port={target.descriptor.port}",
        f"ip={target.ip}",
        f"timeout={format_seconds(probe_timeout)}",
    ]
    if query_phase:
        context.append(f"query={target.query}")
    if target.service_name:
        context.append(f"service_name={target.service_name}")
    return f"[{stage.value} failure] {detail} ({', '.join(context)})"


class ProbeExecutor:
    """
    Runs probe cycles and publishes their results.

    ``clock`` measures durations and reconnect gaps (defaults to
    time.monotonic); the deadline itself follows the event loop clock.
    """

    def __init__(
        self,
        metrics: ProbeMetrics,
        probe_interval: float,
        probe_timeout: float,
        clock: Callable[[], float] = time.monotonic,
        reconnect: Optional[ReconnectDefaults] = None,
    ):
        self.metrics = metrics
        self.probe_interval = probe_interval
        self.probe_timeout = probe_timeout
        self._clock = clock
        self._reconnect = reconnect or get_defaults().reconnect

    async def _bounded(self, phase: str, operation: Awaitable[Any], deadline: float) -> Any:
        """Await ``operation`` but give up at ``deadline`` (event loop time)."""
        loop = asyncio.get_running_loop()
        remaining = deadline - loop.time()
        if remaining <= 0:
            if asyncio.iscoroutine(operation):
                operation.close()
            raise ProbeDeadlineExceeded(phase, self.probe_timeout)

        try:
            return await asyncio.wait_for(operation, timeout=remaining)
        except asyncio.TimeoutError as e:
            # A driver-level timeout before our deadline keeps its own identity
            if deadline - loop.time() > _CLOCK_RESOLUTION:
                raise
            raise ProbeDeadlineExceeded(phase, self.probe_timeout) from e

    async def probe_once(self, target: ProbeTarget) -> ProbeOutcome:
        """
        Execute one ping-then-query cycle against ``target``.

        Never raises for probe failures; they are reported in the outcome,
        the metrics and the log. Cancellation propagates.
        """
        with log_context(target_name=target.name, db_family=target.family.value, operation="probe"):
            return await self._probe(target)

    async def _probe(self, target: ProbeTarget) -> ProbeOutcome:
        labels = target.labels.as_dict()
        outcome = ProbeOutcome()
        start = self._clock()
        deadline = asyncio.get_running_loop().time() + self.probe_timeout

        # Ping phase
        ping_start = self._clock()
        try:
            await self._bounded("ping", target.connection.ping(), deadline)
        except Exception as e:
            outcome.error = e
        outcome.ping_duration = self._clock() - ping_start

        if outcome.error is not None:
            self.metrics.update_ping_result(labels, False, outcome.ping_duration)
            self.metrics.record_ping_failure(labels)
            outcome.failure_stage, outcome.failure_detail = classify(outcome.error, target.family)
        else:
            outcome.ping_succeeded = True
            self.metrics.update_ping_result(labels, True, outcome.ping_duration)

            now = self._clock()
            if detect_reconnect(
                target.last_ping_time, now, outcome.ping_duration, self.probe_interval, self._reconnect
            ):
                outcome.reconnect_detected = True
                self.metrics.record_reconnect(labels, outcome.ping_duration)
            target.mark_ping_success(now)

            await self._query(target, labels, deadline, outcome)

        if outcome.error is not None:
            self.metrics.record_failure(labels)
            outcome.error_text = enrich_error(
                outcome.failure_stage,
                outcome.failure_detail,
                target,
                self.probe_timeout,
                query_phase=outcome.query_ran,
            )

        outcome.total_duration = self._clock() - start
        outcome.status_changed = target.record_outcome(outcome.up, outcome.error_text)

        self.metrics.update_probe_result(labels, outcome.up, outcome.total_duration, time.time())
        self._log(target, outcome)
        return outcome

    async def _query(
        self,
        target: ProbeTarget,
        labels: Dict[str, str],
        deadline: float,
        outcome: ProbeOutcome,
    ) -> None:
        query_start = self._clock()
        try:
            await self._bounded("query", target.connection.query_scalar(target.query), deadline)
            outcome.query_succeeded = True
        except Exception as e:
            outcome.query_succeeded = False
            outcome.error = e
        outcome.query_duration = self._clock() - query_start

        self.metrics.update_query_result(labels, bool(outcome.query_succeeded), outcome.query_duration)

        if not outcome.query_succeeded:
            stage, detail = classify(outcome.error, target.family)
            # Anything unrecognised after a good ping is the query's fault
            if stage is FailureStage.UNKNOWN:
                stage = FailureStage.QUERY_EXECUTION
            outcome.failure_stage, outcome.failure_detail = stage, detail
            self.metrics.record_query_failure(labels)

    def _log(self, target: ProbeTarget, outcome: ProbeOutcome) -> None:
        fields: Dict[str, Any] = {
            "db_name": target.name,
            "db_type": target.family.value,
            "db_host": target.descriptor.host,
            "db_port": target.descriptor.port,
            "db_ip": target.ip,
            "up": outcome.up,
            "duration_seconds": round(outcome.total_duration, 6),
            "ping_duration_seconds": round(outcome.ping_duration, 6),
            "sql": target.query,
        }
        if outcome.query_ran:
            fields["query_duration_seconds"] = round(outcome.query_duration, 6)
        if outcome.reconnect_detected:
            fields["reconnect_detected"] = True
        if target.service_name:
            fields["service_name"] = target.service_name

        if outcome.error is not None:
            fields.update(
                error_type=type(outcome.error).__name__,
                error=error_message(outcome.error),
                failure_stage=outcome.failure_stage.value,
                error_details=outcome.failure_detail,
            )

        if outcome.status_changed:
            message = f"Database status changed: {'up' if outcome.up else 'down'}"
            logger.warning(message, extra=fields)
        elif outcome.up:
            logger.info("Database probe succeeded", extra=fields)
        else:
            logger.info("Database probe failed", extra=fields)


__all__ = [
    "ProbeDeadlineExceeded",
    "ProbeOutcome",
    "ProbeExecutor",
    "detect_reconnect",
    "enrich_error",
    "format_seconds",
]
