# ============================================================================
# PROBER
# ============================================================================
# STATUS: Prober - Per-target probe scheduling
# PURPOSE: Own the targets, run one probe loop per target, coordinate shutdown
# CREATED: 19 OCT 2026
# ============================================================================
"""
Prober

Owns the fixed set of ProbeTargets for the lifetime of the process and runs
one asyncio task per target.

Per-target loop:
    - Probe immediately on start, then once per probe_interval.
    - Cycles of one target never overlap.
    - A cycle that overruns its interval is followed straight away by the
      next one; missed ticks are dropped, never queued.
    - Any exception escaping a cycle is logged and the loop keeps ticking.

Shutdown:
    stop() sets the stop event, cancels every loop task (aborting in-flight
    driver calls), waits for all of them to exit and only then closes the
    target connections.

Usage:
    prober = await Prober.create(config, metrics)
    prober.start()
    ...
    await prober.stop()
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from core.config.settings import ProbeConfig
from core.contracts import DatabaseFamily
from core.logging import ComponentType, get_logger, log_context
from infrastructure.drivers import ProberDriver, get_driver
from infrastructure.metrics import ProbeMetrics
from prober.executor import ProbeExecutor
from prober.target import ProbeTarget, TargetInfo, build_target

logger = get_logger(__name__, ComponentType.PROBER)


class Prober:
    """
    Probe scheduler.

    Lifecycle:
        create() -> start() -> stop()
    """

    def __init__(
        self,
        targets: List[ProbeTarget],
        metrics: ProbeMetrics,
        probe_interval: float,
        probe_timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize prober.

        Args:
            targets: Fully built targets (see ``create``)
            metrics: Metrics sink shared by every target loop
            probe_interval: Seconds between cycles of one target
            probe_timeout: Deadline of a single cycle
            clock: Duration clock handed to the executor
        """
        self.targets = targets
        self.metrics = metrics
        self.probe_interval = probe_interval
        self.probe_timeout = probe_timeout
        self.executor = ProbeExecutor(metrics, probe_interval, probe_timeout, clock=clock)

        # State
        self._running = False
        self._closed = False
        self._stop_event = asyncio.Event()
        self._tasks: Dict[str, asyncio.Task] = {}

        # Metrics
        self._started_at: Optional[datetime] = None
        self._cycles = 0
        self._errors = 0

    @classmethod
    async def create(
        cls,
        config: ProbeConfig,
        metrics: ProbeMetrics,
        driver_factory: Callable[[DatabaseFamily], ProberDriver] = get_driver,
    ) -> "Prober":
        """
        Build every configured target.

        Construction failures are fatal: targets built so far are closed
        and the error propagates.

        Raises:
            TargetConstructionError: If any target cannot be built
        """
        targets: List[ProbeTarget] = []
        try:
            for descriptor in config.databases:
                target = await build_target(
                    descriptor,
                    config.probe_timeout,
                    metrics,
                    driver_factory=driver_factory,
                )
                targets.append(target)
        except BaseException:
            await _close_targets(targets)
            raise

        logger.info(f"Initialised {len(targets)} database targets")
        return cls(targets, metrics, config.probe_interval, config.probe_timeout)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """Launch one probe loop per target."""
        if self._running:
            logger.warning("Prober already running")
            return
        if self._closed:
            raise RuntimeError("Prober has been stopped and cannot be restarted")

        self._running = True
        self._started_at = datetime.now(timezone.utc)
        self._stop_event.clear()

        for target in self.targets:
            self._tasks[target.name] = asyncio.create_task(
                self._probe_loop(target),
                name=f"probe-{target.name}",
            )

        logger.info(f"Prober started with {len(self.targets)} targets")

    async def stop(self) -> None:
        """
        Stop every probe loop and close every connection.

        Safe to call more than once, and before start().
        """
        if self._closed:
            return
        self._closed = True

        logger.info("Stopping prober")
        self._running = False
        self._stop_event.set()

        for task in self._tasks.values():
            task.cancel()

        # Every loop must be gone before any connection is closed
        for name, task in self._tasks.items():
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Probe loop for {name} ended with error: {e}")

        await _close_targets(self.targets)

        logger.info(f"Prober stopped (cycles={self._cycles}, errors={self._errors})")

    async def _probe_loop(self, target: ProbeTarget) -> None:
        """Run cycles for one target until the stop event is set."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        with log_context(target_name=target.name, db_family=target.family.value):
            logger.debug(f"Probe loop started (interval={self.probe_interval}s)")

            while not self._stop_event.is_set():
                try:
                    await self.executor.probe_once(target)
                except Exception as e:
                    self._errors += 1
                    logger.exception(f"Error in probe cycle: {e}")
                self._cycles += 1

                next_tick += self.probe_interval
                now = loop.time()
                if next_tick < now:
                    # Overran: drop the missed ticks
                    next_tick = now

                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(),
                        timeout=next_tick - now,
                    )
                    break  # Stop event was set
                except asyncio.TimeoutError:
                    pass  # Next tick

            logger.debug("Probe loop stopped")

    # =========================================================================
    # STATUS
    # =========================================================================

    def targets_info(self) -> List[TargetInfo]:
        """Snapshot of every target, taken under each target's lock."""
        return [target.info() for target in self.targets]

    @property
    def is_running(self) -> bool:
        """True while every probe loop is alive."""
        if not self._running:
            return False
        return all(not task.done() for task in self._tasks.values())

    @property
    def stats(self) -> Dict[str, Any]:
        """Get prober statistics."""
        uptime_seconds = None
        if self._started_at:
            uptime_seconds = (datetime.now(timezone.utc) - self._started_at).total_seconds()

        healthy = sum(1 for target in self.targets if target.health().last_up_status)

        return {
            "running": self.is_running,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            "uptime_seconds": uptime_seconds,
            "probe_interval": self.probe_interval,
            "probe_timeout": self.probe_timeout,
            "targets": len(self.targets),
            "targets_up": healthy,
            "loops_alive": sum(1 for task in self._tasks.values() if not task.done()),
            "cycles": self._cycles,
            "errors": self._errors,
        }


async def _close_targets(targets: List[ProbeTarget]) -> None:
    for target in targets:
        try:
            await target.close()
        except Exception as e:
            logger.warning(f"Error closing connection for {target.name}: {e}")


__all__ = ["Prober"]
