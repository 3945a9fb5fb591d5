# ============================================================================
# PROBER HEALTH CHECKS
# ============================================================================
# STATUS: Infrastructure - Prober state checks
# PURPOSE: Probe loops running, per-target availability summary
# CREATED: 19 OCT 2026
# ============================================================================
"""
Prober Health Checks

- prober (required for /readyz): the probe loops are running
- targets: state of every probed database

A probed database being down is what this service exists to report, so the
targets check never goes beyond degraded.
"""

import logging
from typing import Any, Callable, Dict, List

from health.core import CheckResult, HealthReport, HealthStatus

logger = logging.getLogger(__name__)


# Global reference to the prober (set by main app)
_prober = None


def set_prober(prober):
    """Set prober reference for health checks."""
    global _prober
    _prober = prober


def check_prober() -> CheckResult:
    """Every per-target probe loop is alive."""
    if _prober is None:
        return CheckResult("prober", HealthStatus.UNHEALTHY, "Prober not initialized")

    stats = _prober.stats
    details = {
        "targets": stats.get("targets", 0),
        "loops_alive": stats.get("loops_alive", 0),
        "uptime_seconds": stats.get("uptime_seconds"),
        "cycles": stats.get("cycles", 0),
        "errors": stats.get("errors", 0),
    }

    if not _prober.is_running:
        return CheckResult("prober", HealthStatus.UNHEALTHY, "Prober loops not running", details)

    if details["loops_alive"] < details["targets"]:
        return CheckResult(
            "prober",
            HealthStatus.DEGRADED,
            f"{details['targets'] - details['loops_alive']} probe loops exited",
            details,
        )

    return CheckResult(
        "prober",
        HealthStatus.HEALTHY,
        f"Prober running ({details['targets']} targets, {details['cycles']} cycles)",
        details,
    )


def _target_state(up) -> str:
    if up is None:
        return "pending"
    return "up" if up else "down"


def check_targets() -> CheckResult:
    """Up/down/pending state of each probed database."""
    if _prober is None:
        return CheckResult("targets", HealthStatus.DEGRADED, "Prober not initialized")

    entries: List[Dict[str, Any]] = []
    for target in _prober.targets:
        health = target.health()
        entry = {
            "name": target.name,
            "type": target.family.value,
            "state": _target_state(health.last_up_status),
        }
        if health.last_error:
            entry["last_error"] = health.last_error
        entries.append(entry)

    down = [e["name"] for e in entries if e["state"] == "down"]
    pending = [e["name"] for e in entries if e["state"] == "pending"]
    details = {
        "total": len(entries),
        "up": len(entries) - len(down) - len(pending),
        "down": down,
        "pending": pending,
        "targets": entries,
    }

    if down:
        message = f"{len(down)} of {len(entries)} targets down"
        return CheckResult("targets", HealthStatus.DEGRADED, message, details)
    if pending:
        message = f"{len(pending)} of {len(entries)} targets not probed yet"
        return CheckResult("targets", HealthStatus.DEGRADED, message, details)

    return CheckResult("targets", HealthStatus.HEALTHY, f"All {len(entries)} targets up", details)


# (check, required for /readyz)
CHECKS: List[tuple] = [
    (check_prober, True),
    (check_targets, False),
]


def _run(check: Callable[[], CheckResult]) -> CheckResult:
    name = check.__name__[len("check_"):]
    try:
        return check()
    except Exception as e:
        logger.error(f"Health check {name} failed: {e}")
        return CheckResult(
            name,
            HealthStatus.UNHEALTHY,
            str(e),
            {"exception_type": type(e).__name__},
        )


def run_checks(required_only: bool = False) -> HealthReport:
    """Run the checks (only those /readyz needs when required_only)."""
    return HealthReport(
        checks=[_run(check) for check, required in CHECKS if required or not required_only]
    )


__all__ = [
    "set_prober",
    "check_prober",
    "check_targets",
    "run_checks",
]
