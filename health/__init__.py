# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# STATUS: Infrastructure - Self health of the prober
# PURPOSE: Kubernetes probes and self health monitoring
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Module

- /livez: Process alive (instant, for Kubernetes liveness probe)
- /readyz: Probe loops running
- /health: Probe loops plus per-target state

Usage:
    from health import health_router, set_prober

    set_prober(prober)
    app.include_router(health_router)
"""

from health.core import CheckResult, HealthReport, HealthStatus
from health.checks import check_prober, check_targets, run_checks, set_prober
from health.router import health_router

__all__ = [
    # Core types
    "HealthStatus",
    "CheckResult",
    "HealthReport",
    # Checks
    "set_prober",
    "check_prober",
    "check_targets",
    "run_checks",
    # Router
    "health_router",
]
