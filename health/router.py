# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# STATUS: Infrastructure - FastAPI health check endpoints
# PURPOSE: Kubernetes probes and self health of the prober
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Router

Endpoints:
    GET /livez   - Liveness probe (is the process alive?)
    GET /readyz  - Readiness probe (are the probe loops running?)
    GET /health  - Prober loops plus per-target state

Response Codes:
    200 - Healthy
    206 - Degraded (some target down or not probed yet)
    503 - Unhealthy (prober not probing)
"""

import os

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from health.checks import run_checks
from health.core import HealthStatus
from __version__ import __version__, BUILD_DATE

health_router = APIRouter(tags=["Health"])


@health_router.get("/livez")
async def liveness_probe():
    """Returns 200 if the process is alive. No checks run."""
    return {"status": "alive", "version": __version__, "build_date": BUILD_DATE, "pid": os.getpid()}


@health_router.get("/readyz")
async def readiness_probe():
    """
    Kubernetes readiness probe.

    Only the prober check counts; a probed database being down does not
    make this service unready.
    """
    report = run_checks(required_only=True)

    if report.status == HealthStatus.UNHEALTHY:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "checks": {
                    c.name: c.to_dict() for c in report.checks
                    if c.status == HealthStatus.UNHEALTHY
                },
            },
        )

    return {"status": "ready", "checks_passed": len(report.checks)}


@health_router.get("/health")
async def full_health_check():
    """Prober loops and per-target state; status code follows the worst check."""
    report = run_checks()

    body = report.to_dict()
    body["version"] = __version__
    body["build_date"] = BUILD_DATE

    return JSONResponse(status_code=report.status.http_code, content=body)


__all__ = [
    "health_router",
]
