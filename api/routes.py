# ============================================================================
# API ROUTES
# ============================================================================
# STATUS: Core - FastAPI route definitions
# PURPOSE: Prometheus exposition and target status endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Routes

Endpoints:
    GET /metrics        - Prometheus text exposition of the probe registry
    GET /targets        - Per-target status snapshot (debugging)
    GET /prober/status  - Scheduler statistics
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Response

from prober.target import TargetInfo
from .schemas import ProberStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================
# These will be set by the main app at startup

_prober = None
_metrics = None


def set_services(prober, metrics):
    """Set service instances for dependency injection."""
    global _prober, _metrics
    _prober = prober
    _metrics = metrics


def get_prober():
    if _prober is None:
        raise HTTPException(500, "Prober not initialized")
    return _prober


def get_metrics():
    if _metrics is None:
        raise HTTPException(500, "Metrics not initialized")
    return _metrics


# ============================================================================
# METRICS
# ============================================================================

@router.get("/metrics", tags=["Metrics"])
def prometheus_metrics():
    """
    Prometheus scrape endpoint.

    Returns every db_probe_* series in the text exposition format.
    """
    metrics = get_metrics()
    return Response(content=metrics.generate(), media_type=metrics.content_type)


# ============================================================================
# TARGETS
# ============================================================================

@router.get(
    "/targets",
    response_model=List[TargetInfo],
    response_model_exclude_none=True,
    tags=["Targets"],
)
def list_targets():
    """
    List probe targets with their resolved IP and most recent error.

    ``last_error`` is omitted for targets whose last cycle succeeded.
    """
    return get_prober().targets_info()


# ============================================================================
# PROBER STATUS
# ============================================================================

@router.get("/prober/status", response_model=ProberStatusResponse, tags=["Prober"])
def get_prober_status():
    """
    Get prober status and statistics.
    """
    stats = get_prober().stats

    return {
        "status": "running" if stats["running"] else "stopped",
        "started_at": stats["started_at"],
        "uptime_seconds": stats["uptime_seconds"],
        "probe_interval_seconds": stats["probe_interval"],
        "probe_timeout_seconds": stats["probe_timeout"],
        "metrics": {
            "cycles": stats["cycles"],
            "errors": stats["errors"],
            "targets": stats["targets"],
            "targets_up": stats["targets_up"],
            "loops_alive": stats["loops_alive"],
        },
    }


__all__ = [
    "router",
    "set_services",
]
