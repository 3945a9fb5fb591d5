# ============================================================================
# API SCHEMAS
# ============================================================================
# STATUS: Core - Response schemas
# PURPOSE: Pydantic models for API responses
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Schemas

Response models for the status endpoints. ``/targets`` reuses
``prober.target.TargetInfo`` directly.
"""

from typing import Optional
from pydantic import BaseModel, Field


class ProberMetricsSummary(BaseModel):
    """Counters of the scheduler itself."""
    cycles: int = Field(..., description="Completed probe cycles, all targets")
    errors: int = Field(..., description="Cycles that raised unexpectedly")
    targets: int
    targets_up: int
    loops_alive: int


class ProberStatusResponse(BaseModel):
    """Response for /prober/status."""
    status: str = Field(..., description="running or stopped")
    started_at: Optional[str] = None
    uptime_seconds: Optional[float] = None
    probe_interval_seconds: float
    probe_timeout_seconds: float
    metrics: ProberMetricsSummary


__all__ = [
    "ProberMetricsSummary",
    "ProberStatusResponse",
]
