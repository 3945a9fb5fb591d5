# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# STATUS: Infrastructure - Self health result types
# PURPOSE: Status ranking and the result/report shapes served by /health
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Core Types

Self health of the prober process, not of the probed databases (those are
published as metrics).

Status Hierarchy (worst wins):
- healthy: probe loops running, every target up
- degraded: probe loops running, some target down or not probed yet
- unhealthy: probe loops not running
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        """Rank for 'worst wins' aggregation."""
        order = {
            HealthStatus.HEALTHY: 0,
            HealthStatus.DEGRADED: 1,
            HealthStatus.UNHEALTHY: 2,
        }
        return order[self]

    @property
    def http_code(self) -> int:
        return {
            HealthStatus.HEALTHY: 200,
            HealthStatus.DEGRADED: 206,  # Partial Content
            HealthStatus.UNHEALTHY: 503,  # Service Unavailable
        }[self]

    @classmethod
    def aggregate(cls, statuses: List["HealthStatus"]) -> "HealthStatus":
        """Aggregate multiple statuses (worst wins)."""
        if not statuses:
            return cls.HEALTHY
        return max(statuses, key=lambda s: s.severity)


@dataclass
class CheckResult:
    """Outcome of one named check."""
    name: str
    status: HealthStatus
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"status": self.status.value, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class HealthReport:
    """Aggregated result of a set of checks."""
    checks: List[CheckResult]
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status(self) -> HealthStatus:
        return HealthStatus.aggregate([c.status for c in self.checks])

    def get(self, name: str) -> Optional[CheckResult]:
        for check in self.checks:
            if check.name == name:
                return check
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "checks": {c.name: c.to_dict() for c in self.checks},
            "checked_at": self.checked_at.isoformat().replace("+00:00", "Z"),
        }


__all__ = [
    "HealthStatus",
    "CheckResult",
    "HealthReport",
]
