# ============================================================================
# API MODULE
# ============================================================================
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for metrics scraping and target status
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for the database prober.
"""

from .routes import router, set_services
from .schemas import ProberStatusResponse

__all__ = [
    "router",
    "set_services",
    "ProberStatusResponse",
]
