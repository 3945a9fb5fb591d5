# ============================================================================
# DB PROBE - MAIN APPLICATION
# ============================================================================
# STATUS: Core - FastAPI application entry point
# PURPOSE: Main application with per-target probe loops
# CREATED: 19 OCT 2026
# ============================================================================
"""
DB Probe Main Application

FastAPI application that:
1. Loads the database target list
2. Runs one probe loop per target in the background
3. Serves Prometheus metrics, target status and health endpoints

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8080
    python main.py   # binds to listen_address from the config file
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from __version__ import __version__, BUILD_DATE, CODENAME

from core.config import load_config
from infrastructure.metrics import PrometheusProbeMetrics
from prober import Prober
from api.routes import router, set_services

# Health check system
from health import health_router, set_prober

# Configure logging using our structured logging system
from core.logging import configure_logging, get_logger

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)

# Global instances
_prober: Prober = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Builds every target on startup; any construction failure aborts startup.
    Stops the probe loops and closes every connection on shutdown.
    """
    global _prober

    logger.info(f"Starting {CODENAME} v{__version__} (Build {BUILD_DATE})")

    config = load_config()
    logger.info(
        f"Probing {len(config.databases)} databases "
        f"(interval={config.probe_interval}s, timeout={config.probe_timeout}s)"
    )

    metrics = PrometheusProbeMetrics()
    _prober = await Prober.create(config, metrics)

    # Set services for API routes
    set_services(prober=_prober, metrics=metrics)

    _prober.start()
    logger.info("Prober started")

    # Initialize health checks
    set_prober(_prober)
    logger.info("Health checks initialized")

    yield

    # Shutdown
    logger.info(f"Shutting down {CODENAME}...")

    await _prober.stop()

    logger.info(f"{CODENAME} stopped")


# Create FastAPI app
app = FastAPI(
    title=CODENAME,
    description="Database availability prober with Prometheus metrics",
    version=__version__,
    lifespan=lifespan,
)

# Include health check routes (no prefix - /livez, /readyz, /health)
app.include_router(health_router)

# Include API routes (/metrics, /targets, /prober/status)
app.include_router(router)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": CODENAME,
        "version": __version__,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
        "metrics": "/metrics",
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    listen = load_config()

    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", listen.listen_host),
        port=int(os.environ.get("PORT", listen.listen_port)),
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
