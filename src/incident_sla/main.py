"""
Incident SLA Reporting - Main Application
===========================================

Turns raw incident exports into a per-incident interval report and a
per-priority compliance summary.

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects and report calculations
- Infrastructure: YAML threshold config, openpyxl workbook adapter
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from incident_sla.config import settings
from incident_sla.core import ApplicationException

# SLA Module
from incident_sla.sla.infrastructure import SLAConfigManager
from incident_sla.sla.interfaces import sla_router

# Shared
from incident_sla.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from incident_sla.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load SLA threshold configuration
    3. Start watching the threshold file (optional)

    SHUTDOWN:
    1. Stop the config watcher
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Incident SLA service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Loading SLA configuration")
    config_manager = SLAConfigManager()
    config_manager.load(settings.sla_config_path)
    if settings.watch_sla_config:
        config_manager.start_watching()

    app.state.settings = settings
    app.state.config_provider = config_manager

    logger.info("Incident SLA service started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Incident SLA service")
    config_manager.stop_watching()
    logger.info("Incident SLA service shutdown complete")


app = FastAPI(
    title="Incident SLA Reporting API",
    description="""
    ## Incident interval and SLA compliance reporting

    Upload raw incident rows (as exported from the ticketing tool) and get back:

    - **Incident Intervals**: one row per incident with every update time,
      the gap since the previous event and whether that gap made SLA
    - **Compliance and Credit**: per-priority totals, % within SLA and a
      compliance flag for P1/P2

    ---

    ### Endpoints

    - `POST /sla/reports` - Build the report as JSON
    - `POST /sla/reports/xlsx` - Build the report as a two-sheet workbook
    - `GET /sla/thresholds` - Current SLA thresholds

    ---

    ### SLA thresholds

    | Priority | Threshold |
    |----------|-----------|
    | P1       | 1 hour    |
    | P2       | 3 hours   |
    | P3       | 4 hours   |
    | P4       | 8 hours   |
    | other    | 8 hours   |

    Thresholds are read from `sla_config.yaml` and reloaded when the file changes.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(sla_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "sla_config": "loaded",
                        "config_watcher": "running"
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Returns service health status including:
    - SLA configuration status
    - Config watcher state
    """
    config_provider = getattr(request.app.state, "config_provider", None)
    checks = {
        "sla_config": "loaded" if config_provider is not None else "not_loaded",
        "config_watcher": (
            "running" if getattr(config_provider, "is_watching", False) else "stopped"
        )
    }

    return {
        "status": "healthy" if config_provider is not None else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Incident SLA Reporting",
        "version": settings.app_version,
        "architecture": "Clean Architecture",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "sla": {
                "prefix": "/sla",
                "endpoints": [
                    "POST /sla/reports - Build interval and compliance report",
                    "POST /sla/reports/xlsx - Download report workbook",
                    "GET /sla/thresholds - Current SLA thresholds"
                ]
            }
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "incident_sla.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
