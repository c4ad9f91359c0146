"""
SLA Interfaces Layer
====================

Interface adapters (controllers) for incident SLA reporting.

Contains:
- Controllers: FastAPI route handlers

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from incident_sla.sla.interfaces.controllers import sla_router

__all__ = ["sla_router"]
