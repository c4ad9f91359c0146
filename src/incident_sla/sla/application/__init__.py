"""
SLA Application Layer
======================

Application layer for incident SLA reporting.

Contains:
- Services: Orchestrate the domain pipeline over one record snapshot
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and the config provider interface,
but not on concrete infrastructure implementations.
"""

from incident_sla.sla.application.services import (
    IncidentReport,
    IncidentReportService,
    ISLAConfigProvider,
    build_headers,
    ordinal_suffix,
)
from incident_sla.sla.application.dto import (
    IncidentRecordsRequest,
    IncidentReportResponse,
    ComplianceSummaryResponse,
    ComplianceRowResponse,
    ThresholdResponse,
)

__all__ = [
    # DTOs
    "IncidentRecordsRequest",
    "IncidentReportResponse",
    "ComplianceSummaryResponse",
    "ComplianceRowResponse",
    "ThresholdResponse",
    # Services
    "IncidentReport",
    "IncidentReportService",
    "build_headers",
    "ordinal_suffix",
    # Config Interface
    "ISLAConfigProvider",
]
