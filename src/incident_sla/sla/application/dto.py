"""
SLA Application DTOs
=====================

Data Transfer Objects for the SLA API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses. Following YAGNI - only what's needed.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from incident_sla.sla.application.services import IncidentReport


# ========== Type Aliases for Literals ==========
ComplianceFlagStr = Literal["non-compliant", "compliant", ""]


# ========== Request DTOs ==========

class IncidentRecordsRequest(BaseModel):
    """Raw incident rows, exactly as exported (column name -> cell value)."""
    records: List[Dict[str, Any]] = Field(
        ...,
        description="Input rows; several rows may share one incident number"
    )


# ========== Response DTOs ==========

class ComplianceRowResponse(BaseModel):
    """One compliance summary line."""
    priority: str = Field(..., description="Priority bucket label or 'Total'")
    total: int = Field(..., ge=0, description="Incidents in the bucket")
    within: int = Field(..., ge=0, description="Incidents that made SLA")
    exceeding: int = Field(..., ge=0, description="Incidents that missed SLA")
    percentage_within: Optional[float] = Field(
        None,
        description="Within SLA as % of all bucketed incidents"
    )
    flag: ComplianceFlagStr = Field("", description="Compliance marker (P1/P2 only)")


class ComplianceSummaryResponse(BaseModel):
    """Compliance summary table plus its title metadata."""
    title: str
    opened_from: Optional[datetime] = None
    opened_to: Optional[datetime] = None
    overall_within_percentage: Optional[float] = None
    rows: List[ComplianceRowResponse] = Field(default_factory=list)


class IncidentReportResponse(BaseModel):
    """Response model for a generated incident report."""
    headers: List[str] = Field(..., description="Detail table headers, in order")
    rows: List[Dict[str, str]] = Field(..., description="One row per incident")
    incident_count: int = Field(..., ge=0)
    max_width: int = Field(..., ge=0, description="Interval slots per row")
    compliance: ComplianceSummaryResponse

    @classmethod
    def from_report(cls, report: IncidentReport) -> "IncidentReportResponse":
        """Create from an application-layer report."""
        return cls(
            headers=report.headers,
            rows=report.rows,
            incident_count=len(report.incidents),
            max_width=report.max_width,
            compliance=ComplianceSummaryResponse(**report.compliance.to_dict()),
        )


class ThresholdResponse(BaseModel):
    """Current SLA threshold table."""
    sla_targets_minutes: Dict[str, int]
    default_minutes: int
    compliance_target_percent: float
    flagged_priorities: List[str]
    priority_buckets: List[str]
