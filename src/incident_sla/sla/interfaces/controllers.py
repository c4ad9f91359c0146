"""
SLA Controllers (API Routes)
=============================

FastAPI routes for incident SLA reporting.

Controllers are thin - they delegate to application services.
"""

import time

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status

from incident_sla.sla.application import (
    IncidentReportService,
    IncidentRecordsRequest,
    IncidentReportResponse,
    ISLAConfigProvider,
    ThresholdResponse,
)
from incident_sla.sla.infrastructure import WorkbookWriter, XLSX_MEDIA_TYPE
from incident_sla.shared.infrastructure.logging import get_context_logger, get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA Reporting"])


# ========== Example payloads for Swagger ==========

REPORT_REQUEST_EXAMPLE = {
    "records": [
        {
            "Number": "INC0010001",
            "Priority": "P2 - High",
            "State": "Resolved",
            "Opened": "01-01-2024 08:00",
            "Updated": "01-01-2024 09:00; 01-01-2024 11:30"
        }
    ]
}

REPORT_RESPONSE_EXAMPLE = {
    "headers": [
        "Number", "Priority", "State", "Opened Date",
        "1st Updated", "Interval 1", "Made SLA 1",
        "2nd Updated", "Interval 2", "Made SLA 2",
        "Made SLA"
    ],
    "rows": [
        {
            "Number": "INC0010001",
            "Priority": "P2 - High",
            "State": "Resolved",
            "Opened Date": "2024-01-01 08:00:00",
            "1st Updated": "2024-01-01 09:00:00",
            "Interval 1": "0d 1h 0m 0s",
            "Made SLA 1": "Y",
            "2nd Updated": "2024-01-01 11:30:00",
            "Interval 2": "0d 2h 30m 0s",
            "Made SLA 2": "Y",
            "Made SLA": "Y"
        }
    ],
    "incident_count": 1,
    "max_width": 2,
    "compliance": {
        "title": "Compliance and Credit - 01-01-2024 to 01-01-2024",
        "opened_from": "2024-01-01T08:00:00",
        "opened_to": "2024-01-01T08:00:00",
        "overall_within_percentage": 100.0,
        "rows": [
            {"priority": "P2 - High", "total": 1, "within": 1, "exceeding": 0,
             "percentage_within": 100.0, "flag": "compliant"}
        ]
    }
}


# ========== Dependencies ==========

def get_config_provider(request: Request) -> ISLAConfigProvider:
    """Config provider installed on the app during startup."""
    provider = getattr(request.app.state, "config_provider", None)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="SLA configuration not loaded"
        )
    return provider


def get_report_service(
    config_provider: ISLAConfigProvider = Depends(get_config_provider)
) -> IncidentReportService:
    """Get report service instance."""
    return IncidentReportService(config_provider)


# ========== Route Handlers ==========

@router.post(
    "/reports",
    response_model=IncidentReportResponse,
    summary="Build the incident interval and compliance report",
    description="""
    Group raw incident rows by number, compute the gaps between consecutive
    updates, check each gap against the priority SLA and summarise compliance
    per priority.

    **Column names are matched loosely**: `Number`, `Priority`, `State`,
    `Opened`, `Updated` (exact match ignoring case/spaces, then substring).

    **Updated** cells may list several timestamps separated by `;`, `,` or newlines.

    **SLA thresholds**: P1 = 1h, P2 = 3h, P3 = 4h, P4 = 8h (anything else 8h).
    """,
    responses={
        200: {
            "description": "Report built",
            "content": {"application/json": {"example": REPORT_RESPONSE_EXAMPLE}}
        }
    }
)
def build_report(
    request: Request,
    payload: IncidentRecordsRequest = Body(..., examples=[REPORT_REQUEST_EXAMPLE]),
    service: IncidentReportService = Depends(get_report_service)
):
    request_logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
    start_time = time.perf_counter()
    report = service.build_report(payload.records)

    request_logger.info(
        "Report request complete",
        extra={
            "records": len(payload.records),
            "incidents": len(report.incidents),
            "processing_time_ms": int((time.perf_counter() - start_time) * 1000)
        }
    )
    return IncidentReportResponse.from_report(report)


@router.post(
    "/reports/xlsx",
    summary="Build the report as a downloadable workbook",
    response_class=Response,
    responses={
        200: {"description": "Workbook with the two report sheets", "content": {XLSX_MEDIA_TYPE: {}}},
        422: {"description": "No incident could be derived from the records"}
    }
)
def build_report_workbook(
    payload: IncidentRecordsRequest = Body(..., examples=[REPORT_REQUEST_EXAMPLE]),
    service: IncidentReportService = Depends(get_report_service)
):
    report = service.build_report(payload.records)
    if report.is_empty:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Processed output is empty - check input columns (Number/Priority/Opened/Updated)"
        )

    content = WorkbookWriter().to_bytes(report)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="incident-report-processed.xlsx"'}
    )


@router.get(
    "/thresholds",
    response_model=ThresholdResponse,
    summary="Current SLA thresholds"
)
def get_thresholds(
    config_provider: ISLAConfigProvider = Depends(get_config_provider)
):
    config = config_provider.get_config()
    return ThresholdResponse(
        sla_targets_minutes=config.sla_targets,
        default_minutes=config.default_minutes,
        compliance_target_percent=config.compliance_target_percent,
        flagged_priorities=config.flagged_priorities,
        priority_buckets=config.priority_buckets,
    )


sla_router = router
