from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pytest
from openpyxl import Workbook

from incident_sla.sla.application import IncidentReportService
from incident_sla.sla.domain import Incident, SLAThresholdConfig, UpdateEvent
from incident_sla.sla.infrastructure import StaticConfigProvider


def make_incident(
    number: str = "INC1",
    priority: str = "P1",
    opened_at: datetime | None = datetime(2024, 1, 1, 8, 0),
    updates: Sequence[datetime | None] = (),
    state: str = "",
) -> Incident:
    return Incident(
        number=number,
        priority=priority,
        state=state,
        opened_at=opened_at,
        updates=tuple(UpdateEvent(raw=str(value), parsed_at=value) for value in updates),
    )


def write_input_workbook(path: Path, rows: List[List[Any]], sheet_title: str = "Page 1") -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


@pytest.fixture
def config() -> SLAThresholdConfig:
    return SLAThresholdConfig()


@pytest.fixture
def service(config: SLAThresholdConfig) -> IncidentReportService:
    return IncidentReportService(StaticConfigProvider(config))


@pytest.fixture
def single_incident_records() -> List[Dict[str, Any]]:
    return [
        {
            "Number": "INC1",
            "Priority": "P1",
            "Opened": "01-01-2024 08:00",
            "Updated": "01-01-2024 08:30",
        }
    ]


@pytest.fixture
def multi_incident_records() -> List[Dict[str, Any]]:
    return [
        {
            "Number": "INC1",
            "Priority": "P1 - Critical",
            "State": "Resolved",
            "Opened": "01-01-2024 08:00",
            "Updated": "01-01-2024 08:45",
        },
        {
            "Number": "INC2",
            "Priority": "P3 - Medium",
            "State": "",
            "Opened": "01-01-2024 08:00",
            "Updated": "01-01-2024 13:00; 01-01-2024 09:00",
        },
        {
            "Number": "INC2",
            "Priority": "",
            "State": "Closed",
            "Opened": "01-01-2024 10:00",
            "Updated": "01-01-2024 18:00",
        },
    ]
