from __future__ import annotations

import io
import logging

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from incident_sla.main import app
from incident_sla.sla.infrastructure import XLSX_MEDIA_TYPE


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"]["sla_config"] == "loaded"


def test_root_lists_endpoints(client):
    body = client.get("/").json()
    assert body["modules"]["sla"]["prefix"] == "/sla"


def test_build_report(client, single_incident_records):
    response = client.post("/sla/reports", json={"records": single_incident_records})

    assert response.status_code == 200
    body = response.json()
    assert body["incident_count"] == 1
    assert body["max_width"] == 1
    assert body["rows"][0]["Interval 1"] == "0d 0h 30m 0s"
    assert body["rows"][0]["Made SLA"] == "Y"

    p1 = body["compliance"]["rows"][0]
    assert p1 == {
        "priority": "P1 - Critical",
        "total": 1,
        "within": 1,
        "exceeding": 0,
        "percentage_within": 100.0,
        "flag": "compliant",
    }
    assert body["compliance"]["rows"][-1]["priority"] == "Total"


def test_correlation_id_is_echoed(client, single_incident_records):
    response = client.post(
        "/sla/reports",
        json={"records": single_incident_records},
        headers={"X-Correlation-ID": "abc-123"},
    )
    assert response.headers["X-Correlation-ID"] == "abc-123"


def test_correlation_id_is_generated_when_absent(client):
    response = client.get("/health")

    assert len(response.headers["X-Correlation-ID"]) == 36


def test_request_log_carries_path_status_and_size(client, caplog, single_incident_records):
    with caplog.at_level(logging.INFO, logger="incident_sla.shared.api.middleware"):
        response = client.post(
            "/sla/reports",
            json={"records": single_incident_records},
            headers={"X-Correlation-ID": "report-42"},
        )

    completed = [r for r in caplog.records if r.getMessage() == "Request completed"]
    assert len(completed) == 1
    record = completed[0]
    assert record.path == "/sla/reports"
    assert record.method == "POST"
    assert record.status_code == response.status_code == 200
    assert record.request_bytes > 0
    assert record.correlation_id == "report-42"
    assert record.elapsed_ms >= 0


def test_rejected_request_is_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="incident_sla.shared.api.middleware"):
        client.post("/sla/reports", json={"records": [{}]})

    by_message = {r.getMessage(): r for r in caplog.records}
    rejected = by_message["Report request rejected"]
    assert rejected.error_type == "InvalidInputException"
    assert rejected.status_code == 422
    assert by_message["Request completed"].status_code == 422


def test_empty_records_give_an_empty_report(client):
    body = client.post("/sla/reports", json={"records": []}).json()

    assert body["incident_count"] == 0
    assert body["headers"] == []
    assert body["compliance"]["title"] == "Compliance and Credit"


def test_malformed_payload_is_rejected(client):
    assert client.post("/sla/reports", json={"records": "INC1"}).status_code == 422
    assert client.post("/sla/reports", json={}).status_code == 422


def test_records_without_columns_are_rejected(client):
    response = client.post("/sla/reports", json={"records": [{}]})

    assert response.status_code == 422
    body = response.json()
    assert body["error_type"] == "InvalidInputException"
    assert body["detail"].startswith("Invalid incident records")


def test_download_workbook(client, multi_incident_records):
    response = client.post("/sla/reports/xlsx", json={"records": multi_incident_records})

    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    assert "incident-report-processed.xlsx" in response.headers["content-disposition"]

    workbook = load_workbook(io.BytesIO(response.content))
    assert workbook.sheetnames == ["Incident Intervals", "Compliance and Credit"]


def test_download_refuses_empty_report(client):
    response = client.post("/sla/reports/xlsx", json={"records": [{"Priority": "P1"}]})
    assert response.status_code == 422


def test_thresholds(client):
    body = client.get("/sla/thresholds").json()

    assert set(body["sla_targets_minutes"]) >= {"P1", "P2", "P3", "P4"}
    assert body["flagged_priorities"] == ["P1", "P2"]
    assert len(body["priority_buckets"]) == 4
