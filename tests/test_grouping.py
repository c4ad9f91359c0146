from __future__ import annotations

from datetime import datetime

from incident_sla.sla.domain import ColumnMapping, IncidentGrouper, resolve_column
from incident_sla.sla.domain.services import cell_text, split_update_cell


def test_resolve_column_prefers_exact_match():
    assert resolve_column(["Number of updates", "NUMBER"], "Number") == "NUMBER"
    assert resolve_column(["Opened By", "  Opened  "], "Opened") == "  Opened  "


def test_resolve_column_falls_back_to_substring():
    assert resolve_column(["Incident Number", "Priority"], "Number") == "Incident Number"
    assert resolve_column(["Last updated"], "Updated") == "Last updated"


def test_resolve_column_no_match():
    assert resolve_column(["Foo", "Bar"], "Number") is None


def test_column_mapping_defaults_when_nothing_resembles_a_role():
    columns = ColumnMapping.resolve(["Foo"])
    assert columns == ColumnMapping()
    assert columns.number == "Number"


def test_column_keys_are_a_first_seen_union():
    records = [{"A": 1, "B": 2}, {"C": 3, "A": 4}]
    assert IncidentGrouper.column_keys(records) == ["A", "B", "C"]


def test_split_update_cell():
    assert split_update_cell("a; b,c\n d") == ["a", "b", "c", "d"]
    assert split_update_cell(";;") == []
    assert split_update_cell("") == []
    assert split_update_cell(None) == []
    assert split_update_cell(45000.5) == [45000.5]


def test_cell_text_drops_trailing_zero_of_integral_floats():
    assert cell_text(1001.0) == "1001"
    assert cell_text(10.5) == "10.5"
    assert cell_text(None) == ""


def test_group_merges_rows_by_number_in_first_seen_order(multi_incident_records):
    incidents = IncidentGrouper.group(multi_incident_records)

    assert [incident.number for incident in incidents] == ["INC1", "INC2"]

    second = incidents[1]
    assert second.priority == "P3 - Medium"
    assert second.state == "Closed"
    assert second.opened_at == datetime(2024, 1, 1, 8, 0)
    assert [event.parsed_at for event in second.updates] == [
        datetime(2024, 1, 1, 9, 0),
        datetime(2024, 1, 1, 13, 0),
        datetime(2024, 1, 1, 18, 0),
    ]


def test_group_discards_blank_numbers():
    records = [
        {"Number": "  ", "Priority": "P1"},
        {"Number": None, "Priority": "P1"},
        {"Number": "INC9", "Priority": "P2"},
    ]
    incidents = IncidentGrouper.group(records)
    assert [incident.number for incident in incidents] == ["INC9"]


def test_group_trims_numbers_and_accepts_numeric_ids():
    records = [{"Number": 1001.0}, {"Number": " 1001 "}]
    incidents = IncidentGrouper.group(records)
    assert len(incidents) == 1
    assert incidents[0].number == "1001"


def test_group_uses_loosely_matched_headers():
    records = [
        {
            "Incident Number": "INC1",
            "priority ": "P2",
            "Opened At": "01-01-2024 08:00",
            "Last Updated": "01-01-2024 09:00",
        }
    ]
    incident = IncidentGrouper.group(records)[0]
    assert incident.priority == "P2"
    assert incident.opened_at == datetime(2024, 1, 1, 8, 0)
    assert incident.update_count == 1


def test_unparsed_updates_sort_after_parsed_ones():
    records = [
        {"Number": "INC1", "Updated": "zeta; 01-01-2024 10:00; alpha; 01-01-2024 09:00"},
    ]
    incident = IncidentGrouper.group(records)[0]
    assert [event.display for event in incident.updates] == [
        "2024-01-01 09:00:00",
        "2024-01-01 10:00:00",
        "alpha",
        "zeta",
    ]
    assert incident.updates[2].parsed_at is None


def test_opened_at_ignores_unparsable_candidates():
    records = [
        {"Number": "INC1", "Opened": "unknown"},
        {"Number": "INC1", "Opened": "02-01-2024 08:00"},
        {"Number": "INC1", "Opened": ""},
    ]
    incident = IncidentGrouper.group(records)[0]
    assert incident.opened_at == datetime(2024, 1, 2, 8, 0)


def test_incident_without_any_parsable_opened_value():
    incident = IncidentGrouper.group([{"Number": "INC1", "Opened": "pending"}])[0]
    assert incident.opened_at is None
    assert incident.opened_display == ""


def test_native_datetime_and_serial_cells_are_accepted():
    records = [
        {"Number": "INC1", "Opened": datetime(2024, 1, 1, 8, 0), "Updated": 45292.5},
    ]
    incident = IncidentGrouper.group(records)[0]
    assert incident.opened_at == datetime(2024, 1, 1, 8, 0)
    assert incident.updates[0].parsed_at == datetime(2024, 1, 1, 12, 0)
