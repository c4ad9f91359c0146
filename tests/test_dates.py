from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from incident_sla.sla.domain import DateNormalizer
from incident_sla.sla.domain.dates import to_milliseconds


@pytest.mark.parametrize(
    "text, expected",
    [
        ("31-01-2024 08:30", datetime(2024, 1, 31, 8, 30)),
        ("1/2/24 9:05:10 PM", datetime(2024, 2, 1, 21, 5, 10)),
        ("12/01/2024 12:15 AM", datetime(2024, 1, 12, 0, 15)),
        ("12/01/2024 12:15 pm", datetime(2024, 1, 12, 12, 15)),
        ("05-03-2024T07:00", datetime(2024, 3, 5, 7, 0)),
        ("  01-01-2024 08:00  ", datetime(2024, 1, 1, 8, 0)),
    ],
)
def test_day_first_strings(text, expected):
    assert DateNormalizer.parse(text) == expected


def test_day_first_string_with_invalid_fields_is_none():
    assert DateNormalizer.parse("31-02-2024 08:00") is None
    assert DateNormalizer.parse("01-13-2024 08:00") is None


def test_iso_strings_are_read_year_first():
    assert DateNormalizer.parse("2024-01-05") == datetime(2024, 1, 5)
    assert DateNormalizer.parse("2024-01-05T10:00:00") == datetime(2024, 1, 5, 10, 0)


def test_timezone_is_dropped_from_strings():
    assert DateNormalizer.parse("2024-01-05T10:00:00+05:00") == datetime(2024, 1, 5, 10, 0)


def test_date_only_strings_are_read_month_first():
    assert DateNormalizer.parse("03/04/2024") == datetime(2024, 3, 4)
    assert DateNormalizer.parse("05/03/2024") == datetime(2024, 5, 3)


def test_unambiguous_calendar_strings():
    assert DateNormalizer.parse("25/03/2024") == datetime(2024, 3, 25)
    assert DateNormalizer.parse("5 March 2024 14:10") == datetime(2024, 3, 5, 14, 10)


def test_serial_day_numbers():
    assert DateNormalizer.parse(25569) == datetime(1970, 1, 1)
    assert DateNormalizer.parse(45292.5) == datetime(2024, 1, 1, 12, 0)
    assert DateNormalizer.parse(45292.25) == datetime(2024, 1, 1, 6, 0)


def test_datetime_and_date_values():
    aware = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
    assert DateNormalizer.parse(aware) == datetime(2024, 1, 1, 8, 0)
    assert DateNormalizer.parse(aware).tzinfo is None
    assert DateNormalizer.parse(date(2024, 3, 1)) == datetime(2024, 3, 1)


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", True, float("nan"), float("inf")])
def test_unparsable_values_are_none(value):
    assert DateNormalizer.parse(value) is None


def test_format_canonical_and_short():
    stamp = datetime(2024, 1, 2, 3, 4, 5)
    assert DateNormalizer.format_canonical(stamp) == "2024-01-02 03:04:05"
    assert DateNormalizer.format_short(stamp) == "02-01-2024"
    assert DateNormalizer.format_canonical(None) == ""
    assert DateNormalizer.format_short(None) == ""


def test_format_duration():
    assert DateNormalizer.format_duration(30 * 60 * 1000) == "0d 0h 30m 0s"
    assert DateNormalizer.format_duration(90_061_000) == "1d 1h 1m 1s"
    assert DateNormalizer.format_duration(1_999) == "0d 0h 0m 1s"
    assert DateNormalizer.format_duration(0) == "0d 0h 0m 0s"


def test_format_duration_uses_magnitude_of_negative_values():
    assert DateNormalizer.format_duration(-90_061_000) == "1d 1h 1m 1s"


def test_format_duration_missing_values():
    assert DateNormalizer.format_duration(None) == ""
    assert DateNormalizer.format_duration(float("nan")) == ""


def test_to_milliseconds_is_signed():
    assert to_milliseconds(timedelta(minutes=1, milliseconds=5)) == 60_005
    assert to_milliseconds(timedelta(minutes=-1)) == -60_000
