from __future__ import annotations

from datetime import datetime, timedelta

from conftest import make_incident
from incident_sla.sla.domain import Interval, IntervalCalculator


def test_width_is_the_largest_update_count():
    incidents = [
        make_incident("A", updates=[datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 11)]),
        make_incident("B", updates=[datetime(2024, 1, 1, 9)]),
        make_incident("C"),
    ]
    width, intervals = IntervalCalculator.compute(incidents)

    assert width == 3
    assert [len(row) for row in intervals] == [3, 3, 3]


def test_slots_chain_from_opened_through_each_update():
    incident = make_incident(
        opened_at=datetime(2024, 1, 1, 8),
        updates=[datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 11, 30)],
    )
    first, second = IntervalCalculator.intervals_for(incident, 2)

    assert first.index == 1
    assert first.duration == timedelta(hours=1)
    assert second.index == 2
    assert second.duration == timedelta(hours=2, minutes=30)
    assert second.display == "0d 2h 30m 0s"


def test_slots_beyond_own_updates_are_empty():
    incident = make_incident(updates=[datetime(2024, 1, 1, 9)])
    intervals = IntervalCalculator.intervals_for(incident, 3)

    assert not intervals[0].is_empty
    assert intervals[1].is_empty
    assert intervals[2].is_empty
    assert intervals[2].display == ""
    assert intervals[2].index == 3


def test_missing_opened_leaves_first_slot_empty():
    incident = make_incident(opened_at=None, updates=[datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 10)])
    first, second = IntervalCalculator.intervals_for(incident, 2)

    assert first.is_empty
    assert second.duration == timedelta(hours=1)


def test_unparsed_update_empties_both_neighbouring_slots():
    incident = make_incident(updates=[datetime(2024, 1, 1, 9), None, datetime(2024, 1, 1, 12)])
    intervals = IntervalCalculator.intervals_for(incident, 3)

    assert not intervals[0].is_empty
    assert intervals[1].is_empty
    assert intervals[2].is_empty


def test_no_incidents_means_zero_width():
    assert IntervalCalculator.compute([]) == (0, [])


def test_negative_interval_is_flagged_and_displayed_by_magnitude():
    interval = Interval(index=1, previous=datetime(2024, 1, 1, 10), current=datetime(2024, 1, 1, 9))

    assert interval.is_negative
    assert interval.duration == timedelta(hours=-1)
    assert interval.display == "0d 1h 0m 0s"


def test_empty_interval_is_not_negative():
    assert not Interval(index=1).is_negative
    assert Interval(index=1).duration is None
