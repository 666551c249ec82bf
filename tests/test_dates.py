"""Tests for inclusive date-range arithmetic."""
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from coworking.services.dates import DateRange, days_between_inclusive, overlaps

DAY = date(2031, 3, 1)


def _day(n: int) -> date:
    return date(2031, 3, n)


def test_same_day_counts_as_one():
    assert days_between_inclusive(DAY, DAY) == 1
    assert DateRange(DAY, DAY).days == 1


def test_counts_both_endpoints():
    assert days_between_inclusive(_day(1), _day(15)) == 15


def test_time_of_day_is_ignored():
    start = datetime(2031, 3, 1, 23, 59, tzinfo=timezone.utc)
    end = datetime(2031, 3, 2, 0, 1, tzinfo=timezone.utc)

    assert days_between_inclusive(start, end) == 2
    assert DateRange(start, end) == DateRange(_day(1), _day(2))


def test_reversed_range_rejected():
    with pytest.raises(ValueError):
        days_between_inclusive(_day(5), _day(4))
    with pytest.raises(ValueError):
        DateRange(_day(5), _day(4))


def test_touching_boundaries_overlap():
    assert overlaps(DateRange(_day(1), _day(15)), DateRange(_day(15), _day(20)))
    assert overlaps(DateRange(_day(15), _day(20)), DateRange(_day(1), _day(15)))


def test_adjacent_ranges_do_not_overlap():
    assert not overlaps(DateRange(_day(1), _day(14)), DateRange(_day(15), _day(20)))
    assert not DateRange(_day(15), _day(20)).overlaps(DateRange(_day(1), _day(14)))


def test_containment_overlaps():
    assert overlaps(DateRange(_day(1), _day(30)), DateRange(_day(10), _day(12)))
