"""Inclusive calendar-date ranges and overlap arithmetic."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _as_date(self.start))
        object.__setattr__(self, "end", _as_date(self.end))
        if self.start > self.end:
            raise ValueError(f"range start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        return days_between_inclusive(self.start, self.end)

    def overlaps(self, other: "DateRange") -> bool:
        return overlaps(self, other)


def days_between_inclusive(start: date, end: date) -> int:
    """Count the days from ``start`` to ``end`` with both endpoints included.

    A same-day range counts as one day.
    """

    start, end = _as_date(start), _as_date(end)
    if end < start:
        raise ValueError(f"end {end} is before start {start}")
    return (end - start).days + 1


def overlaps(a: DateRange, b: DateRange) -> bool:
    """Return True when the two inclusive ranges share at least one day."""

    return a.start <= b.end and b.start <= a.end


def today() -> date:
    """Current calendar date in UTC."""

    return datetime.now(timezone.utc).date()


def _as_date(value: date) -> date:
    """Drop any time-of-day component."""

    if isinstance(value, datetime):
        return value.date()
    return value
