"""Calendar-day helpers for the `YYYY-MM-DD` strings exchanged with callers.

All values are plain `datetime.date` objects, so they have no time-of-day and no
timezone. That keeps day arithmetic free of the off-by-one shifts that
timezone-aware timestamps introduce.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class MonthSpan:
    """A run of consecutive timeline days that share a calendar month."""

    year: int
    month: int
    first_index: int
    days: int

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")


def parse_date(text: str) -> date:
    """Parse a `YYYY-MM-DD` string, raising ValueError for anything else."""
    value = text.strip() if text is not None else ""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f"Invalid date {text!r}: expected YYYY-MM-DD") from exc


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def difference_in_days(first: date, second: date) -> int:
    """Signed number of days from `first` to `second`."""
    return (second - first).days


def inclusive_days(start: date, end: date) -> int:
    """Days covered by `start..end` counting both ends (a single day is 1)."""
    return difference_in_days(start, end) + 1


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5


def day_range(start: date, end: date) -> List[date]:
    """Every day from `start` to `end` inclusive; empty when inverted."""
    return [add_days(start, offset) for offset in range(max(0, inclusive_days(start, end)))]


def month_spans(days: List[date]) -> List[MonthSpan]:
    """Group an ordered list of days into month header spans."""
    spans: List[MonthSpan] = []
    for index, day in enumerate(days):
        if spans and (spans[-1].year, spans[-1].month) == (day.year, day.month):
            last = spans[-1]
            spans[-1] = MonthSpan(last.year, last.month, last.first_index, last.days + 1)
        else:
            spans.append(MonthSpan(day.year, day.month, index, 1))
    return spans
