from __future__ import annotations

from collections.abc import Iterator
from datetime import date, timedelta

from app.models.time_slot import DayOfWeek


def first_occurrence_on_or_after(start: date, weekday: DayOfWeek) -> date:
    """Earliest date >= ``start`` falling on ``weekday``.

    Unbounded: callers compare the result against their own range ceiling.
    """
    current = start
    while DayOfWeek.of(current) != weekday:
        current += timedelta(days=1)
    return current


def week_of(value: date) -> date:
    """Monday of the week containing ``value``."""
    return value - timedelta(days=value.weekday())


def add_weeks(value: date, weeks: int) -> date:
    return value + timedelta(weeks=weeks)


def date_in_week(monday: date, weekday: DayOfWeek) -> date:
    return monday + timedelta(days=weekday.weekday_index)


def within(value: date, start: date, end: date) -> bool:
    return start <= value <= end


def weekly_dates(start: date, end: date, weekday: DayOfWeek, limit: int | None = None) -> Iterator[date]:
    current = first_occurrence_on_or_after(start, weekday)
    emitted = 0
    while current <= end:
        if limit is not None and emitted >= limit:
            return
        yield current
        emitted += 1
        current = add_weeks(current, 1)
