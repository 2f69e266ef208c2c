from datetime import date

from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.calendar import (
    add_weeks,
    date_in_week,
    first_occurrence_on_or_after,
    week_of,
    weekly_dates,
    within,
)


def test_first_occurrence_same_day_is_returned_unchanged():
    assert first_occurrence_on_or_after(date(2026, 1, 5), DayOfWeek.MONDAY) == date(2026, 1, 5)


def test_first_occurrence_advances_to_next_matching_weekday():
    assert first_occurrence_on_or_after(date(2026, 1, 5), DayOfWeek.TUESDAY) == date(2026, 1, 6)
    assert first_occurrence_on_or_after(date(2026, 1, 7), DayOfWeek.MONDAY) == date(2026, 1, 12)


def test_week_of_returns_monday():
    assert week_of(date(2026, 1, 5)) == date(2026, 1, 5)
    assert week_of(date(2026, 1, 11)) == date(2026, 1, 5)
    assert week_of(date(2026, 1, 8)) == date(2026, 1, 5)


def test_week_helpers():
    assert add_weeks(date(2026, 1, 6), 2) == date(2026, 1, 20)
    assert date_in_week(date(2026, 1, 5), DayOfWeek.FRIDAY) == date(2026, 1, 9)
    assert within(date(2026, 1, 5), date(2026, 1, 5), date(2026, 1, 5))
    assert not within(date(2026, 1, 4), date(2026, 1, 5), date(2026, 3, 15))


def test_weekly_dates_stops_at_end_and_limit():
    dates = list(weekly_dates(date(2026, 1, 5), date(2026, 1, 31), DayOfWeek.FRIDAY))
    assert dates == [date(2026, 1, 9), date(2026, 1, 16), date(2026, 1, 23), date(2026, 1, 30)]

    limited = list(weekly_dates(date(2026, 1, 5), date(2026, 3, 15), DayOfWeek.FRIDAY, limit=2))
    assert limited == [date(2026, 1, 9), date(2026, 1, 16)]


def test_day_of_week_follows_date_weekday():
    assert DayOfWeek.of(date(2026, 1, 6)) == DayOfWeek.TUESDAY
    assert DayOfWeek.SUNDAY.weekday_index == 6


def test_time_slot_windows():
    assert TimeSlot.CA1.time_range == "06:45 - 09:15"
    assert TimeSlot.CA3.start_time == "12:10"
    assert TimeSlot.CA5.end_time == "20:00"
    assert TimeSlot.CA2.full_display == "Ca 2 (09:25 - 11:55)"
