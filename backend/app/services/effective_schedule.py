"""Resolution of where a session actually takes place.

A session carries two parallel placements: the ``original`` one produced by
generation or pending assignment, and an ``actual`` override written by the
rescheduler. Everything downstream (conflict checks, enrollment, timetables)
reads the resolved placement through :func:`effective_schedule` instead of
poking at the raw columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from app.models.class_session import ClassSession
from app.models.time_slot import DayOfWeek, TimeSlot


@dataclass(frozen=True)
class ScheduleSlot:
    date: date
    day_of_week: DayOfWeek
    time_slot: TimeSlot
    room_id: str | None


@dataclass(frozen=True)
class Original:
    original: ScheduleSlot

    @property
    def effective(self) -> ScheduleSlot:
        return self.original


@dataclass(frozen=True)
class Rescheduled:
    original: ScheduleSlot | None
    actual: ScheduleSlot
    reason: str | None = None

    @property
    def effective(self) -> ScheduleSlot:
        return self.actual


Placement = Original | Rescheduled


def _original_slot(session: ClassSession) -> ScheduleSlot | None:
    if session.original_date is None or session.original_day_of_week is None or session.original_time_slot is None:
        return None
    return ScheduleSlot(
        date=session.original_date,
        day_of_week=session.original_day_of_week,
        time_slot=session.original_time_slot,
        room_id=session.original_room_id,
    )


def _actual_slot(session: ClassSession) -> ScheduleSlot | None:
    if session.actual_date is None or session.actual_day_of_week is None or session.actual_time_slot is None:
        return None
    return ScheduleSlot(
        date=session.actual_date,
        day_of_week=session.actual_day_of_week,
        time_slot=session.actual_time_slot,
        room_id=session.actual_room_id,
    )


def placement_of(session: ClassSession) -> Placement | None:
    """Build the placement variant for a session, or ``None`` when unscheduled."""
    if session.is_pending:
        return None
    original = _original_slot(session)
    if session.is_rescheduled:
        actual = _actual_slot(session)
        if actual is not None:
            return Rescheduled(original=original, actual=actual, reason=session.reschedule_reason)
    if original is None:
        return None
    return Original(original=original)


def effective_schedule(session: ClassSession) -> ScheduleSlot | None:
    placement = placement_of(session)
    if placement is None:
        return None
    return placement.effective
