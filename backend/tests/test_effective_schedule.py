from datetime import date

from app.models.class_session import ClassSession, SessionCategory, SessionType
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.effective_schedule import Original, Rescheduled, effective_schedule, placement_of


def _fixed_session(**overrides) -> ClassSession:
    values = dict(
        class_id="c1",
        sequence_number=1,
        session_type=SessionType.in_person,
        category=SessionCategory.fixed,
        is_pending=False,
        is_rescheduled=False,
        original_date=date(2026, 1, 6),
        original_day_of_week=DayOfWeek.TUESDAY,
        original_time_slot=TimeSlot.CA1,
        original_room_id="r1",
    )
    values.update(overrides)
    return ClassSession(**values)


def test_original_placement_when_not_rescheduled():
    session = _fixed_session()
    placement = placement_of(session)
    assert isinstance(placement, Original)
    effective = effective_schedule(session)
    assert effective.date == date(2026, 1, 6)
    assert effective.room_id == "r1"


def test_rescheduled_placement_uses_actual_fields_as_a_whole():
    session = _fixed_session(
        is_rescheduled=True,
        actual_date=date(2026, 1, 8),
        actual_day_of_week=DayOfWeek.THURSDAY,
        actual_time_slot=TimeSlot.CA3,
        actual_room_id=None,
        reschedule_reason="holiday",
    )
    placement = placement_of(session)
    assert isinstance(placement, Rescheduled)
    assert placement.reason == "holiday"
    assert placement.original.date == date(2026, 1, 6)

    effective = effective_schedule(session)
    assert effective.date == date(2026, 1, 8)
    assert effective.time_slot == TimeSlot.CA3
    # no mixing with the original room
    assert effective.room_id is None


def test_rescheduled_flag_without_actual_date_falls_back_to_original():
    session = _fixed_session(is_rescheduled=True)
    assert isinstance(placement_of(session), Original)
    assert effective_schedule(session).date == date(2026, 1, 6)


def test_pending_and_e_learning_sessions_are_unscheduled():
    pending = ClassSession(
        class_id="c1",
        sequence_number=11,
        session_type=SessionType.in_person,
        category=SessionCategory.extra,
        is_pending=True,
    )
    online = ClassSession(class_id="c1", sequence_number=12, session_type=SessionType.e_learning, is_pending=False)
    assert effective_schedule(pending) is None
    assert effective_schedule(online) is None
