from datetime import date

import pytest
from sqlalchemy import select

from app.core.exceptions import ConflictError
from app.models.class_session import ClassSession, SessionCategory
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.conflict_service import (
    find_available_room,
    room_date_conflict,
    room_pattern_conflict,
    teacher_date_conflict,
    teacher_pattern_conflict,
)
from app.services.rescheduler import mark_cancelled


@pytest.fixture()
def scheduled(db, factory):
    semester = factory.semester()
    teacher = factory.teacher()
    room = factory.room(code="A201")
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(),
        teacher=teacher,
        room=room,
        day=DayOfWeek.TUESDAY,
        slot=TimeSlot.CA1,
        code="MATH-01",
    )
    return semester, teacher, room, course_class


def test_pattern_conflicts_detect_fixed_schedule(db, scheduled):
    semester, teacher, room, course_class = scheduled
    assert teacher_pattern_conflict(db, semester.id, teacher.id, DayOfWeek.TUESDAY, TimeSlot.CA1)
    assert room_pattern_conflict(db, semester.id, room.id, DayOfWeek.TUESDAY, TimeSlot.CA1)
    assert not teacher_pattern_conflict(db, semester.id, teacher.id, DayOfWeek.TUESDAY, TimeSlot.CA2)
    assert not room_pattern_conflict(db, semester.id, room.id, DayOfWeek.WEDNESDAY, TimeSlot.CA1)


def test_pattern_conflicts_ignore_excluded_class(db, scheduled):
    semester, teacher, room, course_class = scheduled
    assert not teacher_pattern_conflict(
        db, semester.id, teacher.id, DayOfWeek.TUESDAY, TimeSlot.CA1, exclude_class_id=course_class.id
    )
    assert not room_pattern_conflict(
        db, semester.id, room.id, DayOfWeek.TUESDAY, TimeSlot.CA1, exclude_class_id=course_class.id
    )


def test_pattern_conflicts_are_scoped_to_semester(db, factory, scheduled):
    _, teacher, room, _ = scheduled
    other = factory.semester(start=date(2026, 4, 6), end=date(2026, 6, 14))
    assert not teacher_pattern_conflict(db, other.id, teacher.id, DayOfWeek.TUESDAY, TimeSlot.CA1)
    assert not room_pattern_conflict(db, other.id, room.id, DayOfWeek.TUESDAY, TimeSlot.CA1)


def test_date_conflicts_match_exact_dates_only(db, scheduled):
    semester, teacher, room, course_class = scheduled
    assert teacher_date_conflict(db, semester.id, teacher.id, date(2026, 1, 6), TimeSlot.CA1)
    assert room_date_conflict(db, semester.id, room.id, date(2026, 1, 13), TimeSlot.CA1)
    assert not teacher_date_conflict(db, semester.id, teacher.id, date(2026, 1, 7), TimeSlot.CA1)
    assert not room_date_conflict(db, semester.id, room.id, date(2026, 1, 6), TimeSlot.CA2)


def test_date_conflict_ignores_excluded_and_cancelled_sessions(db, scheduled):
    semester, teacher, room, course_class = scheduled
    first = db.execute(
        select(ClassSession).where(
            ClassSession.class_id == course_class.id,
            ClassSession.category == SessionCategory.fixed,
            ClassSession.sequence_number == 1,
        )
    ).scalar_one()

    assert not teacher_date_conflict(
        db, semester.id, teacher.id, date(2026, 1, 6), TimeSlot.CA1, exclude_session_id=first.id
    )
    mark_cancelled(db, first.id, "flooded")
    assert not room_date_conflict(db, semester.id, room.id, date(2026, 1, 6), TimeSlot.CA1)


def test_second_class_with_same_teacher_and_slot_is_rejected(db, factory, scheduled):
    semester, teacher, _, _ = scheduled
    with pytest.raises(ConflictError) as excinfo:
        factory.course_class(
            semester=semester,
            subject=factory.subject(),
            teacher=teacher,
            room=factory.room(code="B101"),
            day=DayOfWeek.TUESDAY,
            slot=TimeSlot.CA1,
        )
    assert excinfo.value.details["resource"] == "teacher"
    assert excinfo.value.details["class_code"] == "MATH-01"


def test_second_class_with_same_room_and_slot_is_rejected(db, factory, scheduled):
    semester, _, room, _ = scheduled
    with pytest.raises(ConflictError) as excinfo:
        factory.course_class(
            semester=semester,
            subject=factory.subject(),
            teacher=factory.teacher(),
            room=room,
            day=DayOfWeek.TUESDAY,
            slot=TimeSlot.CA1,
        )
    assert excinfo.value.details["resource"] == "room"
    assert excinfo.value.details["time_slot"] == "CA1"


def test_find_available_room_picks_smallest_free_active_room(db, factory, scheduled):
    semester, _, taken, _ = scheduled
    factory.room(code="BIG", capacity=200)
    factory.room(code="CLOSED", capacity=45, is_active=False)
    small = factory.room(code="SMALL", capacity=50)
    factory.room(code="TINY", capacity=10)

    room = find_available_room(
        db,
        semester_id=semester.id,
        day=DayOfWeek.TUESDAY,
        slot=TimeSlot.CA1,
        min_capacity=40,
    )
    assert room.id == small.id
    assert room.id != taken.id
