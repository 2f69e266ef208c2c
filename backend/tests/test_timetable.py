import logging
from datetime import date

import pytest

from app.core.exceptions import ResourceNotFoundError
from app.models.semester import SemesterStatus
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.enrollment import enroll_student
from app.services.rescheduler import mark_cancelled, reschedule_session
from app.services.class_service import list_class_sessions
from app.services.timetable import normalize_week_start, room_week, student_week, teacher_week


def test_normalize_week_start_snaps_to_monday(caplog):
    with caplog.at_level(logging.WARNING, logger="app.services.timetable"):
        assert normalize_week_start(date(2026, 1, 8)) == date(2026, 1, 5)
    assert "not a Monday" in caplog.text
    assert normalize_week_start(None, today=date(2026, 1, 11)) == date(2026, 1, 5)


def test_teacher_week_lists_sorted_entries(db, factory):
    semester = factory.semester()
    teacher = factory.teacher()
    subject = factory.subject()
    factory.course_class(
        semester=semester, subject=subject, teacher=teacher, room=factory.room(), day=DayOfWeek.WEDNESDAY, code="B-1"
    )
    factory.course_class(
        semester=semester, subject=subject, teacher=teacher, room=factory.room(), slot=TimeSlot.CA3, code="A-1"
    )

    week = teacher_week(db, teacher.id, date(2026, 1, 5))

    assert (week.week_start, week.week_end) == (date(2026, 1, 5), date(2026, 1, 11))
    assert [(entry.date, entry.class_code) for entry in week.entries] == [
        (date(2026, 1, 6), "A-1"),
        (date(2026, 1, 7), "B-1"),
    ]
    assert week.entries[0].start_time == "12:10"
    assert week.entries[0].subject_code == subject.code


def test_room_week_follows_rescheduled_sessions(db, factory):
    semester = factory.semester()
    home = factory.room()
    spare = factory.room()
    course_class = factory.course_class(
        semester=semester, subject=factory.subject(), teacher=factory.teacher(), room=home
    )
    first = list_class_sessions(db, course_class.id)[0]
    reschedule_session(
        db,
        first.id,
        new_date=date(2026, 1, 8),
        new_day_of_week=DayOfWeek.THURSDAY,
        new_time_slot=TimeSlot.CA4,
        new_room_id=spare.id,
    )

    assert room_week(db, home.id, date(2026, 1, 5)).entries == []
    moved = room_week(db, spare.id, date(2026, 1, 5)).entries
    assert len(moved) == 1
    assert moved[0].is_rescheduled is True
    assert moved[0].time_slot == TimeSlot.CA4


def test_cancelled_sessions_and_completed_semesters_are_hidden(db, factory):
    semester = factory.semester()
    teacher = factory.teacher()
    course_class = factory.course_class(
        semester=semester, subject=factory.subject(), teacher=teacher, room=factory.room()
    )
    first = list_class_sessions(db, course_class.id)[0]
    mark_cancelled(db, first.id, reason="holiday")
    assert teacher_week(db, teacher.id, date(2026, 1, 5)).entries == []
    assert len(teacher_week(db, teacher.id, date(2026, 1, 12)).entries) == 1

    semester.status = SemesterStatus.completed
    db.flush()
    assert teacher_week(db, teacher.id, date(2026, 1, 12)).entries == []


def test_student_week_uses_materialized_rows(db, factory):
    semester = factory.semester()
    course_class = factory.course_class(
        semester=semester, subject=factory.subject(), teacher=factory.teacher(), room=factory.room()
    )
    student = factory.student()
    enroll_student(db, course_class.id, student.id)

    week = student_week(db, student.id, date(2026, 1, 12))
    assert [entry.date for entry in week.entries] == [date(2026, 1, 13)]
    assert week.entries[0].class_code == course_class.code
    assert week.owner_type == "student"


def test_unknown_owner_is_not_found(db):
    with pytest.raises(ResourceNotFoundError):
        teacher_week(db, "missing")
    with pytest.raises(ResourceNotFoundError):
        room_week(db, "missing")
    with pytest.raises(ResourceNotFoundError):
        student_week(db, "missing")
