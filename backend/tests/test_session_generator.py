from datetime import date, timedelta

import pytest
from sqlalchemy import select

from app.models.class_session import ClassSession, SessionCategory, SessionType
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.session_generator import counts_for_credits, normalize_session_counts


def _sessions(db, class_id):
    return list(
        db.execute(
            select(ClassSession).where(ClassSession.class_id == class_id).order_by(ClassSession.sequence_number)
        ).scalars()
    )


@pytest.mark.parametrize(
    "credits, expected",
    [
        (2, (10, 5, 5)),
        (3, (15, 10, 5)),
        (4, (20, 15, 5)),
        (5, (25, 17, 8)),
        (1, (5, 4, 1)),
    ],
)
def test_counts_for_credits(credits, expected):
    counts = counts_for_credits(credits)
    assert (counts.total, counts.in_person, counts.e_learning) == expected


def test_balanced_counts_are_kept():
    counts = normalize_session_counts(3, 12, 9, 3)
    assert (counts.total, counts.in_person, counts.e_learning) == (12, 9, 3)


def test_unbalanced_counts_are_recomputed_from_credits():
    counts = normalize_session_counts(4, 30, 10, 5)
    assert counts.total == counts.in_person + counts.e_learning == 20


def test_tuesday_class_gets_ten_weekly_fixed_sessions_and_e_learning(db, factory):
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    room = factory.room(code="A201")
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=10, e_learning=5),
        teacher=factory.teacher(),
        room=room,
        day=DayOfWeek.TUESDAY,
        slot=TimeSlot.CA1,
    )

    sessions = _sessions(db, course_class.id)
    assert [item.sequence_number for item in sessions] == list(range(1, 16))

    fixed = [item for item in sessions if item.category == SessionCategory.fixed]
    assert len(fixed) == 10
    assert fixed[0].original_date == date(2026, 1, 6)
    for previous, current in zip(fixed, fixed[1:]):
        assert current.original_date - previous.original_date == timedelta(days=7)
    assert fixed[-1].original_date <= date(2026, 3, 15)
    assert all(item.original_room_id == room.id and not item.is_pending for item in fixed)
    assert all(item.original_day_of_week == DayOfWeek.TUESDAY for item in fixed)

    online = [item for item in sessions if item.session_type == SessionType.e_learning]
    assert len(online) == 5
    assert all(item.original_date is None and item.original_room_id is None for item in online)
    assert not [item for item in sessions if item.category == SessionCategory.extra]


def test_twelve_in_person_sessions_leave_two_pending_extras(db, factory):
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=12, e_learning=3),
        teacher=factory.teacher(),
        room=factory.room(code="A201"),
    )

    sessions = _sessions(db, course_class.id)
    fixed = [item for item in sessions if item.category == SessionCategory.fixed]
    extra = [item for item in sessions if item.category == SessionCategory.extra]
    assert len(fixed) == 10
    assert len(extra) == 2
    assert all(item.is_pending and item.original_date is None for item in extra)
    assert [item.sequence_number for item in extra] == [11, 12]


def test_short_semester_stops_fixed_sessions_early(db, factory):
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 1, 31))
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=10, e_learning=5),
        teacher=factory.teacher(),
        room=factory.room(),
        day=DayOfWeek.FRIDAY,
    )

    sessions = _sessions(db, course_class.id)
    fixed = [item for item in sessions if item.category == SessionCategory.fixed]
    assert [item.original_date for item in fixed] == [
        date(2026, 1, 9),
        date(2026, 1, 16),
        date(2026, 1, 23),
        date(2026, 1, 30),
    ]
    pending = [item for item in sessions if item.is_pending]
    assert len(pending) == 6
    assert len(sessions) == 15
