from datetime import date

from sqlalchemy import select

from app.models.class_session import ClassSession, SessionCategory
from app.models.course_class import CourseClass
from app.models.semester import Semester
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.pending_assigner import AssignmentReport, GreedyFirstFitAssigner, assign_pending_sessions


def _extra_sessions(db, class_id):
    return list(
        db.execute(
            select(ClassSession)
            .where(ClassSession.class_id == class_id, ClassSession.category == SessionCategory.extra)
            .order_by(ClassSession.sequence_number)
        ).scalars()
    )


def test_pending_sessions_get_first_free_slot_off_the_fixed_day(db, factory):
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    room = factory.room(code="A201")
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=12, e_learning=3),
        teacher=factory.teacher(),
        room=room,
        day=DayOfWeek.TUESDAY,
        slot=TimeSlot.CA1,
    )

    reports = assign_pending_sessions(db, semester)

    assert reports[0].assigned == 2
    assert reports[0].unassigned == 0
    first, second = _extra_sessions(db, course_class.id)
    assert not first.is_pending and not second.is_pending
    # Monday 2026-01-05 CA1 is the first candidate, then CA2 on the same day
    assert (first.original_date, first.original_time_slot) == (date(2026, 1, 5), TimeSlot.CA1)
    assert (second.original_date, second.original_time_slot) == (date(2026, 1, 5), TimeSlot.CA2)
    assert first.original_day_of_week == DayOfWeek.MONDAY
    assert first.original_room_id == room.id


def test_assigner_never_uses_the_fixed_day(db, factory):
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=15, e_learning=0),
        teacher=factory.teacher(),
        room=factory.room(),
        day=DayOfWeek.MONDAY,
        slot=TimeSlot.CA3,
    )

    assign_pending_sessions(db, semester)

    extra = _extra_sessions(db, course_class.id)
    assert len(extra) == 5
    assert all(item.original_day_of_week != DayOfWeek.MONDAY for item in extra)
    assert all(semester.start_date <= item.original_date <= semester.end_date for item in extra)


def test_teacher_busy_slots_are_skipped(db, factory):
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    teacher = factory.teacher()
    factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=10, e_learning=5),
        teacher=teacher,
        room=factory.room(code="R1"),
        day=DayOfWeek.MONDAY,
        slot=TimeSlot.CA1,
    )
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=11, e_learning=4),
        teacher=teacher,
        room=factory.room(code="R2"),
        day=DayOfWeek.TUESDAY,
        slot=TimeSlot.CA1,
    )

    GreedyFirstFitAssigner().assign(db, course_class, semester)

    (extra,) = _extra_sessions(db, course_class.id)
    assert (extra.original_date, extra.original_time_slot) == (date(2026, 1, 5), TimeSlot.CA2)


def test_unplaceable_sessions_stay_pending(db, factory):
    # the only room is inactive, so nothing can be placed
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    room = factory.room()
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=12, e_learning=3),
        teacher=factory.teacher(),
        room=room,
    )
    room.is_active = False
    db.flush()

    report = GreedyFirstFitAssigner().assign(db, course_class, semester)

    assert report.assigned == 0
    assert report.unassigned == 2
    assert all(item.is_pending for item in _extra_sessions(db, course_class.id))


def test_search_is_bounded_by_weeks(db, factory):
    semester = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=12, e_learning=3),
        teacher=factory.teacher(),
        room=factory.room(),
    )

    report = GreedyFirstFitAssigner(search_weeks=0).assign(db, course_class, semester)

    assert report.unassigned == 2


class _RecordingStrategy:
    def __init__(self):
        self.seen: list[str] = []

    def assign(self, db, course_class: CourseClass, semester: Semester) -> AssignmentReport:
        self.seen.append(course_class.code)
        return AssignmentReport(class_id=course_class.id, class_code=course_class.code)


def test_strategy_can_be_substituted(db, factory):
    semester = factory.semester()
    for code, day in (("B-CLASS", DayOfWeek.MONDAY), ("A-CLASS", DayOfWeek.WEDNESDAY)):
        factory.course_class(
            semester=semester,
            subject=factory.subject(),
            teacher=factory.teacher(),
            room=factory.room(),
            day=day,
            code=code,
        )

    strategy = _RecordingStrategy()
    assign_pending_sessions(db, semester, strategy)

    assert strategy.seen == ["A-CLASS", "B-CLASS"]
