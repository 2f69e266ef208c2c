from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError
from app.models.class_session import ClassSession, SessionStatus, SessionType
from app.models.course_class import CourseClass
from app.models.room import Room
from app.models.semester import Semester, SemesterStatus
from app.models.student import Student
from app.models.student_schedule import StudentSchedule, StudentScheduleStatus
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.time_slot import SLOT_ORDER, DayOfWeek, TimeSlot
from app.services.calendar import week_of
from app.services.effective_schedule import effective_schedule

logger = logging.getLogger(__name__)

VISIBLE_SEMESTER_STATUSES = (SemesterStatus.upcoming, SemesterStatus.active)


@dataclass
class TimetableEntry:
    session_id: str
    sequence_number: int
    date: date
    day_of_week: DayOfWeek
    time_slot: TimeSlot
    class_id: str
    class_code: str
    teacher_id: str
    is_rescheduled: bool
    status: SessionStatus
    room_id: str | None = None
    room_code: str | None = None
    subject_code: str | None = None
    subject_name: str | None = None
    teacher_name: str | None = None

    @property
    def start_time(self) -> str:
        return self.time_slot.start_time

    @property
    def end_time(self) -> str:
        return self.time_slot.end_time


@dataclass
class WeeklyTimetable:
    owner_type: str
    owner_id: str
    week_start: date
    week_end: date
    entries: list[TimetableEntry] = field(default_factory=list)


def normalize_week_start(week_start: date | None, *, today: date | None = None) -> date:
    requested = week_start or today or date.today()
    monday = week_of(requested)
    if week_start is not None and monday != week_start:
        logger.warning("Week start %s is not a Monday; using %s", week_start.isoformat(), monday.isoformat())
    return monday


class _Lookups:
    """Per-request cache of the records a timetable row points at."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._cache: dict[tuple[type, str], object] = {}

    def get(self, model, key: str | None):
        if key is None:
            return None
        cache_key = (model, key)
        if cache_key not in self._cache:
            self._cache[cache_key] = self.db.get(model, key)
        return self._cache[cache_key]


def _entry(lookups: _Lookups, session: ClassSession, course_class: CourseClass) -> TimetableEntry | None:
    effective = effective_schedule(session)
    if effective is None:
        return None
    subject = lookups.get(Subject, course_class.subject_id)
    teacher = lookups.get(Teacher, course_class.teacher_id)
    room = lookups.get(Room, effective.room_id)
    return TimetableEntry(
        session_id=session.id,
        sequence_number=session.sequence_number,
        date=effective.date,
        day_of_week=effective.day_of_week,
        time_slot=effective.time_slot,
        class_id=course_class.id,
        class_code=course_class.code,
        teacher_id=course_class.teacher_id,
        is_rescheduled=bool(session.is_rescheduled),
        status=session.status,
        room_id=effective.room_id,
        room_code=room.code if room is not None else None,
        subject_code=subject.code if subject is not None else None,
        subject_name=subject.name if subject is not None else None,
        teacher_name=teacher.full_name if teacher is not None else None,
    )


def _sorted(entries: list[TimetableEntry]) -> list[TimetableEntry]:
    return sorted(entries, key=lambda item: (item.date, SLOT_ORDER.index(item.time_slot), item.class_code))


def _placed_sessions_in_week(monday: date, sunday: date):
    return (
        select(ClassSession, CourseClass)
        .join(CourseClass, CourseClass.id == ClassSession.class_id)
        .join(Semester, Semester.id == CourseClass.semester_id)
        .where(
            Semester.status.in_(VISIBLE_SEMESTER_STATUSES),
            ClassSession.session_type == SessionType.in_person,
            ClassSession.is_pending.is_(False),
            ClassSession.status != SessionStatus.cancelled,
            or_(
                and_(ClassSession.original_date >= monday, ClassSession.original_date <= sunday),
                and_(ClassSession.actual_date >= monday, ClassSession.actual_date <= sunday),
            ),
        )
    )


def _collect(
    db: Session,
    rows,
    monday: date,
    sunday: date,
    *,
    room_id: str | None = None,
) -> list[TimetableEntry]:
    lookups = _Lookups(db)
    entries: list[TimetableEntry] = []
    for session, course_class in rows:
        entry = _entry(lookups, session, course_class)
        if entry is None or not (monday <= entry.date <= sunday):
            continue
        if room_id is not None and entry.room_id != room_id:
            continue
        entries.append(entry)
    return _sorted(entries)


def teacher_week(db: Session, teacher_id: str, week_start: date | None = None) -> WeeklyTimetable:
    if db.get(Teacher, teacher_id) is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    monday = normalize_week_start(week_start)
    sunday = monday + timedelta(days=6)
    rows = db.execute(_placed_sessions_in_week(monday, sunday).where(CourseClass.teacher_id == teacher_id)).all()
    return WeeklyTimetable(
        owner_type="teacher",
        owner_id=teacher_id,
        week_start=monday,
        week_end=sunday,
        entries=_collect(db, rows, monday, sunday),
    )


def room_week(db: Session, room_id: str, week_start: date | None = None) -> WeeklyTimetable:
    if db.get(Room, room_id) is None:
        raise ResourceNotFoundError("Room", room_id)
    monday = normalize_week_start(week_start)
    sunday = monday + timedelta(days=6)
    query = _placed_sessions_in_week(monday, sunday).where(
        or_(ClassSession.original_room_id == room_id, ClassSession.actual_room_id == room_id)
    )
    rows = db.execute(query).all()
    return WeeklyTimetable(
        owner_type="room",
        owner_id=room_id,
        week_start=monday,
        week_end=sunday,
        entries=_collect(db, rows, monday, sunday, room_id=room_id),
    )


def student_week(db: Session, student_id: str, week_start: date | None = None) -> WeeklyTimetable:
    """Week view built from the student's materialized schedule rows."""
    if db.get(Student, student_id) is None:
        raise ResourceNotFoundError("Student", student_id)
    monday = normalize_week_start(week_start)
    sunday = monday + timedelta(days=6)
    rows = db.execute(
        select(StudentSchedule, ClassSession, CourseClass)
        .join(ClassSession, ClassSession.id == StudentSchedule.session_id)
        .join(CourseClass, CourseClass.id == StudentSchedule.class_id)
        .join(Semester, Semester.id == StudentSchedule.semester_id)
        .where(
            StudentSchedule.student_id == student_id,
            StudentSchedule.status != StudentScheduleStatus.cancelled,
            StudentSchedule.session_date >= monday,
            StudentSchedule.session_date <= sunday,
            Semester.status.in_(VISIBLE_SEMESTER_STATUSES),
        )
    ).all()

    lookups = _Lookups(db)
    entries: list[TimetableEntry] = []
    for row, session, course_class in rows:
        subject = lookups.get(Subject, course_class.subject_id)
        teacher = lookups.get(Teacher, course_class.teacher_id)
        room = lookups.get(Room, row.room_id)
        entries.append(
            TimetableEntry(
                session_id=session.id,
                sequence_number=session.sequence_number,
                date=row.session_date,
                day_of_week=row.day_of_week,
                time_slot=row.time_slot,
                class_id=course_class.id,
                class_code=course_class.code,
                teacher_id=course_class.teacher_id,
                is_rescheduled=bool(session.is_rescheduled),
                status=session.status,
                room_id=row.room_id,
                room_code=room.code if room is not None else None,
                subject_code=subject.code if subject is not None else None,
                subject_name=subject.name if subject is not None else None,
                teacher_name=teacher.full_name if teacher is not None else None,
            )
        )
    return WeeklyTimetable(
        owner_type="student",
        owner_id=student_id,
        week_start=monday,
        week_end=sunday,
        entries=_sorted(entries),
    )
