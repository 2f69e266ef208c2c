from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.class_session import ClassSession, SessionCategory, SessionType
from app.models.course_class import CourseClass
from app.models.semester import Semester
from app.models.student_schedule import StudentSchedule
from app.models.subject import Subject
from app.services.calendar import add_weeks, first_occurrence_on_or_after
from app.services.enrollment import rematerialize_class_schedules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionCounts:
    total: int
    in_person: int
    e_learning: int


# credits -> (total, e_learning, in_person)
CREDIT_SESSION_TABLE: dict[int, tuple[int, int, int]] = {
    2: (10, 5, 5),
    3: (15, 5, 10),
    4: (20, 5, 15),
}


def counts_for_credits(credits: int) -> SessionCounts:
    if credits in CREDIT_SESSION_TABLE:
        total, e_learning, in_person = CREDIT_SESSION_TABLE[credits]
        return SessionCounts(total=total, in_person=in_person, e_learning=e_learning)
    total = credits * 5
    e_learning = max(1, total // 3)
    return SessionCounts(total=total, in_person=total - e_learning, e_learning=e_learning)


def normalize_session_counts(credits: int, total: int, in_person: int, e_learning: int) -> SessionCounts:
    """Keep declared counts when they balance, otherwise derive them from credits."""
    if total == in_person + e_learning and min(total, in_person, e_learning) >= 0:
        return SessionCounts(total=total, in_person=in_person, e_learning=e_learning)
    derived = counts_for_credits(credits)
    logger.info(
        "Session counts %s/%s/%s do not balance; using %s/%s/%s from %s credits",
        total,
        in_person,
        e_learning,
        derived.total,
        derived.in_person,
        derived.e_learning,
        credits,
    )
    return derived


def counts_for_subject(subject: Subject) -> SessionCounts:
    return normalize_session_counts(
        subject.credits,
        subject.total_sessions,
        subject.in_person_sessions,
        subject.e_learning_sessions,
    )


def build_sessions(
    course_class: CourseClass,
    counts: SessionCounts,
    semester_start: date,
    semester_end: date,
    *,
    fixed_limit: int,
) -> list[ClassSession]:
    sessions: list[ClassSession] = []
    sequence = 1

    first_date = first_occurrence_on_or_after(semester_start, course_class.day_of_week)
    fixed_target = min(fixed_limit, counts.in_person)
    for week in range(fixed_target):
        session_date = add_weeks(first_date, week)
        if session_date > semester_end:
            break
        sessions.append(
            ClassSession(
                class_id=course_class.id,
                sequence_number=sequence,
                session_type=SessionType.in_person,
                category=SessionCategory.fixed,
                is_pending=False,
                original_date=session_date,
                original_day_of_week=course_class.day_of_week,
                original_time_slot=course_class.time_slot,
                original_room_id=course_class.room_id,
            )
        )
        sequence += 1

    for _ in range(counts.in_person - len(sessions)):
        sessions.append(
            ClassSession(
                class_id=course_class.id,
                sequence_number=sequence,
                session_type=SessionType.in_person,
                category=SessionCategory.extra,
                is_pending=True,
            )
        )
        sequence += 1

    for _ in range(counts.e_learning):
        sessions.append(
            ClassSession(
                class_id=course_class.id,
                sequence_number=sequence,
                session_type=SessionType.e_learning,
                category=None,
                is_pending=False,
            )
        )
        sequence += 1

    return sessions


def generate_sessions(
    db: Session,
    course_class: CourseClass,
    subject: Subject,
    semester: Semester,
) -> list[ClassSession]:
    settings = get_settings()
    counts = counts_for_subject(subject)
    sessions = build_sessions(
        course_class,
        counts,
        semester.start_date,
        semester.end_date,
        fixed_limit=settings.fixed_session_limit,
    )
    db.add_all(sessions)
    db.flush()

    fixed = sum(1 for item in sessions if item.category == SessionCategory.fixed)
    pending = sum(1 for item in sessions if item.is_pending)
    logger.info(
        "Generated %s sessions for class %s (%s fixed, %s pending, %s e-learning)",
        len(sessions),
        course_class.code,
        fixed,
        pending,
        counts.e_learning,
    )
    return sessions


def delete_class_sessions(db: Session, class_id: str) -> None:
    session_ids = select(ClassSession.id).where(ClassSession.class_id == class_id)
    db.execute(delete(StudentSchedule).where(StudentSchedule.session_id.in_(session_ids)))
    db.execute(delete(ClassSession).where(ClassSession.class_id == class_id))


def regenerate_sessions(
    db: Session,
    course_class: CourseClass,
    subject: Subject,
    semester: Semester,
) -> list[ClassSession]:
    """Discard every session of the class and build a fresh set from its current pattern.

    Reschedules and attendance attached to the old sessions are lost. Registered
    students get their personal timetable rebuilt from the new sessions.
    """
    if course_class.enrolled_count > 0:
        logger.warning(
            "Regenerating sessions for class %s with %s enrolled students; reschedules and attendance are discarded",
            course_class.code,
            course_class.enrolled_count,
        )
    delete_class_sessions(db, course_class.id)
    sessions = generate_sessions(db, course_class, subject, semester)
    rematerialize_class_schedules(db, course_class, sessions)
    return sessions
