"""Student enrollment and the per-student timetable projection.

``StudentSchedule`` rows mirror the effective placement of every in-person
session of a class a student is registered in. They are written on enrollment
and kept in step by :func:`sync_student_schedules` whenever a session's
placement changes, so conflict lookups never need to resolve sessions live.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, ConflictError, DuplicateResourceError, ResourceNotFoundError
from app.models.class_session import ClassSession, SessionStatus, SessionType
from app.models.course_class import ClassStatus, CourseClass
from app.models.course_registration import CourseRegistration, RegistrationStatus
from app.models.semester import Semester, SemesterStatus
from app.models.student import Student
from app.models.student_schedule import StudentSchedule, StudentScheduleStatus
from app.services.audit import log_activity
from app.services.effective_schedule import effective_schedule

logger = logging.getLogger(__name__)

CLOSED_CLASS_STATUSES = {ClassStatus.full, ClassStatus.closed, ClassStatus.completed}


def _in_person_sessions(db: Session, class_id: str) -> list[ClassSession]:
    return list(
        db.execute(
            select(ClassSession)
            .where(ClassSession.class_id == class_id, ClassSession.session_type == SessionType.in_person)
            .order_by(ClassSession.sequence_number)
        ).scalars()
    )


def _apply_placement(row: StudentSchedule, session: ClassSession) -> None:
    effective = effective_schedule(session)
    if effective is None:
        row.session_date = None
        row.day_of_week = None
        row.time_slot = None
        row.room_id = None
    else:
        row.session_date = effective.date
        row.day_of_week = effective.day_of_week
        row.time_slot = effective.time_slot
        row.room_id = effective.room_id
    if session.status == SessionStatus.cancelled:
        row.status = StudentScheduleStatus.cancelled


def materialize_schedule(
    db: Session,
    *,
    student_id: str,
    course_class: CourseClass,
    sessions: list[ClassSession],
) -> list[StudentSchedule]:
    rows: list[StudentSchedule] = []
    for session in sessions:
        if session.session_type != SessionType.in_person:
            continue
        row = StudentSchedule(
            student_id=student_id,
            class_id=course_class.id,
            session_id=session.id,
            semester_id=course_class.semester_id,
            status=StudentScheduleStatus.scheduled,
        )
        _apply_placement(row, session)
        rows.append(row)
    db.add_all(rows)
    return rows


def sync_student_schedules(db: Session, session: ClassSession) -> int:
    """Copy the session's current effective placement onto every student row pointing at it."""
    rows = list(db.execute(select(StudentSchedule).where(StudentSchedule.session_id == session.id)).scalars())
    for row in rows:
        _apply_placement(row, session)
    if rows:
        logger.debug("Propagated placement of session %s to %s student schedules", session.id, len(rows))
    return len(rows)


def registered_student_ids(db: Session, class_id: str) -> list[str]:
    return list(
        db.execute(
            select(CourseRegistration.student_id).where(
                CourseRegistration.class_id == class_id,
                CourseRegistration.status == RegistrationStatus.registered,
            )
        ).scalars()
    )


def rematerialize_class_schedules(db: Session, course_class: CourseClass, sessions: list[ClassSession]) -> int:
    student_ids = registered_student_ids(db, course_class.id)
    db.execute(delete(StudentSchedule).where(StudentSchedule.class_id == course_class.id))
    for student_id in student_ids:
        materialize_schedule(db, student_id=student_id, course_class=course_class, sessions=sessions)
    if student_ids:
        db.flush()
        logger.info("Rebuilt timetables of %s students for class %s", len(student_ids), course_class.code)
    return len(student_ids)


def find_student_conflict(
    db: Session,
    student_id: str,
    course_class: CourseClass,
    sessions: list[ClassSession],
) -> tuple[ClassSession, StudentSchedule] | None:
    for session in sessions:
        if session.status == SessionStatus.cancelled:
            continue
        effective = effective_schedule(session)
        if effective is None:
            continue
        clash = db.execute(
            select(StudentSchedule).where(
                StudentSchedule.student_id == student_id,
                StudentSchedule.class_id != course_class.id,
                StudentSchedule.session_date == effective.date,
                StudentSchedule.day_of_week == effective.day_of_week,
                StudentSchedule.time_slot == effective.time_slot,
                StudentSchedule.status != StudentScheduleStatus.cancelled,
            )
        ).scalars().first()
        if clash is not None:
            return session, clash
    return None


def enroll_student(
    db: Session,
    class_id: str,
    student_id: str,
    reason: str | None = None,
    *,
    actor: str | None = None,
) -> CourseRegistration:
    course_class = db.get(CourseClass, class_id)
    if course_class is None:
        raise ResourceNotFoundError("Class", class_id)
    student = db.get(Student, student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)

    semester = db.get(Semester, course_class.semester_id)
    if semester is None:
        raise ResourceNotFoundError("Semester", course_class.semester_id)
    if semester.status == SemesterStatus.completed:
        raise BadRequestError(
            "Cannot enroll into a class of a completed semester",
            details={"semester_id": semester.id},
        )
    if course_class.status in CLOSED_CLASS_STATUSES or course_class.is_full:
        raise BadRequestError(
            f"Class {course_class.code} is not open for enrollment",
            details={"class_id": course_class.id, "status": course_class.status.value},
        )

    registration = db.execute(
        select(CourseRegistration).where(
            CourseRegistration.student_id == student_id,
            CourseRegistration.class_id == class_id,
        )
    ).scalar_one_or_none()
    if registration is not None and registration.status == RegistrationStatus.registered:
        raise DuplicateResourceError(
            f"Student {student.code} is already registered in class {course_class.code}",
            details={"class_id": class_id, "student_id": student_id},
        )

    sessions = _in_person_sessions(db, class_id)
    conflict = find_student_conflict(db, student_id, course_class, sessions)
    if conflict is not None:
        session, clash = conflict
        other_class = db.get(CourseClass, clash.class_id)
        other_code = other_class.code if other_class is not None else clash.class_id
        raise ConflictError(
            f"Student already attends class {other_code} on {clash.session_date.isoformat()} "
            f"{clash.day_of_week.display_name} {clash.time_slot.full_display}",
            details={
                "session_id": session.id,
                "date": clash.session_date.isoformat(),
                "day_of_week": clash.day_of_week.value,
                "time_slot": clash.time_slot.value,
                "class_code": other_code,
            },
        )

    if registration is None:
        registration = CourseRegistration(
            student_id=student_id,
            class_id=class_id,
            semester_id=course_class.semester_id,
            status=RegistrationStatus.registered,
            reason=reason,
        )
        db.add(registration)
    else:
        registration.status = RegistrationStatus.registered
        registration.reason = reason
        registration.dropped_at = None
        registration.registered_at = datetime.now(timezone.utc)

    materialize_schedule(db, student_id=student_id, course_class=course_class, sessions=sessions)
    course_class.enrolled_count += 1
    if course_class.enrolled_count >= course_class.capacity:
        course_class.status = ClassStatus.full

    log_activity(
        db,
        actor=actor,
        action="enrollment.create",
        entity_type="class",
        entity_id=course_class.id,
        details={"student_id": student_id, "class_code": course_class.code},
    )
    db.flush()
    logger.info("Student %s enrolled in class %s", student.code, course_class.code)
    return registration


def drop_student(
    db: Session,
    class_id: str,
    student_id: str,
    reason: str | None = None,
    *,
    actor: str | None = None,
) -> CourseRegistration:
    course_class = db.get(CourseClass, class_id)
    if course_class is None:
        raise ResourceNotFoundError("Class", class_id)
    registration = db.execute(
        select(CourseRegistration).where(
            CourseRegistration.student_id == student_id,
            CourseRegistration.class_id == class_id,
            CourseRegistration.status == RegistrationStatus.registered,
        )
    ).scalar_one_or_none()
    if registration is None:
        raise ResourceNotFoundError("Registration", f"{class_id}/{student_id}")

    registration.status = RegistrationStatus.dropped
    registration.dropped_at = datetime.now(timezone.utc)
    if reason:
        registration.reason = reason
    db.execute(
        delete(StudentSchedule).where(
            StudentSchedule.student_id == student_id,
            StudentSchedule.class_id == class_id,
        )
    )
    course_class.enrolled_count = max(0, course_class.enrolled_count - 1)
    if course_class.status == ClassStatus.full and course_class.enrolled_count < course_class.capacity:
        course_class.status = ClassStatus.open

    log_activity(
        db,
        actor=actor,
        action="enrollment.drop",
        entity_type="class",
        entity_id=course_class.id,
        details={"student_id": student_id, "class_code": course_class.code},
    )
    db.flush()
    logger.info("Student %s dropped from class %s", student_id, course_class.code)
    return registration


def list_registrations(db: Session, class_id: str, include_dropped: bool = False) -> list[CourseRegistration]:
    if db.get(CourseClass, class_id) is None:
        raise ResourceNotFoundError("Class", class_id)
    query = select(CourseRegistration).where(CourseRegistration.class_id == class_id)
    if not include_dropped:
        query = query.where(CourseRegistration.status == RegistrationStatus.registered)
    return list(db.execute(query.order_by(CourseRegistration.registered_at)).scalars())
