from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from app.core.exceptions import AppError, BadRequestError, ResourceNotFoundError
from app.models.class_session import ClassSession, SessionStatus, SessionType
from app.models.course_class import CourseClass
from app.models.room import Room
from app.models.semester import Semester
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.audit import log_activity
from app.services.conflict_service import ensure_session_slot_available
from app.services.enrollment import sync_student_schedules

logger = logging.getLogger(__name__)

FINAL_SESSION_STATUSES = {SessionStatus.completed, SessionStatus.cancelled}


@dataclass
class BatchItemFailure:
    session_id: str
    error: str
    status_code: int


@dataclass
class BatchResult:
    succeeded: list[ClassSession] = field(default_factory=list)
    failed: list[BatchItemFailure] = field(default_factory=list)


def get_session(db: Session, session_id: str) -> ClassSession:
    session = db.get(ClassSession, session_id)
    if session is None:
        raise ResourceNotFoundError("Session", session_id)
    return session


def _owning_class_and_semester(db: Session, session: ClassSession) -> tuple[CourseClass, Semester]:
    course_class = db.get(CourseClass, session.class_id)
    if course_class is None:
        raise ResourceNotFoundError("Class", session.class_id)
    semester = db.get(Semester, course_class.semester_id)
    if semester is None:
        raise ResourceNotFoundError("Semester", course_class.semester_id)
    return course_class, semester


def _ensure_reschedulable(session: ClassSession) -> None:
    if session.session_type != SessionType.in_person:
        raise BadRequestError(
            "Only in-person sessions can be rescheduled",
            details={"session_id": session.id, "session_type": session.session_type.value},
        )
    if session.is_pending:
        raise BadRequestError(
            "Session has no schedule yet and cannot be rescheduled",
            details={"session_id": session.id},
        )
    if session.status in FINAL_SESSION_STATUSES:
        raise BadRequestError(
            f"Session is {session.status.value} and cannot be rescheduled",
            details={"session_id": session.id, "status": session.status.value},
        )


def reschedule_session(
    db: Session,
    session_id: str,
    *,
    new_date: date,
    new_day_of_week: DayOfWeek,
    new_time_slot: TimeSlot,
    new_room_id: str,
    reason: str | None = None,
    actor: str | None = None,
) -> ClassSession:
    session = get_session(db, session_id)
    _ensure_reschedulable(session)

    room = db.get(Room, new_room_id)
    if room is None:
        raise ResourceNotFoundError("Room", new_room_id)
    if not room.is_active:
        raise BadRequestError(f"Room {room.code} is inactive", details={"room_id": room.id})
    actual_day = DayOfWeek.of(new_date)
    if actual_day != new_day_of_week:
        raise BadRequestError(
            f"{new_date.isoformat()} is a {actual_day.display_name}, not a {new_day_of_week.display_name}",
            details={"date": new_date.isoformat(), "day_of_week": new_day_of_week.value},
        )

    course_class, semester = _owning_class_and_semester(db, session)
    if not semester.contains(new_date):
        raise BadRequestError(
            f"{new_date.isoformat()} is outside semester {semester.code}",
            details={
                "date": new_date.isoformat(),
                "semester_start": semester.start_date.isoformat(),
                "semester_end": semester.end_date.isoformat(),
            },
        )

    ensure_session_slot_available(
        db,
        semester_id=semester.id,
        teacher_id=course_class.teacher_id,
        room_id=room.id,
        on_date=new_date,
        slot=new_time_slot,
        exclude_session_id=session.id,
    )

    session.actual_date = new_date
    session.actual_day_of_week = new_day_of_week
    session.actual_time_slot = new_time_slot
    session.actual_room_id = room.id
    session.is_rescheduled = True
    session.reschedule_reason = reason
    db.flush()
    sync_student_schedules(db, session)

    log_activity(
        db,
        actor=actor,
        action="session.reschedule",
        entity_type="session",
        entity_id=session.id,
        details={
            "class_code": course_class.code,
            "date": new_date.isoformat(),
            "time_slot": new_time_slot.value,
            "room_id": room.id,
            "reason": reason,
        },
    )
    db.flush()
    logger.info(
        "Rescheduled session %s of class %s to %s %s in room %s",
        session.sequence_number,
        course_class.code,
        new_date.isoformat(),
        new_time_slot.value,
        room.code,
    )
    return session


def reset_to_original(db: Session, session_id: str, *, actor: str | None = None) -> ClassSession:
    session = get_session(db, session_id)
    if session.status in FINAL_SESSION_STATUSES:
        raise BadRequestError(
            f"A {session.status.value} session cannot be reset",
            details={"session_id": session.id, "status": session.status.value},
        )
    if not session.is_rescheduled:
        return session

    session.actual_date = None
    session.actual_day_of_week = None
    session.actual_time_slot = None
    session.actual_room_id = None
    session.is_rescheduled = False
    session.reschedule_reason = None
    db.flush()
    sync_student_schedules(db, session)

    log_activity(db, actor=actor, action="session.reset", entity_type="session", entity_id=session.id)
    db.flush()
    logger.info("Session %s reset to its original schedule", session.id)
    return session


def mark_completed(db: Session, session_id: str, *, actor: str | None = None) -> ClassSession:
    session = get_session(db, session_id)
    if session.status == SessionStatus.completed:
        return session
    if session.status == SessionStatus.cancelled:
        raise BadRequestError("Cancelled sessions cannot be completed", details={"session_id": session.id})
    if session.is_pending:
        raise BadRequestError("Session has no schedule yet and cannot be completed", details={"session_id": session.id})

    session.status = SessionStatus.completed
    db.flush()
    log_activity(db, actor=actor, action="session.complete", entity_type="session", entity_id=session.id)
    db.flush()
    return session


def mark_cancelled(
    db: Session,
    session_id: str,
    reason: str | None = None,
    *,
    actor: str | None = None,
) -> ClassSession:
    session = get_session(db, session_id)
    if session.status == SessionStatus.cancelled:
        return session
    if session.status == SessionStatus.completed:
        raise BadRequestError("Completed sessions cannot be cancelled", details={"session_id": session.id})

    session.status = SessionStatus.cancelled
    db.flush()
    sync_student_schedules(db, session)
    log_activity(
        db,
        actor=actor,
        action="session.cancel",
        entity_type="session",
        entity_id=session.id,
        details={"reason": reason},
    )
    db.flush()
    logger.info("Session %s cancelled", session.id)
    return session


def _run_batch(
    db: Session,
    session_ids: Iterable[str],
    operation: Callable[[str], ClassSession],
) -> BatchResult:
    result = BatchResult()
    for session_id in dict.fromkeys(session_ids):
        savepoint = db.begin_nested()
        try:
            session = operation(session_id)
        except AppError as exc:
            savepoint.rollback()
            result.failed.append(
                BatchItemFailure(session_id=session_id, error=exc.message, status_code=exc.status_code)
            )
            continue
        savepoint.commit()
        result.succeeded.append(session)
    logger.info("Batch finished: %s succeeded, %s failed", len(result.succeeded), len(result.failed))
    return result


def batch_reschedule(
    db: Session,
    session_ids: Iterable[str],
    *,
    new_date: date,
    new_day_of_week: DayOfWeek,
    new_time_slot: TimeSlot,
    new_room_id: str,
    reason: str | None = None,
    actor: str | None = None,
) -> BatchResult:
    """Apply one target placement to every session independently.

    Each item runs in its own savepoint so a failure leaves the others intact.
    """
    return _run_batch(
        db,
        session_ids,
        lambda session_id: reschedule_session(
            db,
            session_id,
            new_date=new_date,
            new_day_of_week=new_day_of_week,
            new_time_slot=new_time_slot,
            new_room_id=new_room_id,
            reason=reason,
            actor=actor,
        ),
    )


def batch_reset(db: Session, session_ids: Iterable[str], *, actor: str | None = None) -> BatchResult:
    return _run_batch(db, session_ids, lambda session_id: reset_to_original(db, session_id, actor=actor))
