from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import BadRequestError, ConflictError, DuplicateResourceError, ResourceNotFoundError
from app.models.class_session import ClassSession, SessionType
from app.models.course_class import ClassStatus, CourseClass
from app.models.course_registration import CourseRegistration, RegistrationStatus
from app.models.room import Room
from app.models.semester import Semester, SemesterStatus
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.schemas.course_class import ClassCreate, ClassUpdate
from app.services.audit import log_activity
from app.services.calendar import first_occurrence_on_or_after
from app.services.conflict_service import ensure_class_pattern_available, find_available_room
from app.services.session_generator import delete_class_sessions, generate_sessions, regenerate_sessions

logger = logging.getLogger(__name__)


def get_class(db: Session, class_id: str) -> CourseClass:
    course_class = db.get(CourseClass, class_id)
    if course_class is None:
        raise ResourceNotFoundError("Class", class_id)
    return course_class


def list_classes(db: Session, semester_id: str | None = None, teacher_id: str | None = None) -> list[CourseClass]:
    query = select(CourseClass)
    if semester_id is not None:
        query = query.where(CourseClass.semester_id == semester_id)
    if teacher_id is not None:
        query = query.where(CourseClass.teacher_id == teacher_id)
    return list(db.execute(query.order_by(CourseClass.code)).scalars())


def list_class_sessions(
    db: Session,
    class_id: str,
    session_type: SessionType | None = None,
    rescheduled_only: bool = False,
) -> list[ClassSession]:
    get_class(db, class_id)
    query = select(ClassSession).where(ClassSession.class_id == class_id)
    if session_type is not None:
        query = query.where(ClassSession.session_type == session_type)
    if rescheduled_only:
        query = query.where(ClassSession.is_rescheduled.is_(True))
    return list(db.execute(query.order_by(ClassSession.sequence_number)).scalars())


def _lookup(db: Session, model, resource_type: str, resource_id: str):
    instance = db.get(model, resource_id)
    if instance is None:
        raise ResourceNotFoundError(resource_type, resource_id)
    return instance


def _check_room(room: Room, capacity: int) -> None:
    if not room.is_active:
        raise BadRequestError(f"Room {room.code} is inactive", details={"room_id": room.id})
    if capacity > room.capacity:
        raise BadRequestError(
            f"Class capacity {capacity} exceeds room {room.code} capacity {room.capacity}",
            details={"room_id": room.id, "room_capacity": room.capacity, "capacity": capacity},
        )


def _check_day_in_semester(semester: Semester, course_day) -> None:
    if first_occurrence_on_or_after(semester.start_date, course_day) > semester.end_date:
        raise BadRequestError(
            f"{course_day.display_name} never occurs within semester {semester.code}",
            details={"day_of_week": course_day.value, "semester_id": semester.id},
        )


def create_class(
    db: Session,
    payload: ClassCreate,
    *,
    today: date | None = None,
    actor: str | None = None,
) -> CourseClass:
    settings = get_settings()
    today = today or date.today()

    existing = db.execute(select(CourseClass).where(CourseClass.code == payload.code)).scalar_one_or_none()
    if existing is not None:
        raise DuplicateResourceError(f"Class code {payload.code} already exists", details={"code": payload.code})

    subject = _lookup(db, Subject, "Subject", payload.subject_id)
    _lookup(db, Teacher, "Teacher", payload.teacher_id)
    semester = _lookup(db, Semester, "Semester", payload.semester_id)
    if semester.status != SemesterStatus.upcoming:
        raise BadRequestError(
            f"Classes can only be created for an upcoming semester; {semester.code} is {semester.status.value}",
            details={"semester_id": semester.id, "status": semester.status.value},
        )
    if settings.enforce_future_semester and semester.start_date <= today:
        raise BadRequestError(
            f"Semester {semester.code} has already started",
            details={"semester_id": semester.id, "start_date": semester.start_date.isoformat()},
        )
    _check_day_in_semester(semester, payload.day_of_week)

    if payload.room_id is not None:
        room = _lookup(db, Room, "Room", payload.room_id)
        _check_room(room, payload.capacity)
    else:
        room = find_available_room(
            db,
            semester_id=semester.id,
            day=payload.day_of_week,
            slot=payload.time_slot,
            min_capacity=payload.capacity,
        )
        if room is None:
            raise ConflictError(
                f"No free room for {payload.capacity} students on "
                f"{payload.day_of_week.display_name} {payload.time_slot.full_display}",
                details={
                    "resource": "room",
                    "day_of_week": payload.day_of_week.value,
                    "time_slot": payload.time_slot.value,
                    "capacity": payload.capacity,
                },
            )
        logger.info("Picked room %s for class %s", room.code, payload.code)

    ensure_class_pattern_available(
        db,
        semester_id=semester.id,
        teacher_id=payload.teacher_id,
        room_id=room.id,
        day=payload.day_of_week,
        slot=payload.time_slot,
    )

    course_class = CourseClass(
        code=payload.code,
        subject_id=subject.id,
        teacher_id=payload.teacher_id,
        semester_id=semester.id,
        capacity=payload.capacity,
        enrolled_count=0,
        status=ClassStatus.open,
        day_of_week=payload.day_of_week,
        time_slot=payload.time_slot,
        room_id=room.id,
        start_date=semester.start_date,
        end_date=semester.end_date,
    )
    db.add(course_class)
    db.flush()
    generate_sessions(db, course_class, subject, semester)

    log_activity(
        db,
        actor=actor,
        action="class.create",
        entity_type="class",
        entity_id=course_class.id,
        details={
            "code": course_class.code,
            "day_of_week": course_class.day_of_week.value,
            "time_slot": course_class.time_slot.value,
            "room_id": course_class.room_id,
        },
    )
    logger.info("Class %s created in semester %s", course_class.code, semester.code)
    return course_class


def update_class(db: Session, class_id: str, payload: ClassUpdate, *, actor: str | None = None) -> CourseClass:
    course_class = get_class(db, class_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    semester = _lookup(db, Semester, "Semester", course_class.semester_id)

    new_teacher_id = data.get("teacher_id", course_class.teacher_id)
    new_day = data.get("day_of_week", course_class.day_of_week)
    new_slot = data.get("time_slot", course_class.time_slot)
    new_room_id = data.get("room_id", course_class.room_id)
    new_capacity = data.get("capacity", course_class.capacity)

    schedule_changed = (
        new_day != course_class.day_of_week
        or new_slot != course_class.time_slot
        or new_room_id != course_class.room_id
    )
    teacher_changed = new_teacher_id != course_class.teacher_id

    if semester.status == SemesterStatus.completed:
        raise BadRequestError("Classes of a completed semester cannot be modified", details={"semester_id": semester.id})
    if schedule_changed and semester.status != SemesterStatus.upcoming:
        raise BadRequestError(
            "The fixed schedule can only change while the semester is upcoming",
            details={"semester_id": semester.id, "status": semester.status.value},
        )
    if new_capacity < course_class.enrolled_count:
        raise BadRequestError(
            f"Capacity cannot drop below the {course_class.enrolled_count} enrolled students",
            details={"enrolled_count": course_class.enrolled_count, "capacity": new_capacity},
        )

    if teacher_changed:
        _lookup(db, Teacher, "Teacher", new_teacher_id)
    room = _lookup(db, Room, "Room", new_room_id)
    if new_room_id != course_class.room_id or new_capacity > room.capacity:
        _check_room(room, new_capacity)
    if schedule_changed:
        _check_day_in_semester(semester, new_day)
    if schedule_changed or teacher_changed:
        ensure_class_pattern_available(
            db,
            semester_id=semester.id,
            teacher_id=new_teacher_id,
            room_id=new_room_id,
            day=new_day,
            slot=new_slot,
            exclude_class_id=course_class.id,
        )

    course_class.teacher_id = new_teacher_id
    course_class.day_of_week = new_day
    course_class.time_slot = new_slot
    course_class.room_id = new_room_id
    course_class.capacity = new_capacity
    if course_class.enrolled_count >= course_class.capacity:
        course_class.status = ClassStatus.full
    elif course_class.status == ClassStatus.full:
        course_class.status = ClassStatus.open
    db.flush()

    if schedule_changed:
        subject = _lookup(db, Subject, "Subject", course_class.subject_id)
        regenerate_sessions(db, course_class, subject, semester)

    if data:
        log_activity(
            db,
            actor=actor,
            action="class.update",
            entity_type="class",
            entity_id=course_class.id,
            details={"fields": sorted(data), "regenerated": schedule_changed},
        )
    return course_class


def delete_class(db: Session, class_id: str, *, actor: str | None = None) -> None:
    course_class = get_class(db, class_id)
    registered = db.execute(
        select(func.count())
        .select_from(CourseRegistration)
        .where(
            CourseRegistration.class_id == class_id,
            CourseRegistration.status == RegistrationStatus.registered,
        )
    ).scalar_one()
    if registered:
        raise BadRequestError(
            f"Class {course_class.code} still has {registered} registered students",
            details={"class_id": class_id, "registered": registered},
        )

    delete_class_sessions(db, class_id)
    db.execute(delete(CourseRegistration).where(CourseRegistration.class_id == class_id))
    log_activity(
        db,
        actor=actor,
        action="class.delete",
        entity_type="class",
        entity_id=class_id,
        details={"code": course_class.code},
    )
    db.delete(course_class)
    db.flush()
    logger.info("Class %s deleted", course_class.code)
