"""Teacher and room double-booking checks.

Two granularities are supported. Pattern-level checks treat a (day, slot)
as recurring every week and are used when a class's fixed schedule is created
or changed, and by the pending assigner's room scan. Date-level checks compare
exact calendar dates and are used by the rescheduler and the pending
assigner's teacher check.

Every check is scoped to a single semester and only looks at sessions that are
actually placed: pending, cancelled and e-learning sessions never occupy
anything.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError
from app.models.class_session import ClassSession, SessionStatus, SessionType
from app.models.course_class import CourseClass
from app.models.room import Room
from app.models.time_slot import DayOfWeek, TimeSlot
from app.services.effective_schedule import effective_schedule


def _placed_sessions_query(semester_id: str):
    return (
        select(ClassSession, CourseClass)
        .join(CourseClass, CourseClass.id == ClassSession.class_id)
        .where(
            CourseClass.semester_id == semester_id,
            ClassSession.session_type == SessionType.in_person,
            ClassSession.is_pending.is_(False),
            ClassSession.status != SessionStatus.cancelled,
        )
    )


def _touches_day_slot(day: DayOfWeek, slot: TimeSlot):
    return or_(
        and_(ClassSession.original_day_of_week == day, ClassSession.original_time_slot == slot),
        and_(ClassSession.actual_day_of_week == day, ClassSession.actual_time_slot == slot),
    )


def _touches_date_slot(on_date: date, slot: TimeSlot):
    return or_(
        and_(ClassSession.original_date == on_date, ClassSession.original_time_slot == slot),
        and_(ClassSession.actual_date == on_date, ClassSession.actual_time_slot == slot),
    )


def find_teacher_pattern_conflict(
    db: Session,
    semester_id: str,
    teacher_id: str,
    day: DayOfWeek,
    slot: TimeSlot,
    exclude_class_id: str | None = None,
) -> CourseClass | None:
    """Return the class occupying ``teacher_id`` on the weekly (day, slot), if any."""
    query = select(CourseClass).where(
        CourseClass.semester_id == semester_id,
        CourseClass.teacher_id == teacher_id,
        CourseClass.day_of_week == day,
        CourseClass.time_slot == slot,
    )
    if exclude_class_id is not None:
        query = query.where(CourseClass.id != exclude_class_id)
    occupying = db.execute(query.order_by(CourseClass.code)).scalars().first()
    if occupying is not None:
        return occupying

    session_query = _placed_sessions_query(semester_id).where(
        CourseClass.teacher_id == teacher_id,
        _touches_day_slot(day, slot),
    )
    if exclude_class_id is not None:
        session_query = session_query.where(ClassSession.class_id != exclude_class_id)
    for session, course_class in db.execute(session_query).all():
        effective = effective_schedule(session)
        if effective is not None and effective.day_of_week == day and effective.time_slot == slot:
            return course_class
    return None


def find_room_pattern_conflict(
    db: Session,
    semester_id: str,
    room_id: str,
    day: DayOfWeek,
    slot: TimeSlot,
    exclude_class_id: str | None = None,
) -> CourseClass | None:
    """Return the class occupying ``room_id`` on the weekly (day, slot), if any."""
    query = select(CourseClass).where(
        CourseClass.semester_id == semester_id,
        CourseClass.room_id == room_id,
        CourseClass.day_of_week == day,
        CourseClass.time_slot == slot,
    )
    if exclude_class_id is not None:
        query = query.where(CourseClass.id != exclude_class_id)
    occupying = db.execute(query.order_by(CourseClass.code)).scalars().first()
    if occupying is not None:
        return occupying

    session_query = _placed_sessions_query(semester_id).where(
        or_(ClassSession.original_room_id == room_id, ClassSession.actual_room_id == room_id),
        _touches_day_slot(day, slot),
    )
    if exclude_class_id is not None:
        session_query = session_query.where(ClassSession.class_id != exclude_class_id)
    for session, course_class in db.execute(session_query).all():
        effective = effective_schedule(session)
        if (
            effective is not None
            and effective.room_id == room_id
            and effective.day_of_week == day
            and effective.time_slot == slot
        ):
            return course_class
    return None


def teacher_pattern_conflict(
    db: Session,
    semester_id: str,
    teacher_id: str,
    day: DayOfWeek,
    slot: TimeSlot,
    exclude_class_id: str | None = None,
) -> bool:
    return find_teacher_pattern_conflict(db, semester_id, teacher_id, day, slot, exclude_class_id) is not None


def room_pattern_conflict(
    db: Session,
    semester_id: str,
    room_id: str,
    day: DayOfWeek,
    slot: TimeSlot,
    exclude_class_id: str | None = None,
) -> bool:
    return find_room_pattern_conflict(db, semester_id, room_id, day, slot, exclude_class_id) is not None


def find_teacher_date_conflict(
    db: Session,
    semester_id: str,
    teacher_id: str,
    on_date: date,
    slot: TimeSlot,
    exclude_session_id: str | None = None,
) -> tuple[ClassSession, CourseClass] | None:
    query = _placed_sessions_query(semester_id).where(
        CourseClass.teacher_id == teacher_id,
        _touches_date_slot(on_date, slot),
    )
    if exclude_session_id is not None:
        query = query.where(ClassSession.id != exclude_session_id)
    for session, course_class in db.execute(query).all():
        effective = effective_schedule(session)
        if effective is not None and effective.date == on_date and effective.time_slot == slot:
            return session, course_class
    return None


def find_room_date_conflict(
    db: Session,
    semester_id: str,
    room_id: str,
    on_date: date,
    slot: TimeSlot,
    exclude_session_id: str | None = None,
) -> tuple[ClassSession, CourseClass] | None:
    query = _placed_sessions_query(semester_id).where(
        or_(ClassSession.original_room_id == room_id, ClassSession.actual_room_id == room_id),
        _touches_date_slot(on_date, slot),
    )
    if exclude_session_id is not None:
        query = query.where(ClassSession.id != exclude_session_id)
    for session, course_class in db.execute(query).all():
        effective = effective_schedule(session)
        if (
            effective is not None
            and effective.room_id == room_id
            and effective.date == on_date
            and effective.time_slot == slot
        ):
            return session, course_class
    return None


def teacher_date_conflict(
    db: Session,
    semester_id: str,
    teacher_id: str,
    on_date: date,
    slot: TimeSlot,
    exclude_session_id: str | None = None,
) -> bool:
    return find_teacher_date_conflict(db, semester_id, teacher_id, on_date, slot, exclude_session_id) is not None


def room_date_conflict(
    db: Session,
    semester_id: str,
    room_id: str,
    on_date: date,
    slot: TimeSlot,
    exclude_session_id: str | None = None,
) -> bool:
    return find_room_date_conflict(db, semester_id, room_id, on_date, slot, exclude_session_id) is not None


def ensure_class_pattern_available(
    db: Session,
    *,
    semester_id: str,
    teacher_id: str,
    room_id: str,
    day: DayOfWeek,
    slot: TimeSlot,
    exclude_class_id: str | None = None,
) -> None:
    teacher_clash = find_teacher_pattern_conflict(db, semester_id, teacher_id, day, slot, exclude_class_id)
    if teacher_clash is not None:
        raise ConflictError(
            f"Teacher is already teaching class {teacher_clash.code} on {day.display_name} {slot.full_display}",
            details={
                "resource": "teacher",
                "teacher_id": teacher_id,
                "day_of_week": day.value,
                "time_slot": slot.value,
                "class_code": teacher_clash.code,
            },
        )
    room_clash = find_room_pattern_conflict(db, semester_id, room_id, day, slot, exclude_class_id)
    if room_clash is not None:
        raise ConflictError(
            f"Room is already used by class {room_clash.code} on {day.display_name} {slot.full_display}",
            details={
                "resource": "room",
                "room_id": room_id,
                "day_of_week": day.value,
                "time_slot": slot.value,
                "class_code": room_clash.code,
            },
        )


def ensure_session_slot_available(
    db: Session,
    *,
    semester_id: str,
    teacher_id: str,
    room_id: str,
    on_date: date,
    slot: TimeSlot,
    exclude_session_id: str | None = None,
) -> None:
    teacher_clash = find_teacher_date_conflict(db, semester_id, teacher_id, on_date, slot, exclude_session_id)
    if teacher_clash is not None:
        _, course_class = teacher_clash
        raise ConflictError(
            f"Teacher already has class {course_class.code} on {on_date.isoformat()} {slot.full_display}",
            details={
                "resource": "teacher",
                "teacher_id": teacher_id,
                "date": on_date.isoformat(),
                "time_slot": slot.value,
                "class_code": course_class.code,
            },
        )
    room_clash = find_room_date_conflict(db, semester_id, room_id, on_date, slot, exclude_session_id)
    if room_clash is not None:
        _, course_class = room_clash
        raise ConflictError(
            f"Room is already used by class {course_class.code} on {on_date.isoformat()} {slot.full_display}",
            details={
                "resource": "room",
                "room_id": room_id,
                "date": on_date.isoformat(),
                "time_slot": slot.value,
                "class_code": course_class.code,
            },
        )


def find_available_room(
    db: Session,
    *,
    semester_id: str,
    day: DayOfWeek,
    slot: TimeSlot,
    min_capacity: int,
    exclude_class_id: str | None = None,
) -> Room | None:
    """Smallest active room that fits ``min_capacity`` and is free on the weekly (day, slot)."""
    rooms = db.execute(
        select(Room)
        .where(Room.is_active.is_(True), Room.capacity >= min_capacity)
        .order_by(Room.capacity, Room.code)
    ).scalars()
    for room in rooms:
        if not room_pattern_conflict(db, semester_id, room.id, day, slot, exclude_class_id):
            return room
    return None
