"""Placement of sessions that were left pending when their class was created.

Runs when a semester becomes active. The shipped strategy is a greedy first
fit: for each pending session in sequence order it walks the semester week by
week, trying every working day except the class's own fixed day and every time
slot in order, and takes the first room that is free. Sessions that cannot be
placed stay pending and are reported back; they never fail the activation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.class_session import ClassSession, SessionCategory, SessionType
from app.models.course_class import CourseClass
from app.models.room import Room
from app.models.semester import Semester
from app.models.time_slot import SLOT_ORDER, WORKING_DAYS, DayOfWeek, TimeSlot
from app.services.calendar import add_weeks, date_in_week, week_of, within
from app.services.conflict_service import room_pattern_conflict, teacher_date_conflict
from app.services.enrollment import sync_student_schedules

logger = logging.getLogger(__name__)


@dataclass
class AssignmentReport:
    class_id: str
    class_code: str
    assigned: int = 0
    unassigned_session_ids: list[str] = field(default_factory=list)

    @property
    def unassigned(self) -> int:
        return len(self.unassigned_session_ids)


class AssignmentStrategy(Protocol):
    def assign(self, db: Session, course_class: CourseClass, semester: Semester) -> AssignmentReport: ...


@dataclass(frozen=True)
class _Candidate:
    date: date
    day: DayOfWeek
    slot: TimeSlot


class GreedyFirstFitAssigner:
    def __init__(self, search_weeks: int | None = None) -> None:
        self.search_weeks = search_weeks if search_weeks is not None else get_settings().pending_search_weeks

    def _candidates(self, semester: Semester, fixed_day: DayOfWeek):
        days = [day for day in WORKING_DAYS if day != fixed_day]
        for week in range(self.search_weeks):
            monday = week_of(add_weeks(semester.start_date, week))
            for day in days:
                candidate_date = date_in_week(monday, day)
                if not within(candidate_date, semester.start_date, semester.end_date):
                    continue
                for slot in SLOT_ORDER:
                    yield _Candidate(candidate_date, day, slot)

    def _pick_room(
        self,
        db: Session,
        rooms: list[Room],
        course_class: CourseClass,
        candidate: _Candidate,
    ) -> Room | None:
        for room in rooms:
            if not room_pattern_conflict(
                db,
                course_class.semester_id,
                room.id,
                candidate.day,
                candidate.slot,
                exclude_class_id=course_class.id,
            ):
                return room
        return None

    def assign(self, db: Session, course_class: CourseClass, semester: Semester) -> AssignmentReport:
        report = AssignmentReport(class_id=course_class.id, class_code=course_class.code)
        sessions = list(
            db.execute(
                select(ClassSession)
                .where(
                    ClassSession.class_id == course_class.id,
                    ClassSession.session_type == SessionType.in_person,
                )
                .order_by(ClassSession.sequence_number)
            ).scalars()
        )
        pending = [item for item in sessions if item.is_pending]
        if not pending:
            return report

        occupied: set[tuple[date, TimeSlot]] = {
            (item.original_date, item.original_time_slot)
            for item in sessions
            if not item.is_pending and item.original_date is not None
        }
        rooms = list(db.execute(select(Room).where(Room.is_active.is_(True)).order_by(Room.code)).scalars())

        for session in pending:
            placed = False
            for candidate in self._candidates(semester, course_class.day_of_week):
                if (candidate.date, candidate.slot) in occupied:
                    continue
                if teacher_date_conflict(
                    db,
                    course_class.semester_id,
                    course_class.teacher_id,
                    candidate.date,
                    candidate.slot,
                    exclude_session_id=session.id,
                ):
                    continue
                room = self._pick_room(db, rooms, course_class, candidate)
                if room is None:
                    continue

                session.original_date = candidate.date
                session.original_day_of_week = candidate.day
                session.original_time_slot = candidate.slot
                session.original_room_id = room.id
                session.category = SessionCategory.extra
                session.is_pending = False
                occupied.add((candidate.date, candidate.slot))
                db.flush()
                sync_student_schedules(db, session)
                report.assigned += 1
                placed = True
                logger.debug(
                    "Placed session %s of class %s on %s %s in room %s",
                    session.sequence_number,
                    course_class.code,
                    candidate.date.isoformat(),
                    candidate.slot.value,
                    room.code,
                )
                break

            if not placed:
                report.unassigned_session_ids.append(session.id)
                logger.warning(
                    "No free slot for session %s of class %s within %s weeks; left pending",
                    session.sequence_number,
                    course_class.code,
                    self.search_weeks,
                )

        return report


def assign_pending_sessions(
    db: Session,
    semester: Semester,
    strategy: AssignmentStrategy | None = None,
) -> list[AssignmentReport]:
    strategy = strategy or GreedyFirstFitAssigner()
    classes = list(
        db.execute(
            select(CourseClass).where(CourseClass.semester_id == semester.id).order_by(CourseClass.code)
        ).scalars()
    )
    reports = [strategy.assign(db, course_class, semester) for course_class in classes]
    assigned = sum(item.assigned for item in reports)
    unassigned = sum(item.unassigned for item in reports)
    logger.info(
        "Pending assignment for semester %s: %s sessions placed, %s left pending across %s classes",
        semester.code,
        assigned,
        unassigned,
        len(classes),
    )
    return reports
