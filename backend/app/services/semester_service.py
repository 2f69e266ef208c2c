from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, DuplicateResourceError, ResourceNotFoundError
from app.models.course_class import CourseClass
from app.models.semester import Semester, SemesterStatus
from app.schemas.semester import SemesterCreate, SemesterUpdate
from app.services.audit import log_activity
from app.services.pending_assigner import AssignmentReport, AssignmentStrategy, assign_pending_sessions

logger = logging.getLogger(__name__)


@dataclass
class ActivationReport:
    semester_id: str
    semester_code: str
    status: SemesterStatus
    already_active: bool = False
    demoted_semester_ids: list[str] = field(default_factory=list)
    classes: list[AssignmentReport] = field(default_factory=list)

    @property
    def assigned_total(self) -> int:
        return sum(item.assigned for item in self.classes)

    @property
    def unassigned_total(self) -> int:
        return sum(item.unassigned for item in self.classes)


@dataclass
class SyncReport:
    today: date
    activated: list[str] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)


def get_semester(db: Session, semester_id: str) -> Semester:
    semester = db.get(Semester, semester_id)
    if semester is None:
        raise ResourceNotFoundError("Semester", semester_id)
    return semester


def list_semesters(db: Session, status: SemesterStatus | None = None) -> list[Semester]:
    query = select(Semester)
    if status is not None:
        query = query.where(Semester.status == status)
    return list(db.execute(query.order_by(Semester.start_date.desc())).scalars())


def _validate_window(
    start_date: date,
    end_date: date,
    registration_start: date | None,
    registration_end: date | None,
) -> None:
    if end_date < start_date:
        raise BadRequestError("Semester end date must be on or after its start date")
    if registration_start is None or registration_end is None:
        return
    if registration_start > registration_end:
        raise BadRequestError("Registration must start on or before it ends")
    if registration_end > end_date:
        raise BadRequestError("Registration must end on or before the semester end date")


def create_semester(db: Session, payload: SemesterCreate, *, actor: str | None = None) -> Semester:
    existing = db.execute(select(Semester).where(Semester.code == payload.code)).scalar_one_or_none()
    if existing is not None:
        raise DuplicateResourceError(f"Semester code {payload.code} already exists", details={"code": payload.code})
    _validate_window(
        payload.start_date,
        payload.end_date,
        payload.registration_start_date,
        payload.registration_end_date,
    )
    semester = Semester(**payload.model_dump(), status=SemesterStatus.upcoming, registration_enabled=False)
    db.add(semester)
    db.flush()
    log_activity(
        db,
        actor=actor,
        action="semester.create",
        entity_type="semester",
        entity_id=semester.id,
        details={"code": semester.code},
    )
    db.flush()
    return semester


def update_semester(db: Session, semester_id: str, payload: SemesterUpdate, *, actor: str | None = None) -> Semester:
    semester = get_semester(db, semester_id)
    data = payload.model_dump(exclude_unset=True)
    if semester.status == SemesterStatus.completed:
        raise BadRequestError("Completed semesters cannot be modified", details={"semester_id": semester.id})
    date_changes = {key for key in ("start_date", "end_date") if key in data and data[key] != getattr(semester, key)}
    if date_changes and semester.status != SemesterStatus.upcoming:
        raise BadRequestError(
            "Semester dates can only change while the semester is upcoming",
            details={"semester_id": semester.id, "status": semester.status.value},
        )
    if date_changes and _class_count(db, semester.id) > 0:
        raise BadRequestError(
            "Semester dates cannot change once classes have been created",
            details={"semester_id": semester.id},
        )

    merged = {
        "start_date": data.get("start_date", semester.start_date),
        "end_date": data.get("end_date", semester.end_date),
        "registration_start": data.get("registration_start_date", semester.registration_start_date),
        "registration_end": data.get("registration_end_date", semester.registration_end_date),
    }
    _validate_window(
        merged["start_date"],
        merged["end_date"],
        merged["registration_start"],
        merged["registration_end"],
    )
    for key, value in data.items():
        setattr(semester, key, value)
    db.flush()
    if data:
        log_activity(
            db,
            actor=actor,
            action="semester.update",
            entity_type="semester",
            entity_id=semester.id,
            details={"fields": sorted(data)},
        )
        db.flush()
    return semester


def _class_count(db: Session, semester_id: str) -> int:
    return db.execute(
        select(func.count()).select_from(CourseClass).where(CourseClass.semester_id == semester_id)
    ).scalar_one()


def delete_semester(db: Session, semester_id: str, *, actor: str | None = None) -> None:
    semester = get_semester(db, semester_id)
    if semester.status == SemesterStatus.active:
        raise BadRequestError("An active semester cannot be deleted", details={"semester_id": semester.id})
    if _class_count(db, semester.id) > 0:
        raise BadRequestError("A semester with classes cannot be deleted", details={"semester_id": semester.id})
    log_activity(
        db,
        actor=actor,
        action="semester.delete",
        entity_type="semester",
        entity_id=semester.id,
        details={"code": semester.code},
    )
    db.delete(semester)
    db.flush()


def _complete(db: Session, semester: Semester, *, actor: str | None, reason: str) -> None:
    semester.status = SemesterStatus.completed
    semester.registration_enabled = False
    log_activity(
        db,
        actor=actor,
        action="semester.complete",
        entity_type="semester",
        entity_id=semester.id,
        details={"code": semester.code, "reason": reason},
    )
    logger.info("Semester %s completed (%s)", semester.code, reason)


def activate_semester(
    db: Session,
    semester_id: str,
    *,
    actor: str | None = None,
    strategy: AssignmentStrategy | None = None,
) -> ActivationReport:
    """Move a semester from upcoming to active and place its pending sessions.

    Any other active semester is completed first so at most one is active.
    """
    semester = get_semester(db, semester_id)
    report = ActivationReport(semester_id=semester.id, semester_code=semester.code, status=semester.status)
    if semester.status == SemesterStatus.active:
        report.already_active = True
        return report
    if semester.status == SemesterStatus.completed:
        raise BadRequestError(
            f"Semester {semester.code} is completed and cannot be activated",
            details={"semester_id": semester.id},
        )

    others = list(
        db.execute(
            select(Semester).where(Semester.status == SemesterStatus.active, Semester.id != semester.id)
        ).scalars()
    )
    for other in others:
        _complete(db, other, actor=actor, reason=f"superseded by {semester.code}")
        report.demoted_semester_ids.append(other.id)
    db.flush()

    report.classes = assign_pending_sessions(db, semester, strategy)
    semester.status = SemesterStatus.active
    report.status = semester.status
    db.flush()

    log_activity(
        db,
        actor=actor,
        action="semester.activate",
        entity_type="semester",
        entity_id=semester.id,
        details={
            "code": semester.code,
            "demoted_semester_ids": report.demoted_semester_ids,
            "assigned_sessions": report.assigned_total,
            "unassigned_sessions": report.unassigned_total,
        },
    )
    db.flush()
    logger.info(
        "Semester %s activated: %s pending sessions placed, %s still pending",
        semester.code,
        report.assigned_total,
        report.unassigned_total,
    )
    return report


def complete_semester(db: Session, semester_id: str, *, actor: str | None = None) -> Semester:
    semester = get_semester(db, semester_id)
    if semester.status != SemesterStatus.active:
        raise BadRequestError(
            "Only an active semester can be completed",
            details={"semester_id": semester.id, "status": semester.status.value},
        )
    _complete(db, semester, actor=actor, reason="manual")
    db.flush()
    return semester


def enable_registration(db: Session, semester_id: str, *, actor: str | None = None) -> Semester:
    semester = get_semester(db, semester_id)
    if semester.status == SemesterStatus.completed:
        raise BadRequestError("Registration cannot open for a completed semester", details={"semester_id": semester.id})
    if semester.registration_start_date is None or semester.registration_end_date is None:
        raise BadRequestError(
            "Set a registration window before enabling registration",
            details={"semester_id": semester.id},
        )
    semester.registration_enabled = True
    log_activity(db, actor=actor, action="semester.registration.enable", entity_type="semester", entity_id=semester.id)
    db.flush()
    return semester


def disable_registration(db: Session, semester_id: str, *, actor: str | None = None) -> Semester:
    semester = get_semester(db, semester_id)
    semester.registration_enabled = False
    log_activity(db, actor=actor, action="semester.registration.disable", entity_type="semester", entity_id=semester.id)
    db.flush()
    return semester


def sync_semester_statuses(db: Session, today: date, *, actor: str | None = None) -> SyncReport:
    """Daily sweep moving semesters along their lifecycle according to their dates."""
    report = SyncReport(today=today)

    def _complete_ended() -> None:
        ended = list(
            db.execute(
                select(Semester).where(Semester.status == SemesterStatus.active, Semester.end_date < today)
            ).scalars()
        )
        for semester in ended:
            _complete(db, semester, actor=actor, reason="end date passed")
            report.completed.append(semester.id)
        db.flush()

    _complete_ended()
    started = list(
        db.execute(
            select(Semester)
            .where(Semester.status == SemesterStatus.upcoming, Semester.start_date <= today)
            .order_by(Semester.start_date)
        ).scalars()
    )
    for semester in started:
        activation = activate_semester(db, semester.id, actor=actor)
        report.activated.append(semester.id)
        report.completed.extend(item for item in activation.demoted_semester_ids if item not in report.completed)
    _complete_ended()

    if report.activated or report.completed:
        logger.info(
            "Semester sync for %s: %s activated, %s completed",
            today.isoformat(),
            len(report.activated),
            len(report.completed),
        )
    return report
