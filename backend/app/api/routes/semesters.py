from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import commit_or_conflict, get_actor, get_db
from app.models.semester import SemesterStatus
from app.schemas.semester import (
    ActivationReportOut,
    AssignmentReportOut,
    SemesterCreate,
    SemesterOut,
    SemesterSyncOut,
    SemesterUpdate,
)
from app.services import semester_service
from app.services.semester_service import ActivationReport

router = APIRouter()


def _activation_out(report: ActivationReport) -> ActivationReportOut:
    return ActivationReportOut(
        semester_id=report.semester_id,
        semester_code=report.semester_code,
        status=report.status,
        already_active=report.already_active,
        demoted_semester_ids=report.demoted_semester_ids,
        assigned_total=report.assigned_total,
        unassigned_total=report.unassigned_total,
        classes=[
            AssignmentReportOut(
                class_id=item.class_id,
                class_code=item.class_code,
                assigned=item.assigned,
                unassigned=item.unassigned,
                unassigned_session_ids=item.unassigned_session_ids,
            )
            for item in report.classes
        ],
    )


@router.get("/", response_model=list[SemesterOut])
def list_semesters(
    status_filter: SemesterStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[SemesterOut]:
    return semester_service.list_semesters(db, status_filter)


@router.post("/", response_model=SemesterOut, status_code=status.HTTP_201_CREATED)
def create_semester(
    payload: SemesterCreate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SemesterOut:
    semester = semester_service.create_semester(db, payload, actor=actor)
    commit_or_conflict(db)
    db.refresh(semester)
    return semester


@router.post("/sync-status", response_model=SemesterSyncOut)
def sync_semester_statuses(
    today: date | None = None,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SemesterSyncOut:
    report = semester_service.sync_semester_statuses(db, today or date.today(), actor=actor)
    commit_or_conflict(db)
    return SemesterSyncOut(today=report.today, activated=report.activated, completed=report.completed)


@router.get("/{semester_id}", response_model=SemesterOut)
def get_semester(semester_id: str, db: Session = Depends(get_db)) -> SemesterOut:
    return semester_service.get_semester(db, semester_id)


@router.put("/{semester_id}", response_model=SemesterOut)
def update_semester(
    semester_id: str,
    payload: SemesterUpdate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SemesterOut:
    semester = semester_service.update_semester(db, semester_id, payload, actor=actor)
    commit_or_conflict(db)
    db.refresh(semester)
    return semester


@router.delete("/{semester_id}")
def delete_semester(
    semester_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict:
    semester_service.delete_semester(db, semester_id, actor=actor)
    commit_or_conflict(db)
    return {"success": True}


@router.post("/{semester_id}/activate", response_model=ActivationReportOut)
def activate_semester(
    semester_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ActivationReportOut:
    report = semester_service.activate_semester(db, semester_id, actor=actor)
    commit_or_conflict(db)
    return _activation_out(report)


@router.post("/{semester_id}/complete", response_model=SemesterOut)
def complete_semester(
    semester_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SemesterOut:
    semester = semester_service.complete_semester(db, semester_id, actor=actor)
    commit_or_conflict(db)
    db.refresh(semester)
    return semester


@router.post("/{semester_id}/registration/enable", response_model=SemesterOut)
def enable_registration(
    semester_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SemesterOut:
    semester = semester_service.enable_registration(db, semester_id, actor=actor)
    commit_or_conflict(db)
    db.refresh(semester)
    return semester


@router.post("/{semester_id}/registration/disable", response_model=SemesterOut)
def disable_registration(
    semester_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SemesterOut:
    semester = semester_service.disable_registration(db, semester_id, actor=actor)
    commit_or_conflict(db)
    db.refresh(semester)
    return semester
