from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.db.bootstrap import missing_schema_items
from app.models.class_session import ClassSession
from app.models.course_class import CourseClass
from app.models.semester import Semester, SemesterStatus

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


def scheduling_snapshot(db: Session) -> dict:
    """Semester state a scheduler operator checks before opening the service."""
    active = db.execute(
        select(Semester.id, Semester.code).where(Semester.status == SemesterStatus.active)
    ).first()
    upcoming = db.execute(
        select(func.count()).select_from(Semester).where(Semester.status == SemesterStatus.upcoming)
    ).scalar_one()
    pending = 0
    if active is not None:
        pending = db.execute(
            select(func.count())
            .select_from(ClassSession)
            .join(CourseClass, CourseClass.id == ClassSession.class_id)
            .where(CourseClass.semester_id == active.id, ClassSession.is_pending.is_(True))
        ).scalar_one()
    return {
        "active_semester": active.code if active is not None else None,
        "upcoming_semesters": upcoming,
        "pending_sessions": pending,
    }


@router.get("/health/ready")
def health_ready(db: Session = Depends(get_db)) -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    db_error: str | None = None
    scheduling: dict | None = None

    try:
        db.execute(text("SELECT 1"))
        missing_tables, missing_columns = missing_schema_items(db.connection())
        if not missing_tables and not missing_columns:
            scheduling = scheduling_snapshot(db)
    except SQLAlchemyError as exc:  # pragma: no cover - environment dependent
        db_ok = False
        db_error = str(exc)

    schema_ok = db_ok and not missing_tables and not missing_columns
    ready = db_ok and schema_ok

    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": schema_ok,
            "missing_tables": missing_tables,
            "missing_columns": missing_columns,
            "error": db_error,
        },
        "scheduling": scheduling,
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
