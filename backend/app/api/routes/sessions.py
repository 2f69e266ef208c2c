from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import commit_or_conflict, get_actor, get_db
from app.core.config import get_settings
from app.core.exceptions import BadRequestError
from app.models.class_session import ClassSession
from app.schemas.session import (
    BatchFailureOut,
    BatchRescheduleRequest,
    BatchResetRequest,
    BatchResultOut,
    CancelRequest,
    RescheduleRequest,
    ScheduleSlotOut,
    SessionOut,
)
from app.services import rescheduler
from app.services.effective_schedule import effective_schedule
from app.services.rescheduler import BatchResult

router = APIRouter()


def serialize_session(session: ClassSession) -> SessionOut:
    out = SessionOut.model_validate(session)
    effective = effective_schedule(session)
    if effective is not None:
        out.effective = ScheduleSlotOut.model_validate(effective, from_attributes=True)
    return out


def _batch_out(result: BatchResult) -> BatchResultOut:
    return BatchResultOut(
        succeeded=[serialize_session(item) for item in result.succeeded],
        failed=[
            BatchFailureOut(session_id=item.session_id, error=item.error, status_code=item.status_code)
            for item in result.failed
        ],
    )


def _ensure_batch_size(session_ids: list[str]) -> None:
    limit = get_settings().batch_reschedule_max
    if len(session_ids) > limit:
        raise BadRequestError(
            f"At most {limit} sessions can be processed in one batch",
            details={"limit": limit, "received": len(session_ids)},
        )


@router.post("/batch-reschedule", response_model=BatchResultOut)
def batch_reschedule(
    payload: BatchRescheduleRequest,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> BatchResultOut:
    _ensure_batch_size(payload.session_ids)
    result = rescheduler.batch_reschedule(
        db,
        payload.session_ids,
        new_date=payload.new_date,
        new_day_of_week=payload.new_day_of_week,
        new_time_slot=payload.new_time_slot,
        new_room_id=payload.new_room_id,
        reason=payload.reason,
        actor=actor,
    )
    commit_or_conflict(db)
    return _batch_out(result)


@router.post("/batch-reset", response_model=BatchResultOut)
def batch_reset(
    payload: BatchResetRequest,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> BatchResultOut:
    _ensure_batch_size(payload.session_ids)
    result = rescheduler.batch_reset(db, payload.session_ids, actor=actor)
    commit_or_conflict(db)
    return _batch_out(result)


@router.get("/{session_id}", response_model=SessionOut)
def get_session(session_id: str, db: Session = Depends(get_db)) -> SessionOut:
    return serialize_session(rescheduler.get_session(db, session_id))


@router.post("/{session_id}/reschedule", response_model=SessionOut)
def reschedule_session(
    session_id: str,
    payload: RescheduleRequest,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SessionOut:
    session = rescheduler.reschedule_session(
        db,
        session_id,
        new_date=payload.new_date,
        new_day_of_week=payload.new_day_of_week,
        new_time_slot=payload.new_time_slot,
        new_room_id=payload.new_room_id,
        reason=payload.reason,
        actor=actor,
    )
    commit_or_conflict(db)
    db.refresh(session)
    return serialize_session(session)


@router.post("/{session_id}/reset", response_model=SessionOut)
def reset_session(
    session_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SessionOut:
    session = rescheduler.reset_to_original(db, session_id, actor=actor)
    commit_or_conflict(db)
    db.refresh(session)
    return serialize_session(session)


@router.post("/{session_id}/complete", response_model=SessionOut)
def complete_session(
    session_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SessionOut:
    session = rescheduler.mark_completed(db, session_id, actor=actor)
    commit_or_conflict(db)
    db.refresh(session)
    return serialize_session(session)


@router.post("/{session_id}/cancel", response_model=SessionOut)
def cancel_session(
    session_id: str,
    payload: CancelRequest | None = None,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SessionOut:
    reason = payload.reason if payload is not None else None
    session = rescheduler.mark_cancelled(db, session_id, reason, actor=actor)
    commit_or_conflict(db)
    db.refresh(session)
    return serialize_session(session)
