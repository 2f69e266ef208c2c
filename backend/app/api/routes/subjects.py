from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import commit_or_conflict, get_db
from app.core.exceptions import DuplicateResourceError, ResourceNotFoundError
from app.models.subject import Subject
from app.schemas.subject import SubjectCreate, SubjectOut
from app.services.session_generator import normalize_session_counts

router = APIRouter()


@router.get("/", response_model=list[SubjectOut])
def list_subjects(db: Session = Depends(get_db)) -> list[SubjectOut]:
    return list(db.execute(select(Subject).order_by(Subject.code)).scalars())


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectCreate, db: Session = Depends(get_db)) -> SubjectOut:
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise DuplicateResourceError(f"Subject code {payload.code} already exists", details={"code": payload.code})
    counts = normalize_session_counts(
        payload.credits,
        payload.total_sessions,
        payload.in_person_sessions,
        payload.e_learning_sessions,
    )
    subject = Subject(
        code=payload.code,
        name=payload.name,
        credits=payload.credits,
        total_sessions=counts.total,
        in_person_sessions=counts.in_person,
        e_learning_sessions=counts.e_learning,
    )
    db.add(subject)
    commit_or_conflict(db)
    db.refresh(subject)
    return subject


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: str, db: Session = Depends(get_db)) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise ResourceNotFoundError("Subject", subject_id)
    return subject
