from fastapi import APIRouter, Depends, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import commit_or_conflict, get_db
from app.core.exceptions import DuplicateResourceError, ResourceNotFoundError
from app.models.teacher import Teacher
from app.schemas.teacher import TeacherCreate, TeacherOut

router = APIRouter()


@router.get("/", response_model=list[TeacherOut])
def list_teachers(db: Session = Depends(get_db)) -> list[TeacherOut]:
    return list(db.execute(select(Teacher).order_by(Teacher.code)).scalars())


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_db)) -> TeacherOut:
    existing = db.execute(
        select(Teacher).where(or_(Teacher.code == payload.code, Teacher.email == payload.email))
    ).scalars().first()
    if existing:
        raise DuplicateResourceError("Teacher code or email already exists", details={"code": payload.code})
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    commit_or_conflict(db)
    db.refresh(teacher)
    return teacher


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(teacher_id: str, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher
