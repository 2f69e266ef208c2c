from fastapi import APIRouter, Depends, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import commit_or_conflict, get_db
from app.core.exceptions import DuplicateResourceError, ResourceNotFoundError
from app.models.student import Student
from app.schemas.student import StudentCreate, StudentOut

router = APIRouter()


@router.get("/", response_model=list[StudentOut])
def list_students(db: Session = Depends(get_db)) -> list[StudentOut]:
    return list(db.execute(select(Student).order_by(Student.code)).scalars())


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)) -> StudentOut:
    existing = db.execute(
        select(Student).where(or_(Student.code == payload.code, Student.email == payload.email))
    ).scalars().first()
    if existing:
        raise DuplicateResourceError("Student code or email already exists", details={"code": payload.code})
    student = Student(**payload.model_dump())
    db.add(student)
    commit_or_conflict(db)
    db.refresh(student)
    return student


@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: str, db: Session = Depends(get_db)) -> StudentOut:
    student = db.get(Student, student_id)
    if student is None:
        raise ResourceNotFoundError("Student", student_id)
    return student
