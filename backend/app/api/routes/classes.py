from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import commit_or_conflict, get_actor, get_db
from app.api.routes.sessions import serialize_session
from app.models.class_session import SessionType
from app.schemas.course_class import ClassCreate, ClassOut, ClassUpdate
from app.schemas.enrollment import EnrollmentCreate, EnrollmentOut
from app.schemas.session import SessionOut
from app.services import class_service, enrollment

router = APIRouter()


@router.get("/", response_model=list[ClassOut])
def list_classes(
    semester_id: str | None = None,
    teacher_id: str | None = None,
    db: Session = Depends(get_db),
) -> list[ClassOut]:
    return class_service.list_classes(db, semester_id=semester_id, teacher_id=teacher_id)


@router.post("/", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: ClassCreate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ClassOut:
    course_class = class_service.create_class(db, payload, actor=actor)
    commit_or_conflict(db)
    db.refresh(course_class)
    return course_class


@router.get("/{class_id}", response_model=ClassOut)
def get_class(class_id: str, db: Session = Depends(get_db)) -> ClassOut:
    return class_service.get_class(db, class_id)


@router.put("/{class_id}", response_model=ClassOut)
def update_class(
    class_id: str,
    payload: ClassUpdate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ClassOut:
    course_class = class_service.update_class(db, class_id, payload, actor=actor)
    commit_or_conflict(db)
    db.refresh(course_class)
    return course_class


@router.delete("/{class_id}")
def delete_class(
    class_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict:
    class_service.delete_class(db, class_id, actor=actor)
    commit_or_conflict(db)
    return {"success": True}


@router.get("/{class_id}/sessions", response_model=list[SessionOut])
def list_class_sessions(
    class_id: str,
    session_type: SessionType | None = None,
    rescheduled_only: bool = False,
    db: Session = Depends(get_db),
) -> list[SessionOut]:
    sessions = class_service.list_class_sessions(
        db,
        class_id,
        session_type=session_type,
        rescheduled_only=rescheduled_only,
    )
    return [serialize_session(item) for item in sessions]


@router.get("/{class_id}/enrollments", response_model=list[EnrollmentOut])
def list_enrollments(
    class_id: str,
    include_dropped: bool = False,
    db: Session = Depends(get_db),
) -> list[EnrollmentOut]:
    return enrollment.list_registrations(db, class_id, include_dropped=include_dropped)


@router.post("/{class_id}/enrollments", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll_student(
    class_id: str,
    payload: EnrollmentCreate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> EnrollmentOut:
    registration = enrollment.enroll_student(db, class_id, payload.student_id, payload.reason, actor=actor)
    commit_or_conflict(db)
    db.refresh(registration)
    return registration


@router.delete("/{class_id}/enrollments/{student_id}", response_model=EnrollmentOut)
def drop_student(
    class_id: str,
    student_id: str,
    reason: str | None = None,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> EnrollmentOut:
    registration = enrollment.drop_student(db, class_id, student_id, reason, actor=actor)
    commit_or_conflict(db)
    db.refresh(registration)
    return registration
