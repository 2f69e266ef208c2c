import os
import tempfile
from datetime import date
from pathlib import Path

# Startup bootstrap uses the module-level engine; point it at a scratch file.
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{Path(tempfile.mkdtemp()) / 'bootstrap.db'}")
os.environ.setdefault("ENFORCE_FUTURE_SEMESTER", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import build_engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.course_class import CourseClass  # noqa: E402
from app.models.room import Room  # noqa: E402
from app.models.semester import Semester, SemesterStatus  # noqa: E402
from app.models.student import Student  # noqa: E402
from app.models.subject import Subject  # noqa: E402
from app.models.teacher import Teacher  # noqa: E402
from app.models.time_slot import DayOfWeek, TimeSlot  # noqa: E402
from app.schemas.course_class import ClassCreate  # noqa: E402
from app.services.class_service import create_class  # noqa: E402


def _memory_sessionmaker():
    engine = build_engine("sqlite+pysqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def client():
    engine, TestingSessionLocal = _memory_sessionmaker()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture()
def db():
    engine, TestingSessionLocal = _memory_sessionmaker()
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


class Factory:
    """Builds catalog records and classes directly through the ORM."""

    def __init__(self, db) -> None:
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def semester(
        self,
        start: date = date(2026, 1, 5),
        end: date = date(2026, 3, 15),
        status: SemesterStatus = SemesterStatus.upcoming,
        code: str | None = None,
    ) -> Semester:
        number = self._next()
        semester = Semester(
            code=code or f"SEM{number}",
            name=f"Semester {number}",
            start_date=start,
            end_date=end,
            status=status,
            registration_enabled=False,
        )
        self.db.add(semester)
        self.db.flush()
        return semester

    def subject(self, in_person: int = 10, e_learning: int = 5, credits: int = 3) -> Subject:
        number = self._next()
        subject = Subject(
            code=f"SUB{number}",
            name=f"Subject {number}",
            credits=credits,
            total_sessions=in_person + e_learning,
            in_person_sessions=in_person,
            e_learning_sessions=e_learning,
        )
        self.db.add(subject)
        self.db.flush()
        return subject

    def teacher(self) -> Teacher:
        number = self._next()
        teacher = Teacher(code=f"T{number}", full_name=f"Teacher {number}", email=f"teacher{number}@uni.edu")
        self.db.add(teacher)
        self.db.flush()
        return teacher

    def student(self) -> Student:
        number = self._next()
        student = Student(code=f"S{number}", full_name=f"Student {number}", email=f"student{number}@uni.edu")
        self.db.add(student)
        self.db.flush()
        return student

    def room(self, code: str | None = None, capacity: int = 60, is_active: bool = True) -> Room:
        number = self._next()
        room = Room(
            code=code or f"R{number:03d}",
            name=f"Room {number}",
            building="A",
            capacity=capacity,
            is_active=is_active,
        )
        self.db.add(room)
        self.db.flush()
        return room

    def course_class(
        self,
        *,
        semester: Semester,
        subject: Subject,
        teacher: Teacher,
        room: Room | None,
        day: DayOfWeek = DayOfWeek.TUESDAY,
        slot: TimeSlot = TimeSlot.CA1,
        capacity: int = 40,
        code: str | None = None,
    ) -> CourseClass:
        payload = ClassCreate(
            code=code or f"CLS{self._next()}",
            subject_id=subject.id,
            teacher_id=teacher.id,
            semester_id=semester.id,
            capacity=capacity,
            day_of_week=day,
            time_slot=slot,
            room_id=room.id if room is not None else None,
        )
        return create_class(self.db, payload, today=date(2025, 12, 1))


@pytest.fixture()
def factory(db):
    return Factory(db)
