"""Seed a demo semester with subjects, teachers, rooms, students and classes.

Run:
  PYTHONPATH=backend python scripts/seed_university_data.py

Re-running is safe: records are matched by code and only missing ones are
created. Classes go through the regular class service so their sessions are
generated exactly as they would be through the API.
"""

from __future__ import annotations

import os
from datetime import date, timedelta

from sqlalchemy import func, select

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.class_session import ClassSession
from app.models.course_class import CourseClass
from app.models.course_registration import CourseRegistration, RegistrationStatus
from app.models.room import Room
from app.models.semester import Semester, SemesterStatus
from app.models.student import Student
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.time_slot import DayOfWeek, TimeSlot
from app.schemas.course_class import ClassCreate
from app.services.class_service import create_class
from app.services.enrollment import enroll_student
from app.services.session_generator import counts_for_credits

SEED_ACTOR = "seed"
MOCK_EMAIL_DOMAIN = os.getenv("SEED_MOCK_EMAIL_DOMAIN", "university.edu").strip().lower() or "university.edu"
STUDENT_COUNT = int(os.getenv("SEED_STUDENT_COUNT", "24"))

SEMESTER_PROFILE = {
    "code": os.getenv("SEED_SEMESTER_CODE", "2027S"),
    "name": "Spring 2027",
    "start_date": date(2027, 1, 4),
    "end_date": date(2027, 4, 25),
    "registration_start_date": date(2026, 12, 1),
    "registration_end_date": date(2027, 1, 15),
}

SUBJECTS = [
    ("CSE101", "Introduction to Programming", 3),
    ("CSE102", "Discrete Mathematics", 2),
    ("CSE201", "Data Structures", 4),
    ("CSE202", "Computer Organization", 3),
    ("CSE301", "Operating Systems", 3),
]

TEACHERS = [
    ("T001", "Dr. Meera Iyer"),
    ("T002", "Dr. Arjun Rao"),
    ("T003", "Prof. Lakshmi Nair"),
    ("T004", "Dr. Vikram Shah"),
]

ROOMS = [
    ("A101", "Lecture Hall A101", "Block A", 120),
    ("A102", "Classroom A102", "Block A", 60),
    ("A103", "Classroom A103", "Block A", 60),
    ("B201", "Seminar Room B201", "Block B", 40),
    ("B202", "Seminar Room B202", "Block B", 40),
    ("C301", "Lab C301", "Block C", 35),
]

# class code, subject code, teacher code, weekly day, slot, capacity
CLASSES = [
    ("CSE101-01", "CSE101", "T001", DayOfWeek.MONDAY, TimeSlot.CA1, 50),
    ("CSE101-02", "CSE101", "T002", DayOfWeek.WEDNESDAY, TimeSlot.CA2, 50),
    ("CSE102-01", "CSE102", "T003", DayOfWeek.TUESDAY, TimeSlot.CA3, 40),
    ("CSE201-01", "CSE201", "T004", DayOfWeek.THURSDAY, TimeSlot.CA1, 35),
    ("CSE202-01", "CSE202", "T001", DayOfWeek.FRIDAY, TimeSlot.CA4, 40),
    ("CSE301-01", "CSE301", "T002", DayOfWeek.TUESDAY, TimeSlot.CA5, 30),
]

# students register for these classes in this order, capacity permitting
REGISTRATION_PLAN = ["CSE101-01", "CSE102-01", "CSE201-01", "CSE301-01"]


def upsert_semester(session) -> Semester:
    semester = session.execute(
        select(Semester).where(Semester.code == SEMESTER_PROFILE["code"])
    ).scalar_one_or_none()
    if semester is None:
        semester = Semester(**SEMESTER_PROFILE, status=SemesterStatus.upcoming, registration_enabled=True)
        session.add(semester)
        session.flush()
    return semester


def upsert_subjects(session) -> dict[str, Subject]:
    subjects: dict[str, Subject] = {}
    for code, name, credits in SUBJECTS:
        subject = session.execute(select(Subject).where(Subject.code == code)).scalar_one_or_none()
        counts = counts_for_credits(credits)
        if subject is None:
            subject = Subject(code=code, name=name)
            session.add(subject)
        subject.name = name
        subject.credits = credits
        subject.total_sessions = counts.total
        subject.in_person_sessions = counts.in_person
        subject.e_learning_sessions = counts.e_learning
        subjects[code] = subject
    session.flush()
    return subjects


def _email_for(name: str) -> str:
    local = ".".join(part for part in name.lower().replace(".", " ").split() if part not in {"dr", "prof"})
    return f"{local}@{MOCK_EMAIL_DOMAIN}"


def upsert_teachers(session) -> dict[str, Teacher]:
    teachers: dict[str, Teacher] = {}
    for code, full_name in TEACHERS:
        teacher = session.execute(select(Teacher).where(Teacher.code == code)).scalar_one_or_none()
        if teacher is None:
            teacher = Teacher(code=code, full_name=full_name, email=_email_for(full_name))
            session.add(teacher)
        teachers[code] = teacher
    session.flush()
    return teachers


def upsert_rooms(session) -> None:
    for code, name, building, capacity in ROOMS:
        room = session.execute(select(Room).where(Room.code == code)).scalar_one_or_none()
        if room is None:
            session.add(Room(code=code, name=name, building=building, capacity=capacity, is_active=True))
        else:
            room.capacity = capacity
            room.is_active = True
    session.flush()


def upsert_students(session) -> list[Student]:
    students: list[Student] = []
    for number in range(1, STUDENT_COUNT + 1):
        code = f"S{number:04d}"
        student = session.execute(select(Student).where(Student.code == code)).scalar_one_or_none()
        if student is None:
            student = Student(
                code=code,
                full_name=f"Student {number:04d}",
                email=f"student{number:04d}@{MOCK_EMAIL_DOMAIN}",
            )
            session.add(student)
        students.append(student)
    session.flush()
    return students


def seed_classes(session, semester: Semester, subjects: dict[str, Subject], teachers: dict[str, Teacher]) -> None:
    for code, subject_code, teacher_code, day, slot, capacity in CLASSES:
        existing = session.execute(select(CourseClass).where(CourseClass.code == code)).scalar_one_or_none()
        if existing is not None:
            continue
        create_class(
            session,
            ClassCreate(
                code=code,
                subject_id=subjects[subject_code].id,
                teacher_id=teachers[teacher_code].id,
                semester_id=semester.id,
                capacity=capacity,
                day_of_week=day,
                time_slot=slot,
            ),
            today=semester.start_date - timedelta(days=1),
            actor=SEED_ACTOR,
        )


def seed_registrations(session, students: list[Student]) -> None:
    for class_code in REGISTRATION_PLAN:
        course_class = session.execute(select(CourseClass).where(CourseClass.code == class_code)).scalar_one()
        registered = set(
            session.execute(
                select(CourseRegistration.student_id).where(
                    CourseRegistration.class_id == course_class.id,
                    CourseRegistration.status == RegistrationStatus.registered,
                )
            ).scalars()
        )
        for student in students:
            if course_class.is_full:
                break
            if student.id in registered:
                continue
            enroll_student(session, course_class.id, student.id, actor=SEED_ACTOR)


def seed(session) -> dict[str, int]:
    semester = upsert_semester(session)
    subjects = upsert_subjects(session)
    teachers = upsert_teachers(session)
    upsert_rooms(session)
    students = upsert_students(session)
    seed_classes(session, semester, subjects, teachers)
    seed_registrations(session, students)
    session.flush()

    return {
        "classes": session.execute(select(func.count(CourseClass.id))).scalar_one(),
        "sessions": session.execute(select(func.count(ClassSession.id))).scalar_one(),
        "registrations": session.execute(
            select(func.count(CourseRegistration.id)).where(CourseRegistration.status == RegistrationStatus.registered)
        ).scalar_one(),
        "rooms": session.execute(select(func.count(Room.id))).scalar_one(),
        "students": session.execute(select(func.count(Student.id))).scalar_one(),
    }


def main() -> None:
    ensure_runtime_schema_compatibility()

    with SessionLocal() as session:
        counts = seed(session)
        session.commit()

    print("Scheduling demo data seeded successfully.")
    print("")
    print(f"Semester: {SEMESTER_PROFILE['name']} ({SEMESTER_PROFILE['code']})")
    for label, value in counts.items():
        print(f"{label.capitalize()}: {value}")


if __name__ == "__main__":
    main()
