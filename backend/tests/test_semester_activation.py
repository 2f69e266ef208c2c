from datetime import date

import pytest
from sqlalchemy import select

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.models.activity_log import ActivityLog
from app.models.class_session import ClassSession
from app.models.semester import SemesterStatus
from app.models.time_slot import DayOfWeek
from app.schemas.semester import SemesterCreate, SemesterUpdate
from app.services.semester_service import (
    activate_semester,
    complete_semester,
    create_semester,
    delete_semester,
    disable_registration,
    enable_registration,
    sync_semester_statuses,
    update_semester,
)


def test_activation_assigns_pending_sessions_and_logs(db, factory):
    semester = factory.semester()
    course_class = factory.course_class(
        semester=semester,
        subject=factory.subject(in_person=12, e_learning=3),
        teacher=factory.teacher(),
        room=factory.room(),
    )

    report = activate_semester(db, semester.id, actor="registrar")

    assert semester.status == SemesterStatus.active
    assert report.assigned_total == 2
    assert report.unassigned_total == 0
    assert report.classes[0].class_code == course_class.code
    pending = db.execute(
        select(ClassSession).where(ClassSession.class_id == course_class.id, ClassSession.is_pending.is_(True))
    ).scalars().all()
    assert pending == []
    log = db.execute(select(ActivityLog).where(ActivityLog.action == "semester.activate")).scalar_one()
    assert log.actor == "registrar"
    assert log.details["assigned_sessions"] == 2


def test_activation_demotes_previous_active_semester(db, factory):
    previous = factory.semester(start=date(2025, 9, 1), end=date(2025, 12, 20), status=SemesterStatus.active)
    previous.registration_enabled = True
    current = factory.semester()

    report = activate_semester(db, current.id)

    assert report.demoted_semester_ids == [previous.id]
    assert previous.status == SemesterStatus.completed
    assert previous.registration_enabled is False
    assert current.status == SemesterStatus.active


def test_activation_is_idempotent_and_rejects_completed(db, factory):
    semester = factory.semester(status=SemesterStatus.active)
    report = activate_semester(db, semester.id)
    assert report.already_active is True

    finished = factory.semester(status=SemesterStatus.completed)
    with pytest.raises(BadRequestError):
        activate_semester(db, finished.id)
    with pytest.raises(ResourceNotFoundError):
        activate_semester(db, "missing")


def test_complete_requires_active(db, factory):
    semester = factory.semester()
    with pytest.raises(BadRequestError):
        complete_semester(db, semester.id)
    activate_semester(db, semester.id)
    complete_semester(db, semester.id)
    assert semester.status == SemesterStatus.completed


def test_registration_toggle_requires_window(db, factory):
    semester = factory.semester()
    with pytest.raises(BadRequestError):
        enable_registration(db, semester.id)

    update_semester(
        db,
        semester.id,
        SemesterUpdate(registration_start_date=date(2025, 12, 1), registration_end_date=date(2026, 1, 10)),
    )
    enable_registration(db, semester.id)
    assert semester.registration_enabled is True
    assert semester.is_registration_open(date(2025, 12, 15))
    disable_registration(db, semester.id)
    assert not semester.is_registration_open(date(2025, 12, 15))


def test_registration_window_must_end_within_semester(db, factory):
    semester = factory.semester(end=date(2026, 3, 15))
    with pytest.raises(BadRequestError):
        update_semester(
            db,
            semester.id,
            SemesterUpdate(registration_start_date=date(2026, 1, 1), registration_end_date=date(2026, 4, 1)),
        )


def test_create_and_delete_rules(db, factory):
    semester = create_semester(
        db,
        SemesterCreate(code="2026S", name="Spring 2026", start_date=date(2026, 1, 5), end_date=date(2026, 3, 15)),
    )
    assert semester.status == SemesterStatus.upcoming

    factory.course_class(
        semester=semester,
        subject=factory.subject(),
        teacher=factory.teacher(),
        room=factory.room(),
        day=DayOfWeek.MONDAY,
    )
    with pytest.raises(BadRequestError):
        delete_semester(db, semester.id)
    with pytest.raises(BadRequestError):
        update_semester(db, semester.id, SemesterUpdate(start_date=date(2026, 1, 12)))

    active = factory.semester(status=SemesterStatus.active)
    with pytest.raises(BadRequestError):
        delete_semester(db, active.id)

    empty = factory.semester()
    delete_semester(db, empty.id)


def test_sync_activates_started_and_completes_ended(db, factory):
    ended = factory.semester(start=date(2025, 9, 1), end=date(2025, 12, 20), status=SemesterStatus.active)
    started = factory.semester(start=date(2026, 1, 5), end=date(2026, 3, 15))
    future = factory.semester(start=date(2026, 4, 6), end=date(2026, 6, 14))

    report = sync_semester_statuses(db, date(2026, 1, 7))

    assert report.activated == [started.id]
    assert report.completed == [ended.id]
    assert ended.status == SemesterStatus.completed
    assert started.status == SemesterStatus.active
    assert future.status == SemesterStatus.upcoming
