"""create scheduling schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

ENUM_NAMES = (
    "student_schedule_status",
    "registration_status",
    "session_status",
    "session_category",
    "session_type",
    "class_status",
    "time_slot",
    "day_of_week",
    "semester_status",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    semester_status = sa.Enum("upcoming", "active", "completed", name="semester_status")
    day_of_week = sa.Enum(
        "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY", name="day_of_week"
    )
    time_slot = sa.Enum("CA1", "CA2", "CA3", "CA4", "CA5", name="time_slot")
    class_status = sa.Enum("open", "full", "closed", "in_progress", "completed", name="class_status")
    session_type = sa.Enum("in_person", "e_learning", name="session_type")
    session_category = sa.Enum("fixed", "extra", name="session_category")
    session_status = sa.Enum("scheduled", "completed", "cancelled", name="session_status")
    registration_status = sa.Enum("registered", "dropped", name="registration_status")
    student_schedule_status = sa.Enum("scheduled", "attended", "absent", "cancelled", name="student_schedule_status")

    op.create_table(
        "semesters",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", semester_status, nullable=False, server_default="upcoming"),
        sa.Column("registration_start_date", sa.Date(), nullable=True),
        sa.Column("registration_end_date", sa.Date(), nullable=True),
        sa.Column("registration_enabled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_semesters_code", "semesters", ["code"], unique=True)
    op.create_index("ix_semesters_status", "semesters", ["status"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("total_sessions", sa.Integer(), nullable=False, server_default="15"),
        sa.Column("in_person_sessions", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("e_learning_sessions", sa.Integer(), nullable=False, server_default="5"),
        *_timestamps(),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)

    for table_name in ("teachers", "students"):
        op.create_table(
            table_name,
            sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
            sa.Column("code", sa.String(length=50), nullable=False),
            sa.Column("full_name", sa.String(length=200), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            *_timestamps(),
        )
        op.create_index(f"ix_{table_name}_code", table_name, ["code"], unique=True)
        op.create_index(f"ix_{table_name}_email", table_name, ["email"], unique=True)

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="40"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_rooms_code", "rooms", ["code"], unique=True)

    op.create_table(
        "classes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("semester_id", sa.String(length=36), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("enrolled_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", class_status, nullable=False, server_default="open"),
        sa.Column("day_of_week", day_of_week, nullable=False),
        sa.Column("time_slot", time_slot, nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "semester_id", "teacher_id", "day_of_week", "time_slot", name="uq_classes_semester_teacher_slot"
        ),
        sa.UniqueConstraint("semester_id", "room_id", "day_of_week", "time_slot", name="uq_classes_semester_room_slot"),
    )
    op.create_index("ix_classes_code", "classes", ["code"], unique=True)
    for column in ("subject_id", "teacher_id", "semester_id", "room_id"):
        op.create_index(f"ix_classes_{column}", "classes", [column])

    op.create_table(
        "class_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("sequence_number", sa.Integer(), nullable=False),
        sa.Column("session_type", session_type, nullable=False),
        sa.Column("category", session_category, nullable=True),
        sa.Column("is_pending", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("original_date", sa.Date(), nullable=True),
        sa.Column("original_day_of_week", day_of_week, nullable=True),
        sa.Column("original_time_slot", time_slot, nullable=True),
        sa.Column("original_room_id", sa.String(length=36), nullable=True),
        sa.Column("actual_date", sa.Date(), nullable=True),
        sa.Column("actual_day_of_week", day_of_week, nullable=True),
        sa.Column("actual_time_slot", time_slot, nullable=True),
        sa.Column("actual_room_id", sa.String(length=36), nullable=True),
        sa.Column("is_rescheduled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("reschedule_reason", sa.Text(), nullable=True),
        sa.Column("status", session_status, nullable=False, server_default="scheduled"),
        *_timestamps(),
        sa.UniqueConstraint("class_id", "sequence_number", name="uq_class_sessions_class_sequence"),
    )
    for column in ("class_id", "is_pending", "original_date", "original_room_id", "actual_date", "actual_room_id"):
        op.create_index(f"ix_class_sessions_{column}", "class_sessions", [column])

    op.create_table(
        "course_registrations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("semester_id", sa.String(length=36), nullable=False),
        sa.Column("status", registration_status, nullable=False, server_default="registered"),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("registered_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("dropped_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("student_id", "class_id", name="uq_course_registrations_student_class"),
    )
    for column in ("student_id", "class_id", "semester_id"):
        op.create_index(f"ix_course_registrations_{column}", "course_registrations", [column])

    op.create_table(
        "student_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=36), nullable=False),
        sa.Column("semester_id", sa.String(length=36), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=True),
        sa.Column("day_of_week", day_of_week, nullable=True),
        sa.Column("time_slot", time_slot, nullable=True),
        sa.Column("room_id", sa.String(length=36), nullable=True),
        sa.Column("status", student_schedule_status, nullable=False, server_default="scheduled"),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "session_id", name="uq_student_schedules_student_session"),
    )
    for column in ("student_id", "class_id", "session_id", "semester_id", "session_date"):
        op.create_index(f"ix_student_schedules_{column}", "student_schedules", [column])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor", sa.String(length=200), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_entity_id", "activity_logs", ["entity_id"])


def downgrade() -> None:
    for table_name in (
        "activity_logs",
        "student_schedules",
        "course_registrations",
        "class_sessions",
        "classes",
        "rooms",
        "students",
        "teachers",
        "subjects",
        "semesters",
    ):
        op.drop_table(table_name)
    for enum_name in ENUM_NAMES:
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
