import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.time_slot import DayOfWeek, TimeSlot


class StudentScheduleStatus(str, Enum):
    scheduled = "scheduled"
    attended = "attended"
    absent = "absent"
    cancelled = "cancelled"


class StudentSchedule(Base):
    __tablename__ = "student_schedules"
    __table_args__ = (
        UniqueConstraint("student_id", "session_id", name="uq_student_schedules_student_session"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    class_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    session_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    semester_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    session_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    day_of_week: Mapped[DayOfWeek | None] = mapped_column(SAEnum(DayOfWeek, name="day_of_week"), nullable=True)
    time_slot: Mapped[TimeSlot | None] = mapped_column(SAEnum(TimeSlot, name="time_slot"), nullable=True)
    room_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    status: Mapped[StudentScheduleStatus] = mapped_column(
        SAEnum(StudentScheduleStatus, name="student_schedule_status"),
        nullable=False,
        default=StudentScheduleStatus.scheduled,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
