import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.time_slot import DayOfWeek, TimeSlot


class ClassStatus(str, Enum):
    open = "open"
    full = "full"
    closed = "closed"
    in_progress = "in_progress"
    completed = "completed"


class CourseClass(Base):
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint(
            "semester_id",
            "teacher_id",
            "day_of_week",
            "time_slot",
            name="uq_classes_semester_teacher_slot",
        ),
        UniqueConstraint(
            "semester_id",
            "room_id",
            "day_of_week",
            "time_slot",
            name="uq_classes_semester_room_slot",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    semester_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    enrolled_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[ClassStatus] = mapped_column(
        SAEnum(ClassStatus, name="class_status"),
        nullable=False,
        default=ClassStatus.open,
    )
    day_of_week: Mapped[DayOfWeek] = mapped_column(SAEnum(DayOfWeek, name="day_of_week"), nullable=False)
    time_slot: Mapped[TimeSlot] = mapped_column(SAEnum(TimeSlot, name="time_slot"), nullable=False)
    room_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def available_seats(self) -> int:
        return max(0, self.capacity - self.enrolled_count)

    @property
    def is_full(self) -> bool:
        return self.enrolled_count >= self.capacity
