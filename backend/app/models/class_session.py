import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.time_slot import DayOfWeek, TimeSlot


class SessionType(str, Enum):
    in_person = "in_person"
    e_learning = "e_learning"


class SessionCategory(str, Enum):
    fixed = "fixed"
    extra = "extra"


class SessionStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


class ClassSession(Base):
    __tablename__ = "class_sessions"
    __table_args__ = (
        UniqueConstraint("class_id", "sequence_number", name="uq_class_sessions_class_sequence"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    class_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    session_type: Mapped[SessionType] = mapped_column(SAEnum(SessionType, name="session_type"), nullable=False)
    category: Mapped[SessionCategory | None] = mapped_column(
        SAEnum(SessionCategory, name="session_category"),
        nullable=True,
    )
    is_pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    original_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    original_day_of_week: Mapped[DayOfWeek | None] = mapped_column(
        SAEnum(DayOfWeek, name="day_of_week"),
        nullable=True,
    )
    original_time_slot: Mapped[TimeSlot | None] = mapped_column(SAEnum(TimeSlot, name="time_slot"), nullable=True)
    original_room_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    actual_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    actual_day_of_week: Mapped[DayOfWeek | None] = mapped_column(
        SAEnum(DayOfWeek, name="day_of_week"),
        nullable=True,
    )
    actual_time_slot: Mapped[TimeSlot | None] = mapped_column(SAEnum(TimeSlot, name="time_slot"), nullable=True)
    actual_room_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    is_rescheduled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reschedule_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SessionStatus] = mapped_column(
        SAEnum(SessionStatus, name="session_status"),
        nullable=False,
        default=SessionStatus.scheduled,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
