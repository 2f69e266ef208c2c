import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class RegistrationStatus(str, Enum):
    registered = "registered"
    dropped = "dropped"


class CourseRegistration(Base):
    __tablename__ = "course_registrations"
    __table_args__ = (
        UniqueConstraint("student_id", "class_id", name="uq_course_registrations_student_class"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    class_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    semester_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    status: Mapped[RegistrationStatus] = mapped_column(
        SAEnum(RegistrationStatus, name="registration_status"),
        nullable=False,
        default=RegistrationStatus.registered,
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    dropped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
