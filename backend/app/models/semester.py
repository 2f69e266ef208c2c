import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class SemesterStatus(str, Enum):
    upcoming = "upcoming"
    active = "active"
    completed = "completed"


class Semester(Base):
    __tablename__ = "semesters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[SemesterStatus] = mapped_column(
        SAEnum(SemesterStatus, name="semester_status"),
        nullable=False,
        default=SemesterStatus.upcoming,
        index=True,
    )
    registration_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    registration_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    registration_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    def contains(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date

    def is_registration_open(self, today: date) -> bool:
        if not self.registration_enabled:
            return False
        if self.registration_start_date is None or self.registration_end_date is None:
            return False
        return self.registration_start_date <= today <= self.registration_end_date
