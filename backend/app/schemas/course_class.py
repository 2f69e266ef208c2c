from datetime import date

from pydantic import BaseModel, Field

from app.models.course_class import ClassStatus
from app.models.time_slot import DayOfWeek, TimeSlot


class ClassCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    subject_id: str
    teacher_id: str
    semester_id: str
    capacity: int = Field(ge=1, le=1000)
    day_of_week: DayOfWeek
    time_slot: TimeSlot
    room_id: str | None = None


class ClassUpdate(BaseModel):
    teacher_id: str | None = None
    capacity: int | None = Field(default=None, ge=1, le=1000)
    day_of_week: DayOfWeek | None = None
    time_slot: TimeSlot | None = None
    room_id: str | None = None


class ClassOut(BaseModel):
    id: str
    code: str
    subject_id: str
    teacher_id: str
    semester_id: str
    capacity: int
    enrolled_count: int
    available_seats: int
    status: ClassStatus
    day_of_week: DayOfWeek
    time_slot: TimeSlot
    room_id: str
    start_date: date
    end_date: date

    model_config = {"from_attributes": True}
