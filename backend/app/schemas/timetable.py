from datetime import date

from pydantic import BaseModel

from app.models.class_session import SessionStatus
from app.models.time_slot import DayOfWeek, TimeSlot


class TimetableEntryOut(BaseModel):
    session_id: str
    sequence_number: int
    date: date
    day_of_week: DayOfWeek
    time_slot: TimeSlot
    start_time: str
    end_time: str
    class_id: str
    class_code: str
    subject_code: str | None = None
    subject_name: str | None = None
    teacher_id: str
    teacher_name: str | None = None
    room_id: str | None = None
    room_code: str | None = None
    is_rescheduled: bool
    status: SessionStatus

    model_config = {"from_attributes": True}


class WeeklyTimetableOut(BaseModel):
    owner_type: str
    owner_id: str
    week_start: date
    week_end: date
    entries: list[TimetableEntryOut]

    model_config = {"from_attributes": True}
