from datetime import date

from pydantic import BaseModel, Field, computed_field

from app.models.class_session import SessionCategory, SessionStatus, SessionType
from app.models.time_slot import DayOfWeek, TimeSlot


class ScheduleSlotOut(BaseModel):
    date: date
    day_of_week: DayOfWeek
    time_slot: TimeSlot
    room_id: str | None = None

    @computed_field
    @property
    def time_range(self) -> str:
        return self.time_slot.time_range


class SessionOut(BaseModel):
    id: str
    class_id: str
    sequence_number: int
    session_type: SessionType
    category: SessionCategory | None = None
    is_pending: bool
    original_date: date | None = None
    original_day_of_week: DayOfWeek | None = None
    original_time_slot: TimeSlot | None = None
    original_room_id: str | None = None
    actual_date: date | None = None
    actual_day_of_week: DayOfWeek | None = None
    actual_time_slot: TimeSlot | None = None
    actual_room_id: str | None = None
    is_rescheduled: bool
    reschedule_reason: str | None = None
    status: SessionStatus
    effective: ScheduleSlotOut | None = None

    model_config = {"from_attributes": True}


class RescheduleRequest(BaseModel):
    new_date: date
    new_day_of_week: DayOfWeek
    new_time_slot: TimeSlot
    new_room_id: str = Field(min_length=1)
    reason: str | None = Field(default=None, max_length=1000)


class CancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class BatchRescheduleRequest(RescheduleRequest):
    session_ids: list[str] = Field(min_length=1, max_length=50)


class BatchResetRequest(BaseModel):
    session_ids: list[str] = Field(min_length=1, max_length=50)


class BatchFailureOut(BaseModel):
    session_id: str
    error: str
    status_code: int


class BatchResultOut(BaseModel):
    succeeded: list[SessionOut]
    failed: list[BatchFailureOut]
