from datetime import datetime

from pydantic import BaseModel, Field

from app.models.course_registration import RegistrationStatus


class EnrollmentCreate(BaseModel):
    student_id: str = Field(min_length=1)
    reason: str | None = Field(default=None, max_length=1000)


class EnrollmentOut(BaseModel):
    id: str
    student_id: str
    class_id: str
    semester_id: str
    status: RegistrationStatus
    reason: str | None = None
    registered_at: datetime | None = None
    dropped_at: datetime | None = None

    model_config = {"from_attributes": True}
