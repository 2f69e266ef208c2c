from datetime import date

from pydantic import BaseModel, Field, model_validator

from app.models.semester import SemesterStatus


class SemesterBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    start_date: date
    end_date: date
    registration_start_date: date | None = None
    registration_end_date: date | None = None

    @model_validator(mode="after")
    def validate_dates(self) -> "SemesterBase":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        if (self.registration_start_date is None) != (self.registration_end_date is None):
            raise ValueError("registration_start_date and registration_end_date must be set together")
        if self.registration_start_date is not None and self.registration_end_date is not None:
            if self.registration_start_date > self.registration_end_date:
                raise ValueError("registration_start_date must be on or before registration_end_date")
            if self.registration_end_date > self.end_date:
                raise ValueError("registration window must end on or before the semester end_date")
        return self


class SemesterCreate(SemesterBase):
    pass


class SemesterUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    registration_start_date: date | None = None
    registration_end_date: date | None = None


class SemesterOut(SemesterBase):
    id: str
    status: SemesterStatus
    registration_enabled: bool

    model_config = {"from_attributes": True}


class AssignmentReportOut(BaseModel):
    class_id: str
    class_code: str
    assigned: int
    unassigned: int
    unassigned_session_ids: list[str]


class ActivationReportOut(BaseModel):
    semester_id: str
    semester_code: str
    status: SemesterStatus
    already_active: bool
    demoted_semester_ids: list[str]
    assigned_total: int
    unassigned_total: int
    classes: list[AssignmentReportOut]


class SemesterSyncOut(BaseModel):
    today: date
    activated: list[str]
    completed: list[str]
