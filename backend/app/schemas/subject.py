from pydantic import BaseModel, Field


class SubjectBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    credits: int = Field(default=3, ge=1, le=20)
    total_sessions: int = Field(default=15, ge=0, le=200)
    in_person_sessions: int = Field(default=10, ge=0, le=200)
    e_learning_sessions: int = Field(default=5, ge=0, le=200)


class SubjectCreate(SubjectBase):
    pass


class SubjectOut(SubjectBase):
    id: str

    model_config = {"from_attributes": True}
