from pydantic import BaseModel, EmailStr, Field


class TeacherBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    full_name: str = Field(min_length=1, max_length=200)
    email: EmailStr


class TeacherCreate(TeacherBase):
    pass


class TeacherOut(TeacherBase):
    id: str

    model_config = {"from_attributes": True}
