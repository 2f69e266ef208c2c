from pydantic import BaseModel, Field


class RoomBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    building: str = Field(min_length=1, max_length=200)
    capacity: int = Field(ge=1, le=1000)
    is_active: bool = True


class RoomCreate(RoomBase):
    pass


class RoomOut(RoomBase):
    id: str

    model_config = {"from_attributes": True}
