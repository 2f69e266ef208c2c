from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import commit_or_conflict, get_db
from app.core.exceptions import DuplicateResourceError, ResourceNotFoundError
from app.models.room import Room
from app.schemas.room import RoomCreate, RoomOut

router = APIRouter()


@router.get("/", response_model=list[RoomOut])
def list_rooms(active_only: bool = False, db: Session = Depends(get_db)) -> list[RoomOut]:
    query = select(Room)
    if active_only:
        query = query.where(Room.is_active.is_(True))
    return list(db.execute(query.order_by(Room.code)).scalars())


@router.post("/", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(payload: RoomCreate, db: Session = Depends(get_db)) -> RoomOut:
    existing = db.execute(select(Room).where(Room.code == payload.code)).scalar_one_or_none()
    if existing:
        raise DuplicateResourceError(f"Room code {payload.code} already exists", details={"code": payload.code})
    room = Room(**payload.model_dump())
    db.add(room)
    commit_or_conflict(db)
    db.refresh(room)
    return room


@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: str, db: Session = Depends(get_db)) -> RoomOut:
    room = db.get(Room, room_id)
    if room is None:
        raise ResourceNotFoundError("Room", room_id)
    return room
