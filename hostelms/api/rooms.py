import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.exceptions import NotFound, ValidationFailed
from ..core.permissions import require
from ..core.policy import Caller, Operation
from ..database import get_db
from ..models.room import Room
from ..repositories import RoomRepository, UserRepository
from ..schemas import MessageResponse, OccupantAssign, RoomCreate, RoomResponse, RoomUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


def _get_room(rooms: RoomRepository, room_id: str) -> Room:
    room = rooms.get(room_id)
    if room is None:
        raise NotFound("Room")
    return room


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    caller: Caller = Depends(require(Operation.ROOM_LIST)),
    db: Session = Depends(get_db),
):
    """All rooms with their occupants, ordered by room number"""
    return RoomRepository(db).list()


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: str,
    caller: Caller = Depends(require(Operation.ROOM_READ)),
    db: Session = Depends(get_db),
):
    return _get_room(RoomRepository(db), room_id)


@router.post("", status_code=201, response_model=RoomResponse)
def create_room(
    payload: RoomCreate,
    caller: Caller = Depends(require(Operation.ROOM_CREATE)),
    db: Session = Depends(get_db),
):
    return RoomRepository(db).create(
        room_number=payload.room_number,
        type=payload.type,
        capacity=payload.capacity,
        is_open=payload.is_available,
        occupant_ids=payload.occupants,
    )


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: str,
    payload: RoomUpdate,
    caller: Caller = Depends(require(Operation.ROOM_UPDATE)),
    db: Session = Depends(get_db),
):
    """Update type, capacity, open flag or the full occupant list. The room number is fixed."""
    rooms = RoomRepository(db)
    room = _get_room(rooms, room_id)
    return rooms.update_room(
        room,
        type=payload.type,
        capacity=payload.capacity,
        is_open=payload.is_available,
        occupant_ids=payload.occupants,
    )


@router.delete("/{room_id}", response_model=MessageResponse, response_model_exclude_none=True)
def delete_room(
    room_id: str,
    caller: Caller = Depends(require(Operation.ROOM_DELETE)),
    db: Session = Depends(get_db),
):
    rooms = RoomRepository(db)
    room = _get_room(rooms, room_id)
    rooms.delete(room)
    logger.info("Room %s deleted by %s", room.room_number, caller.id)
    return MessageResponse(message="Room deleted")


@router.post("/{room_id}/occupants", response_model=RoomResponse)
def assign_occupant(
    room_id: str,
    payload: OccupantAssign,
    caller: Caller = Depends(require(Operation.ROOM_ASSIGN)),
    db: Session = Depends(get_db),
):
    """Place a student in the room, moving them out of their current room if any"""
    rooms = RoomRepository(db)
    room = _get_room(rooms, room_id)
    student = UserRepository(db).get(payload.user_id)
    if student is None:
        raise ValidationFailed.single("userId", "User not found")
    return rooms.assign(room, student)


@router.delete("/{room_id}/occupants/{user_id}", response_model=RoomResponse)
def remove_occupant(
    room_id: str,
    user_id: str,
    caller: Caller = Depends(require(Operation.ROOM_ASSIGN)),
    db: Session = Depends(get_db),
):
    rooms = RoomRepository(db)
    room = _get_room(rooms, room_id)
    occupant = next((user for user in room.occupants if user.id == user_id), None)
    if occupant is None:
        raise NotFound("Occupant")
    rooms.unassign(occupant)
    return _get_room(rooms, room_id)
