from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from .common import CamelModel, NonEmptyStr, UserSummary

RoomType = Literal["AC", "Non-AC"]


class RoomCreate(CamelModel):
    room_number: NonEmptyStr
    type: RoomType
    capacity: int = Field(..., gt=0, strict=True)
    occupants: List[str] = Field(default_factory=list)
    is_available: bool = True


class RoomUpdate(CamelModel):
    room_number: Optional[str] = None
    type: Optional[RoomType] = None
    capacity: Optional[int] = Field(None, gt=0, strict=True)
    occupants: Optional[List[str]] = None
    is_available: Optional[bool] = None

    @field_validator("room_number")
    @classmethod
    def room_number_is_immutable(cls, value):
        raise ValueError("Room number cannot be changed once the room is created")


class OccupantAssign(CamelModel):
    user_id: NonEmptyStr


class RoomResponse(CamelModel):
    id: str
    room_number: str
    type: str
    capacity: int
    occupants: List[UserSummary] = []
    is_available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
