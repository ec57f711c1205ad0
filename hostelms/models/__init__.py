from ..database import Base
from .user import User
from .room import Room, room_occupants
from .leave_request import LeaveRequest
from .payment import Payment

__all__ = [
    "Base",
    "User",
    "Room",
    "room_occupants",
    "LeaveRequest",
    "Payment",
]
