from .base import BaseRepository
from .users import UserRepository
from .rooms import RoomRepository
from .leave_requests import LeaveRequestRepository
from .payments import PaymentRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "RoomRepository",
    "LeaveRequestRepository",
    "PaymentRepository",
]
