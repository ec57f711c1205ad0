from typing import List, Optional

from .common import CamelModel
from .leave_request import LeaveRequestResponse
from .payment import PaymentResponse
from .room import RoomResponse
from .user import UserResponse


class StudentDashboard(CamelModel):
    room: Optional[RoomResponse] = None
    leave_requests: List[LeaveRequestResponse]
    payments: List[PaymentResponse]


class AdminStats(CamelModel):
    total_students: int
    total_rooms: int
    available_rooms: int
    occupied_beds: int
    total_beds: int
    pending_leave_requests: int
    unpaid_payments: int
    outstanding_amount: float


class AdminDashboard(CamelModel):
    stats: AdminStats
    users: List[UserResponse]
    rooms: List[RoomResponse]
    leave_requests: List[LeaveRequestResponse]
    payments: List[PaymentResponse]
