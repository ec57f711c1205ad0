from .common import UserSummary, MessageResponse
from .user import UserCreate, UserUpdate, UserResponse, ProfileUpdate, ChangePassword
from .auth import RegisterRequest, LoginRequest, ForgotPasswordRequest, ResetPasswordRequest, Token
from .room import RoomCreate, RoomUpdate, RoomResponse, OccupantAssign
from .leave_request import LeaveRequestCreate, LeaveRequestUpdate, LeaveRequestResponse
from .payment import PaymentCreate, PaymentUpdate, PaymentResponse
from .dashboard import StudentDashboard, AdminDashboard, AdminStats

__all__ = [
    "UserSummary", "MessageResponse",
    "UserCreate", "UserUpdate", "UserResponse", "ProfileUpdate", "ChangePassword",
    "RegisterRequest", "LoginRequest", "ForgotPasswordRequest", "ResetPasswordRequest", "Token",
    # Hostel resources
    "RoomCreate", "RoomUpdate", "RoomResponse", "OccupantAssign",
    "LeaveRequestCreate", "LeaveRequestUpdate", "LeaveRequestResponse",
    "PaymentCreate", "PaymentUpdate", "PaymentResponse",
    "StudentDashboard", "AdminDashboard", "AdminStats",
]
