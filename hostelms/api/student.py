import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.exceptions import BadRequest, NotFound
from ..core.permissions import require
from ..core.policy import Caller, Operation
from ..core.security import get_password_hash, verify_password
from ..database import get_db
from ..models.user import User
from ..repositories import LeaveRequestRepository, PaymentRepository, RoomRepository, UserRepository
from ..schemas import ChangePassword, MessageResponse, ProfileUpdate, StudentDashboard, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["student"])


def _current_user(users: UserRepository, caller: Caller) -> User:
    user = users.get(caller.id)
    if user is None:
        raise NotFound("User")
    return user


@router.put("/student/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdate,
    caller: Caller = Depends(require(Operation.PROFILE_UPDATE)),
    db: Session = Depends(get_db),
):
    """Students edit their own contact details. Role, email and room are not editable here."""
    users = UserRepository(db)
    user = _current_user(users, caller)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)
    return users.update(user, changes)


@router.put("/student/change-password", response_model=MessageResponse, response_model_exclude_none=True)
def change_password(
    payload: ChangePassword,
    caller: Caller = Depends(require(Operation.PASSWORD_CHANGE)),
    db: Session = Depends(get_db),
):
    users = UserRepository(db)
    user = _current_user(users, caller)
    if not verify_password(payload.current_password, user.password_hash):
        logger.info("Rejected password change for %s: wrong current password", user.id)
        raise BadRequest("Invalid current password")

    users.update(user, {"password_hash": get_password_hash(payload.new_password)})
    logger.info("Password changed for %s", user.id)
    return MessageResponse(message="Password updated successfully")


@router.get("/student-data", response_model=StudentDashboard)
def get_student_data(
    caller: Caller = Depends(require(Operation.STUDENT_DASHBOARD)),
    db: Session = Depends(get_db),
):
    """The caller's room, leave requests and payments in one payload"""
    user = _current_user(UserRepository(db), caller)
    return {
        "room": RoomRepository(db).room_of(user),
        "leave_requests": LeaveRequestRepository(db).list(student_id=user.id),
        "payments": PaymentRepository(db).list(student_id=user.id),
    }
