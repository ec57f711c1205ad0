import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.exceptions import Conflict, NotFound, ValidationFailed
from ..core.permissions import require
from ..core.policy import Caller, Operation
from ..core.security import get_password_hash
from ..database import get_db, utcnow
from ..models.user import User
from ..repositories import RoomRepository, UserRepository
from ..schemas import MessageResponse, UserCreate, UserResponse, UserUpdate
from ..schemas.user import UserRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user(users: UserRepository, user_id: str) -> User:
    user = users.get(user_id)
    if user is None:
        raise NotFound("User")
    return user


def _place_in_room(db: Session, user: User, room_id: Optional[str]) -> None:
    """Set or clear a user's room through the occupancy routine, without committing"""
    rooms = RoomRepository(db)
    if room_id is None:
        rooms.unassign(user, commit=False)
        return
    if not user.is_student:
        raise ValidationFailed.single("roomId", "Only students can be assigned to rooms")
    room = rooms.get(room_id)
    if room is None:
        raise ValidationFailed.single("roomId", "Room not found")
    rooms.assign(room, user, commit=False)


@router.get("", response_model=List[UserResponse])
def list_users(
    role: Optional[UserRole] = None,
    caller: Caller = Depends(require(Operation.USER_LIST)),
    db: Session = Depends(get_db),
):
    return UserRepository(db).list(role=role)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    caller: Caller = Depends(require(Operation.USER_READ)),
    db: Session = Depends(get_db),
):
    return _get_user(UserRepository(db), user_id)


@router.post("", status_code=201, response_model=UserResponse)
def create_user(
    payload: UserCreate,
    caller: Caller = Depends(require(Operation.USER_CREATE)),
    db: Session = Depends(get_db),
):
    """Create an account on someone's behalf. Admin-issued accounts skip email verification."""
    users = UserRepository(db)
    email = payload.email.lower()
    if users.email_taken(email):
        raise Conflict(users.conflict_message)

    user = users.add(User(
        name=payload.name,
        email=email,
        password_hash=get_password_hash(payload.password),
        role=payload.role,
        phone=payload.phone,
        address=payload.address,
        email_verified=utcnow(),
    ), commit=False)
    if payload.room_id is not None:
        _place_in_room(db, user, payload.room_id)
    users.commit()
    logger.info("User %s (%s) created by %s", user.id, user.role, caller.id)
    return user


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    payload: UserUpdate,
    caller: Caller = Depends(require(Operation.USER_UPDATE)),
    db: Session = Depends(get_db),
):
    users = UserRepository(db)
    user = _get_user(users, user_id)

    changes = payload.model_dump(exclude_unset=True)
    room_given = "room_id" in changes
    room_id = changes.pop("room_id", None)

    # absent or null means "leave unchanged" for everything except roomId
    changes = {field: value for field, value in changes.items() if value is not None}
    if "email" in changes:
        changes["email"] = changes["email"].lower()
        if users.email_taken(changes["email"], exclude_id=user.id):
            raise Conflict(users.conflict_message)
    if "password" in changes:
        changes["password_hash"] = get_password_hash(changes.pop("password"))

    users.update(user, changes, commit=False)
    if not user.is_student:
        # admins never occupy a bed
        _place_in_room(db, user, None)
    if room_given:
        _place_in_room(db, user, room_id)
    users.commit()
    return user


@router.delete("/{user_id}", response_model=MessageResponse, response_model_exclude_none=True)
def delete_user(
    user_id: str,
    caller: Caller = Depends(require(Operation.USER_DELETE)),
    db: Session = Depends(get_db),
):
    """Delete an account together with its leave requests, payments and room place"""
    users = UserRepository(db)
    user = _get_user(users, user_id)
    if user.id == caller.id:
        raise Conflict("You cannot delete your own account")
    RoomRepository(db).unassign(user, commit=False)
    users.delete(user)
    logger.info("User %s deleted by %s", user_id, caller.id)
    return MessageResponse(message="User deleted")
