from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from .common import CamelModel, OptionalText

UserRole = Literal["admin", "student"]


class UserCreate(CamelModel):
    """Account issued by an admin; pre-verified"""
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    phone: OptionalText = None
    address: OptionalText = None
    room_id: OptionalText = None


class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    phone: OptionalText = None
    address: OptionalText = None
    room_id: OptionalText = None


class ProfileUpdate(CamelModel):
    # roomId is not accepted here; only admins move students between rooms
    name: Optional[str] = Field(None, min_length=2)
    phone: OptionalText = None
    address: OptionalText = None


class ChangePassword(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)
    confirm_new_password: str = Field(..., min_length=1)

    @field_validator("confirm_new_password")
    @classmethod
    def passwords_match(cls, value, info: ValidationInfo):
        new_password = info.data.get("new_password")
        if new_password is not None and value != new_password:
            raise ValueError("New passwords do not match")
        return value


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    address: Optional[str] = None
    room_id: Optional[str] = None
    email_verified: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
