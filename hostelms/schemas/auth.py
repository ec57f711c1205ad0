from pydantic import EmailStr, Field

from .common import CamelModel, NonEmptyStr
from .user import UserResponse


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: NonEmptyStr
    new_password: str = Field(..., min_length=6)


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

    class Config:
        # OAuth2 clients expect access_token / token_type verbatim
        alias_generator = None
        populate_by_name = True
        from_attributes = True
