import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..core.exceptions import Conflict, Forbidden, InvalidToken, MailDeliveryError, NotFound, Unauthenticated
from ..core.permissions import require
from ..core.policy import Caller, Operation
from ..core.security import create_access_token, generate_token, get_password_hash, verify_password
from ..database import get_db, utcnow
from ..models.user import User
from ..repositories import UserRepository
from ..schemas import (
    ForgotPasswordRequest, LoginRequest, MessageResponse, RegisterRequest,
    ResetPasswordRequest, Token, UserResponse,
)
from ..services.mailer import Mailer, get_mailer, password_reset_email, verification_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

# Same wording whether or not the account exists
REGISTER_MESSAGE = "Registration successful. Please check your email to verify your account."
FORGOT_PASSWORD_MESSAGE = "If a user with that email exists, a password reset link has been sent."


async def _send_or_warn(mailer: Mailer, to: str, subject: str, html: str) -> Optional[str]:
    """Send mail; a delivery failure is logged and returned as a warning, never raised."""
    try:
        await mailer.send_email(to, subject, html)
    except MailDeliveryError as exc:
        logger.warning("%s (%s)", exc.message, exc.__cause__)
        return "We could not send the email right now. Please try again later."
    return None


@router.post("/register", status_code=201, response_model=MessageResponse, response_model_exclude_none=True)
async def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Self-service signup. New accounts are students and start unverified."""
    users = UserRepository(db)
    email = payload.email.lower()
    user = users.get_by_email(email)
    if user is not None and user.is_verified:
        raise Conflict("User already registered with this email")

    token = generate_token()
    expiry = utcnow() + timedelta(minutes=settings.verification_token_expire_minutes)
    if user is None:
        user = users.add(User(
            name=payload.name,
            email=email,
            password_hash=get_password_hash(payload.password),
            role="student",
            verification_token=token,
            verification_token_expiry=expiry,
        ))
        logger.info("Registered new student account %s", user.id)
    else:
        # unverified account: only the link is refreshed, the stored password stays
        users.update(user, {"verification_token": token, "verification_token_expiry": expiry})

    link = f"{settings.api_base_url}/auth/verify-email?token={token}"
    warning = await _send_or_warn(
        mailer,
        user.email,
        "Verify your email for HostelMS",
        verification_email(link, settings.verification_token_expire_minutes / 60),
    )
    return MessageResponse(message=REGISTER_MESSAGE, warning=warning)


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Login and get access token"""
    user = UserRepository(db).get_by_email(payload.email)

    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login attempt for %s", payload.email)
        raise Unauthenticated("Invalid email or password")

    if not user.is_verified:
        raise Forbidden("Please verify your email before logging in")

    expires = timedelta(minutes=settings.access_token_expire_minutes)
    access_token = create_access_token(
        data={"sub": user.id, "role": user.role, "name": user.name, "email": user.email},
        expires_delta=expires,
    )
    response.set_cookie(
        key="access_token", value=access_token, httponly=True, max_age=int(expires.total_seconds())
    )
    logger.info("Issued access token for user %s", user.id)
    return Token(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse, response_model_exclude_none=True)
def logout(response: Response):
    response.delete_cookie(key="access_token")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    caller: Caller = Depends(require(Operation.PROFILE_READ)),
    db: Session = Depends(get_db),
):
    """Get current user information"""
    user = UserRepository(db).get(caller.id)
    if user is None:
        raise NotFound("User")
    return user


@router.get("/verify-email")
def verify_email(token: Optional[str] = None, db: Session = Depends(get_db)):
    if not token:
        raise InvalidToken("Missing verification token")

    users = UserRepository(db)
    user = users.get_by_verification_token(token, utcnow())
    if user is None:
        raise InvalidToken("Invalid or expired verification token")

    users.update(user, {
        "email_verified": utcnow(),
        "verification_token": None,
        "verification_token_expiry": None,
    })
    logger.info("Email verified for user %s", user.id)
    return RedirectResponse(url=f"{settings.frontend_url}/login?verified=true")


@router.post("/forgot-password", response_model=MessageResponse, response_model_exclude_none=True)
async def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    users = UserRepository(db)
    user = users.get_by_email(payload.email)
    if user is None:
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    token = generate_token()
    users.update(user, {
        "reset_password_token": token,
        "reset_password_token_expiry": utcnow() + timedelta(minutes=settings.reset_token_expire_minutes),
    })

    link = f"{settings.frontend_url}/reset-password?token={token}"
    # a failed send is logged only; the response must not differ per account
    await _send_or_warn(
        mailer,
        user.email,
        "Password Reset Request for HostelMS",
        password_reset_email(link, settings.reset_token_expire_minutes / 60),
    )
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse, response_model_exclude_none=True)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password from an emailed token. No session required."""
    users = UserRepository(db)
    user = users.get_by_reset_token(payload.token, utcnow())
    if user is None:
        raise InvalidToken("Invalid or expired reset token")

    users.update(user, {
        "password_hash": get_password_hash(payload.new_password),
        "reset_password_token": None,
        "reset_password_token_expiry": None,
    })
    logger.info("Password reset for user %s", user.id)
    return MessageResponse(message="Password reset successfully.")
