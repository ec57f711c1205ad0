"""
HostelMS - Test Configuration and Fixtures
"""
import os
import re
import uuid
from datetime import datetime
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

# Set testing environment
os.environ['ENVIRONMENT'] = 'development'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['DATABASE_URL'] = 'sqlite://'

from hostelms.core.exceptions import MailDeliveryError
from hostelms.core.security import create_access_token, get_password_hash
from hostelms.database import Database, utcnow
from hostelms.main import create_app
from hostelms.models import LeaveRequest, Payment, Room, User
from hostelms.services.mailer import Mailer
from hostelms.config import settings

TOKEN_PATTERN = re.compile(r"token=([0-9a-f]{64})")


class RecordingMailer(Mailer):
    """Keeps outgoing mail in memory; set ``fail`` to simulate an SMTP outage"""

    def __init__(self):
        super().__init__(settings)
        self.sent: List[Tuple[str, str, str]] = []
        self.fail = False

    async def send_email(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise MailDeliveryError(f"Failed to send email to {to}")
        self.sent.append((to, subject, html))

    def last_token(self) -> str:
        _, _, html = self.sent[-1]
        return TOKEN_PATTERN.search(html).group(1)


@pytest.fixture
def database():
    """Fresh in-memory database per test"""
    db = Database("sqlite://")
    db.connect()
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(database, mailer):
    return create_app(database=database, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session):
    """Factory for users created directly in the store"""

    def _make_user(name="Test Student", email=None, role="student", password="password123", verified=True):
        user = User(
            name=name,
            email=email or f"{uuid.uuid4().hex[:10]}@example.com",
            password_hash=get_password_hash(password),
            role=role,
            email_verified=utcnow() if verified else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user(name="Admin User", email="admin@example.com", role="admin", password="adminpassword123")


@pytest.fixture
def student_user(make_user):
    return make_user(name="Asha Student", email="asha@example.com", password="studentpassword123")


@pytest.fixture
def other_student(make_user):
    return make_user(name="Ben Student", email="ben@example.com")


def headers_for(user: User) -> dict:
    token = create_access_token({'sub': user.id, 'role': user.role, 'name': user.name, 'email': user.email})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def student_headers(student_user) -> dict:
    return headers_for(student_user)


@pytest.fixture
def other_headers(other_student) -> dict:
    return headers_for(other_student)


@pytest.fixture
def make_room(db_session):
    def _make_room(room_number="101", type="AC", capacity=2, occupants=()):
        room = Room(room_number=room_number, type=type, capacity=capacity, is_open=True)
        room.occupants.extend(occupants)
        db_session.add(room)
        db_session.commit()
        db_session.refresh(room)
        return room

    return _make_room


@pytest.fixture
def make_leave_request(db_session):
    def _make_leave_request(student, from_date="2025-03-01T00:00:00", to_date="2025-03-05T00:00:00",
                            reason="Family function back home", status="pending"):
        leave_request = LeaveRequest(
            student_id=student.id,
            from_date=datetime.fromisoformat(from_date),
            to_date=datetime.fromisoformat(to_date),
            reason=reason,
            status=status,
        )
        db_session.add(leave_request)
        db_session.commit()
        db_session.refresh(leave_request)
        return leave_request

    return _make_leave_request


@pytest.fixture
def make_payment(db_session):
    def _make_payment(student, amount=5000.0, month="January", year=2025, status="pending"):
        payment = Payment(
            student_id=student.id,
            amount=amount,
            month=month,
            year=year,
            due_date=datetime(year, 1, 10),
            status=status,
        )
        db_session.add(payment)
        db_session.commit()
        db_session.refresh(payment)
        return payment

    return _make_payment


SECRET_KEYS = {"password", "passwordhash", "password_hash", "verificationtoken", "verification_token",
               "resetpasswordtoken", "reset_password_token", "verificationtokenexpiry", "resetpasswordtokenexpiry"}


def assert_no_secrets(payload):
    """Fail if any password or token field appears anywhere in a response body"""
    if isinstance(payload, dict):
        for key, value in payload.items():
            assert key.lower() not in SECRET_KEYS, f"response leaks {key}"
            assert_no_secrets(value)
    elif isinstance(payload, list):
        for item in payload:
            assert_no_secrets(item)
