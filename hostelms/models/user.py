from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base, generate_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="student")  # admin, student
    phone = Column(String(30))
    address = Column(String(255))
    email_verified = Column(DateTime)
    verification_token = Column(String(64), index=True)
    verification_token_expiry = Column(DateTime)
    reset_password_token = Column(String(64), index=True)
    reset_password_token_expiry = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    # read side only; Room.occupants is the one writer of room_occupants
    room = relationship("Room", secondary="room_occupants", back_populates="occupants", uselist=False,
                        viewonly=True)
    leave_requests = relationship("LeaveRequest", back_populates="student", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="student", cascade="all, delete-orphan")

    @property
    def room_id(self):
        # derived from room occupancy, never stored on the user row
        return self.room.id if self.room is not None else None

    @property
    def is_student(self) -> bool:
        return self.role == "student"

    @property
    def is_verified(self) -> bool:
        return self.email_verified is not None
