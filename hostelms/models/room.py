from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base, generate_id


# Single source of truth for who lives where; a student occupies at most one room
room_occupants = Table(
    "room_occupants",
    Base.metadata,
    Column("room_id", String(32), ForeignKey("rooms.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(32), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, unique=True),
)


class Room(Base):
    __tablename__ = "rooms"

    id = Column(String(32), primary_key=True, default=generate_id)
    room_number = Column(String(20), unique=True, index=True, nullable=False)
    type = Column(String(10), nullable=False)  # AC, Non-AC
    capacity = Column(Integer, nullable=False)
    is_open = Column(Boolean, default=True, nullable=False)  # admin can close a room
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    occupants = relationship("User", secondary=room_occupants, back_populates="room", order_by="User.name")

    @property
    def occupant_count(self) -> int:
        return len(self.occupants)

    @property
    def is_available(self) -> bool:
        return bool(self.is_open) and self.occupant_count < self.capacity
