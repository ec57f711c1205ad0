from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..core.exceptions import Conflict
from ..database import Base, generate_id, utcnow

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
LEAVE_STATUSES = (PENDING, APPROVED, REJECTED)


class LeaveRequest(Base):
    """Leave request filed by a student and reviewed once by an admin"""
    __tablename__ = "leave_requests"

    id = Column(String(32), primary_key=True, default=generate_id)
    student_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    from_date = Column(DateTime, nullable=False)
    to_date = Column(DateTime, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=PENDING)  # pending, approved, rejected
    submitted_at = Column(DateTime, nullable=False, default=utcnow)
    reviewed_at = Column(DateTime)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    student = relationship("User", back_populates="leave_requests")

    def transition_to(self, status: str, now: datetime) -> bool:
        """Apply a review decision. Returns True when the status actually changed.

        pending -> approved and pending -> rejected are the only transitions;
        both targets are terminal. reviewed_at is stamped on the transition.
        """
        if status == self.status:
            return False
        if self.status != PENDING or status == PENDING:
            raise Conflict(f"Leave request has already been {self.status}")
        self.status = status
        self.reviewed_at = max(now, self.submitted_at) if self.submitted_at else now
        return True
