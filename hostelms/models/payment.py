from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base, generate_id

PAYMENT_STATUSES = ("pending", "paid", "overdue")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(32), primary_key=True, default=generate_id)
    student_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    amount = Column(Float, nullable=False)
    month = Column(String(20), nullable=False)  # e.g. "January"
    year = Column(Integer, nullable=False)
    due_date = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, paid, overdue
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    student = relationship("User", back_populates="payments")
