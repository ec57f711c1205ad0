from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .common import CamelModel, NonEmptyStr, UTCDateTime, UserSummary

PaymentStatus = Literal["pending", "paid", "overdue"]


class PaymentCreate(CamelModel):
    student_id: NonEmptyStr
    amount: float = Field(..., gt=0)
    month: NonEmptyStr
    year: int = Field(..., gt=0, strict=True)
    due_date: UTCDateTime
    status: PaymentStatus = "pending"


class PaymentUpdate(CamelModel):
    student_id: Optional[NonEmptyStr] = None
    amount: Optional[float] = Field(None, gt=0)
    month: Optional[NonEmptyStr] = None
    year: Optional[int] = Field(None, gt=0, strict=True)
    due_date: Optional[UTCDateTime] = None
    status: Optional[PaymentStatus] = None


class PaymentResponse(CamelModel):
    id: str
    student_id: str
    student: Optional[UserSummary] = None
    amount: float
    month: str
    year: int
    due_date: datetime
    status: PaymentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
