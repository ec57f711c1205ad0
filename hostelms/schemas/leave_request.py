from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, ValidationInfo, field_validator

from .common import CamelModel, UTCDateTime, UserSummary

LeaveStatus = Literal["pending", "approved", "rejected"]

DATE_RANGE_MESSAGE = "fromDate must be on or before toDate"


def check_date_range(from_date: Optional[datetime], to_date: Optional[datetime]) -> None:
    if from_date is not None and to_date is not None and from_date > to_date:
        raise ValueError(DATE_RANGE_MESSAGE)


class LeaveRequestCreate(CamelModel):
    # no studentId: the owner is always the caller
    from_date: UTCDateTime
    to_date: UTCDateTime
    reason: str = Field(..., min_length=10)

    @field_validator("to_date")
    @classmethod
    def to_date_not_before_from_date(cls, value, info: ValidationInfo):
        check_date_range(info.data.get("from_date"), value)
        return value


class LeaveRequestUpdate(CamelModel):
    status: Optional[LeaveStatus] = None
    reason: Optional[str] = Field(None, min_length=10)
    from_date: Optional[UTCDateTime] = None
    to_date: Optional[UTCDateTime] = None

    @field_validator("to_date")
    @classmethod
    def to_date_not_before_from_date(cls, value, info: ValidationInfo):
        check_date_range(info.data.get("from_date"), value)
        return value


class LeaveRequestResponse(CamelModel):
    id: str
    student_id: str
    student: Optional[UserSummary] = None
    from_date: datetime
    to_date: datetime
    reason: str
    status: LeaveStatus
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
