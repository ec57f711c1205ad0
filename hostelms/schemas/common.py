from datetime import datetime, timezone
from typing import Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, StringConstraints
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Stored DateTime columns are naive UTC
UTCDateTime = Annotated[datetime, AfterValidator(_to_naive_utc)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Optional free text; an empty string is stored as null
OptionalText = Annotated[Optional[str], BeforeValidator(blank_to_none)]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class UserSummary(CamelModel):
    """Denormalized view of a referenced user"""
    id: str
    name: str
    email: str


class MessageResponse(CamelModel):
    message: str
    warning: Optional[str] = None
