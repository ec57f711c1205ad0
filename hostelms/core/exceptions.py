"""
Domain exceptions for HostelMS.

Routes and repositories raise these; ``register_exception_handlers`` in
``hostelms.core.error_handlers`` turns them into JSON responses. Field errors are rendered as
``{"errors": {field: [messages]}}``, everything else as ``{"error": message}``.
"""

from typing import Dict, List, Optional


class HostelError(Exception):
    """Base exception for all HostelMS errors"""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationFailed(HostelError):
    """Input rejected before it reached the store"""

    status_code = 400
    default_message = "Invalid input"

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls({field: [message]})

    def to_dict(self) -> dict:
        return {"errors": self.errors}


class BadRequest(HostelError):
    status_code = 400
    default_message = "Bad request"


class InvalidToken(BadRequest):
    """Verification or reset token is unknown, used, or expired"""

    default_message = "Invalid or expired token"


class Unauthenticated(HostelError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(HostelError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(HostelError):
    status_code = 404
    default_message = "Resource not found"

    def __init__(self, resource_type: str):
        super().__init__(f"{resource_type} not found")
        self.resource_type = resource_type


class Conflict(HostelError):
    status_code = 409
    default_message = "Resource already exists"


class CapacityExceeded(Conflict):
    def __init__(self, room_number: str):
        super().__init__(f"Room {room_number} is at full capacity")
        self.room_number = room_number


class MailDeliveryError(HostelError):
    """SMTP delivery failed; callers log it and keep the state change"""

    default_message = "Failed to send email"
