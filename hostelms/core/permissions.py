from typing import Any, Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from .exceptions import Forbidden, NotFound
from .policy import Caller, Operation, Role, check_owner, check_role
from .security import verify_token

security = HTTPBearer(auto_error=False)


def caller_for_token(db: Session, token: Optional[str]) -> Optional[Caller]:
    """Map an access token to the caller it was issued to, if that user still exists."""
    if not token:
        return None

    user_id = verify_token(token)
    if user_id is None:
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        return None

    return Caller(id=user.id, role=Role(user.role), name=user.name, email=user.email)


def request_token(request: Request) -> Optional[str]:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        return token
    return request.cookies.get("access_token")


def get_current_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[Caller]:
    """Resolve the caller from the Authorization header or the access_token cookie."""
    token = credentials.credentials if credentials else None
    return caller_for_token(db, token or request.cookies.get("access_token"))


def require(operation: Operation) -> Callable[..., Caller]:
    """Dependency factory: authenticate, then apply the role rule for ``operation``."""

    def checker(caller: Optional[Caller] = Depends(get_current_caller)) -> Caller:
        check_role(caller, operation)
        return caller

    checker.__name__ = f"require_{operation.name.lower()}"
    checker.operation = operation
    return checker


def route_operation(route: Any) -> Optional[Operation]:
    """The operation a route guards with ``require``, if any."""
    dependant = getattr(route, "dependant", None)
    if dependant is None:
        return None
    for dependency in dependant.dependencies:
        operation = getattr(dependency.call, "operation", None)
        if operation is not None:
            return operation
    return None


def authorize_target(caller: Caller, operation: Operation, target: Optional[Any], resource_type: str):
    """Second-phase check once an owned row has been looked up.

    A missing row is a 404 for admins; for anyone else it is the same 403 as
    another student's row, so ids cannot be probed.
    """
    if target is None:
        if caller.is_admin:
            raise NotFound(resource_type)
        raise Forbidden()
    check_owner(caller, operation, target.student_id)
    return target
