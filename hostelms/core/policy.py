"""
Role-scoped authorization policy.

Every operation a caller can attempt has one entry per role in ``POLICY``.
An entry is one of four rules:

* ``Allow``     - the role may perform the operation on any target.
* ``Deny``      - the role may never perform it (403, with a reason).
* ``OwnerOnly`` - allowed only when the target's ``student_id`` is the caller.
* ``OwnFilter`` - a list operation narrowed to rows owned by the caller.

Checks happen in two phases. ``check_role`` runs before the body is validated
and before anything is loaded: it rejects anonymous callers and roles the table
denies outright. ``check_owner`` runs once the target row has been looked up;
a missing row and someone else's row produce the same 403 for non-admins.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .exceptions import Forbidden, Unauthenticated


class Role(str, Enum):
    ADMIN = "admin"
    STUDENT = "student"


class Operation(str, Enum):
    ROOM_LIST = "room:list"
    ROOM_READ = "room:read"
    ROOM_CREATE = "room:create"
    ROOM_UPDATE = "room:update"
    ROOM_DELETE = "room:delete"
    ROOM_ASSIGN = "room:assign"

    LEAVE_LIST = "leave:list"
    LEAVE_READ = "leave:read"
    LEAVE_CREATE = "leave:create"
    LEAVE_UPDATE = "leave:update"
    LEAVE_DELETE = "leave:delete"

    PAYMENT_LIST = "payment:list"
    PAYMENT_READ = "payment:read"
    PAYMENT_CREATE = "payment:create"
    PAYMENT_UPDATE = "payment:update"
    PAYMENT_DELETE = "payment:delete"

    USER_LIST = "user:list"
    USER_READ = "user:read"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"

    PROFILE_READ = "profile:read"
    PROFILE_UPDATE = "profile:update"
    PASSWORD_CHANGE = "password:change"

    STUDENT_DASHBOARD = "dashboard:student"
    ADMIN_DASHBOARD = "dashboard:admin"


@dataclass(frozen=True)
class Caller:
    """Authenticated identity making the request"""

    id: str
    role: Role
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class Deny:
    reason: str = Forbidden.default_message


@dataclass(frozen=True)
class OwnerOnly:
    pass


@dataclass(frozen=True)
class OwnFilter:
    pass


Rule = Union[Allow, Deny, OwnerOnly, OwnFilter]

ADMIN_ONLY = Deny("Admin access required")
STUDENT_ONLY = Deny("Only students can perform this action")

POLICY: Dict[Tuple[Role, Operation], Rule] = {
    # Rooms: everyone signed in can browse, only admins change them
    (Role.ADMIN, Operation.ROOM_LIST): Allow(),
    (Role.STUDENT, Operation.ROOM_LIST): Allow(),
    (Role.ADMIN, Operation.ROOM_READ): Allow(),
    (Role.STUDENT, Operation.ROOM_READ): Allow(),
    (Role.ADMIN, Operation.ROOM_CREATE): Allow(),
    (Role.STUDENT, Operation.ROOM_CREATE): ADMIN_ONLY,
    (Role.ADMIN, Operation.ROOM_UPDATE): Allow(),
    (Role.STUDENT, Operation.ROOM_UPDATE): ADMIN_ONLY,
    (Role.ADMIN, Operation.ROOM_DELETE): Allow(),
    (Role.STUDENT, Operation.ROOM_DELETE): ADMIN_ONLY,
    (Role.ADMIN, Operation.ROOM_ASSIGN): Allow(),
    (Role.STUDENT, Operation.ROOM_ASSIGN): ADMIN_ONLY,

    # Leave requests
    (Role.ADMIN, Operation.LEAVE_LIST): Allow(),
    (Role.STUDENT, Operation.LEAVE_LIST): OwnFilter(),
    (Role.ADMIN, Operation.LEAVE_READ): Allow(),
    (Role.STUDENT, Operation.LEAVE_READ): OwnerOnly(),
    (Role.ADMIN, Operation.LEAVE_CREATE): Deny("Only students can submit leave requests"),
    (Role.STUDENT, Operation.LEAVE_CREATE): Allow(),
    (Role.ADMIN, Operation.LEAVE_UPDATE): Allow(),
    (Role.STUDENT, Operation.LEAVE_UPDATE): ADMIN_ONLY,
    (Role.ADMIN, Operation.LEAVE_DELETE): Allow(),
    (Role.STUDENT, Operation.LEAVE_DELETE): OwnerOnly(),

    # Payments
    (Role.ADMIN, Operation.PAYMENT_LIST): Allow(),
    (Role.STUDENT, Operation.PAYMENT_LIST): OwnFilter(),
    (Role.ADMIN, Operation.PAYMENT_READ): Allow(),
    (Role.STUDENT, Operation.PAYMENT_READ): OwnerOnly(),
    (Role.ADMIN, Operation.PAYMENT_CREATE): Allow(),
    (Role.STUDENT, Operation.PAYMENT_CREATE): ADMIN_ONLY,
    (Role.ADMIN, Operation.PAYMENT_UPDATE): Allow(),
    (Role.STUDENT, Operation.PAYMENT_UPDATE): ADMIN_ONLY,
    (Role.ADMIN, Operation.PAYMENT_DELETE): Allow(),
    (Role.STUDENT, Operation.PAYMENT_DELETE): ADMIN_ONLY,

    # User administration
    (Role.ADMIN, Operation.USER_LIST): Allow(),
    (Role.STUDENT, Operation.USER_LIST): ADMIN_ONLY,
    (Role.ADMIN, Operation.USER_READ): Allow(),
    (Role.STUDENT, Operation.USER_READ): ADMIN_ONLY,
    (Role.ADMIN, Operation.USER_CREATE): Allow(),
    (Role.STUDENT, Operation.USER_CREATE): ADMIN_ONLY,
    (Role.ADMIN, Operation.USER_UPDATE): Allow(),
    (Role.STUDENT, Operation.USER_UPDATE): ADMIN_ONLY,
    (Role.ADMIN, Operation.USER_DELETE): Allow(),
    (Role.STUDENT, Operation.USER_DELETE): ADMIN_ONLY,

    # Self-service
    (Role.ADMIN, Operation.PROFILE_READ): Allow(),
    (Role.STUDENT, Operation.PROFILE_READ): Allow(),
    (Role.ADMIN, Operation.PROFILE_UPDATE): STUDENT_ONLY,
    (Role.STUDENT, Operation.PROFILE_UPDATE): Allow(),
    (Role.ADMIN, Operation.PASSWORD_CHANGE): STUDENT_ONLY,
    (Role.STUDENT, Operation.PASSWORD_CHANGE): Allow(),

    # Dashboards
    (Role.ADMIN, Operation.STUDENT_DASHBOARD): STUDENT_ONLY,
    (Role.STUDENT, Operation.STUDENT_DASHBOARD): Allow(),
    (Role.ADMIN, Operation.ADMIN_DASHBOARD): Allow(),
    (Role.STUDENT, Operation.ADMIN_DASHBOARD): ADMIN_ONLY,
}


def rule_for(caller: Caller, operation: Operation) -> Rule:
    return POLICY.get((caller.role, operation), Deny())


def check_role(caller: Optional[Caller], operation: Operation) -> Rule:
    """First phase: reject anonymous callers and roles denied outright."""
    if caller is None:
        raise Unauthenticated()
    rule = rule_for(caller, operation)
    if isinstance(rule, Deny):
        raise Forbidden(rule.reason)
    return rule


def check_owner(caller: Caller, operation: Operation, owner_id: Optional[str]) -> None:
    """Second phase: ``owner_id`` is the target's studentId, or None when the target was not found."""
    rule = check_role(caller, operation)
    if isinstance(rule, Allow):
        return
    if isinstance(rule, OwnerOnly) and owner_id is not None and owner_id == caller.id:
        return
    raise Forbidden()


def owner_scope(caller: Caller, operation: Operation) -> Optional[str]:
    """Student id a list query must be narrowed to, or None for an unrestricted list."""
    rule = check_role(caller, operation)
    if isinstance(rule, OwnFilter):
        return caller.id
    if isinstance(rule, Allow):
        return None
    raise Forbidden()
