import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.exceptions import ValidationFailed
from ..core.permissions import authorize_target, require
from ..core.policy import Caller, Operation, owner_scope
from ..database import get_db, utcnow
from ..models.leave_request import LeaveRequest
from ..repositories import LeaveRequestRepository
from ..schemas import LeaveRequestCreate, LeaveRequestResponse, LeaveRequestUpdate, MessageResponse
from ..schemas.leave_request import DATE_RANGE_MESSAGE, LeaveStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leave-requests", tags=["leave-requests"])


@router.get("", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    status: Optional[LeaveStatus] = None,
    caller: Caller = Depends(require(Operation.LEAVE_LIST)),
    db: Session = Depends(get_db),
):
    """Admins see every request; students only their own. Newest first."""
    student_id = owner_scope(caller, Operation.LEAVE_LIST)
    return LeaveRequestRepository(db).list(student_id=student_id, status=status)


@router.get("/{leave_request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    leave_request_id: str,
    caller: Caller = Depends(require(Operation.LEAVE_READ)),
    db: Session = Depends(get_db),
):
    leave_request = LeaveRequestRepository(db).get(leave_request_id)
    return authorize_target(caller, Operation.LEAVE_READ, leave_request, "Leave request")


@router.post("", status_code=201, response_model=LeaveRequestResponse)
def create_leave_request(
    payload: LeaveRequestCreate,
    caller: Caller = Depends(require(Operation.LEAVE_CREATE)),
    db: Session = Depends(get_db),
):
    leave_request = LeaveRequestRepository(db).add(LeaveRequest(
        student_id=caller.id,
        from_date=payload.from_date,
        to_date=payload.to_date,
        reason=payload.reason,
    ))
    logger.info("Leave request %s submitted by %s", leave_request.id, caller.id)
    return leave_request


@router.put("/{leave_request_id}", response_model=LeaveRequestResponse)
def update_leave_request(
    leave_request_id: str,
    payload: LeaveRequestUpdate,
    caller: Caller = Depends(require(Operation.LEAVE_UPDATE)),
    db: Session = Depends(get_db),
):
    """Review a leave request (approve or reject) and optionally correct its details."""
    leave_requests = LeaveRequestRepository(db)
    leave_request = authorize_target(
        caller, Operation.LEAVE_UPDATE, leave_requests.get(leave_request_id), "Leave request"
    )

    from_date = payload.from_date or leave_request.from_date
    to_date = payload.to_date or leave_request.to_date
    if from_date > to_date:
        raise ValidationFailed.single("toDate", DATE_RANGE_MESSAGE)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"status"})
    leave_requests.update(leave_request, changes, commit=False)

    if payload.status is not None and leave_request.transition_to(payload.status, utcnow()):
        logger.info("Leave request %s %s by %s", leave_request.id, payload.status, caller.id)
    leave_requests.commit()
    return leave_request


@router.delete("/{leave_request_id}", response_model=MessageResponse, response_model_exclude_none=True)
def delete_leave_request(
    leave_request_id: str,
    caller: Caller = Depends(require(Operation.LEAVE_DELETE)),
    db: Session = Depends(get_db),
):
    leave_requests = LeaveRequestRepository(db)
    leave_request = authorize_target(
        caller, Operation.LEAVE_DELETE, leave_requests.get(leave_request_id), "Leave request"
    )
    leave_requests.delete(leave_request)
    return MessageResponse(message="Leave request deleted")
