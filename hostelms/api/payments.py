import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.exceptions import ValidationFailed
from ..core.permissions import authorize_target, require
from ..core.policy import Caller, Operation, owner_scope
from ..database import get_db
from ..models.payment import Payment
from ..repositories import PaymentRepository, UserRepository
from ..schemas import MessageResponse, PaymentCreate, PaymentResponse, PaymentUpdate
from ..schemas.payment import PaymentStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


def _ensure_student(db: Session, student_id: str) -> None:
    student = UserRepository(db).get(student_id)
    if student is None or not student.is_student:
        raise ValidationFailed.single("studentId", "Student not found")


@router.get("", response_model=List[PaymentResponse])
def list_payments(
    status: Optional[PaymentStatus] = None,
    caller: Caller = Depends(require(Operation.PAYMENT_LIST)),
    db: Session = Depends(get_db),
):
    student_id = owner_scope(caller, Operation.PAYMENT_LIST)
    return PaymentRepository(db).list(student_id=student_id, status=status)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str,
    caller: Caller = Depends(require(Operation.PAYMENT_READ)),
    db: Session = Depends(get_db),
):
    return authorize_target(caller, Operation.PAYMENT_READ, PaymentRepository(db).get(payment_id), "Payment")


@router.post("", status_code=201, response_model=PaymentResponse)
def create_payment(
    payload: PaymentCreate,
    caller: Caller = Depends(require(Operation.PAYMENT_CREATE)),
    db: Session = Depends(get_db),
):
    """Record a fee for a student"""
    _ensure_student(db, payload.student_id)
    payment = PaymentRepository(db).add(Payment(**payload.model_dump()))
    logger.info("Payment %s recorded for %s", payment.id, payment.student_id)
    return payment


@router.put("/{payment_id}", response_model=PaymentResponse)
def update_payment(
    payment_id: str,
    payload: PaymentUpdate,
    caller: Caller = Depends(require(Operation.PAYMENT_UPDATE)),
    db: Session = Depends(get_db),
):
    payments = PaymentRepository(db)
    payment = authorize_target(caller, Operation.PAYMENT_UPDATE, payments.get(payment_id), "Payment")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "student_id" in changes:
        _ensure_student(db, changes["student_id"])
    return payments.update(payment, changes)


@router.delete("/{payment_id}", response_model=MessageResponse, response_model_exclude_none=True)
def delete_payment(
    payment_id: str,
    caller: Caller = Depends(require(Operation.PAYMENT_DELETE)),
    db: Session = Depends(get_db),
):
    payments = PaymentRepository(db)
    payment = authorize_target(caller, Operation.PAYMENT_DELETE, payments.get(payment_id), "Payment")
    payments.delete(payment)
    return MessageResponse(message="Payment deleted")
