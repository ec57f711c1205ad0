from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from ..models.payment import Payment
from .base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    model = Payment

    def list(self, student_id: Optional[str] = None, status: Optional[str] = None) -> List[Payment]:
        query = self.db.query(Payment).options(selectinload(Payment.student))
        if student_id is not None:
            query = query.filter(Payment.student_id == student_id)
        if status:
            query = query.filter(Payment.status == status)
        return query.order_by(Payment.due_date.desc()).all()

    def count_unpaid(self) -> int:
        return self.db.query(Payment).filter(Payment.status != "paid").count()

    def outstanding_amount(self) -> float:
        total = self.db.query(func.sum(Payment.amount)).filter(Payment.status != "paid").scalar()
        return float(total or 0)
