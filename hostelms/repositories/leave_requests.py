from typing import List, Optional

from sqlalchemy.orm import selectinload

from ..models.leave_request import LeaveRequest, PENDING
from .base import BaseRepository


class LeaveRequestRepository(BaseRepository[LeaveRequest]):
    model = LeaveRequest

    def list(self, student_id: Optional[str] = None, status: Optional[str] = None) -> List[LeaveRequest]:
        """All leave requests, newest first; ``student_id`` narrows to one owner."""
        query = self.db.query(LeaveRequest).options(selectinload(LeaveRequest.student))
        if student_id is not None:
            query = query.filter(LeaveRequest.student_id == student_id)
        if status:
            query = query.filter(LeaveRequest.status == status)
        return query.order_by(LeaveRequest.submitted_at.desc()).all()

    def count_pending(self) -> int:
        return self.db.query(LeaveRequest).filter(LeaveRequest.status == PENDING).count()
