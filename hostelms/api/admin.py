from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.permissions import require
from ..core.policy import Caller, Operation
from ..database import get_db
from ..repositories import LeaveRequestRepository, PaymentRepository, RoomRepository, UserRepository
from ..schemas import AdminDashboard, AdminStats

router = APIRouter(prefix="/api", tags=["admin"])


@router.get("/admin-data", response_model=AdminDashboard)
def get_admin_data(
    caller: Caller = Depends(require(Operation.ADMIN_DASHBOARD)),
    db: Session = Depends(get_db),
):
    """Everything the admin dashboard renders, plus headline counts"""
    users = UserRepository(db).list()
    rooms = RoomRepository(db).list()
    leave_requests = LeaveRequestRepository(db)
    payments = PaymentRepository(db)

    stats = AdminStats(
        total_students=UserRepository(db).count_by_role("student"),
        total_rooms=len(rooms),
        available_rooms=sum(1 for room in rooms if room.is_available),
        occupied_beds=sum(room.occupant_count for room in rooms),
        total_beds=sum(room.capacity for room in rooms),
        pending_leave_requests=leave_requests.count_pending(),
        unpaid_payments=payments.count_unpaid(),
        outstanding_amount=payments.outstanding_amount(),
    )
    return {
        "stats": stats,
        "users": users,
        "rooms": rooms,
        "leave_requests": leave_requests.list(),
        "payments": payments.list(),
    }
