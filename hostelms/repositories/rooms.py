import logging
from typing import List, Optional, Sequence

from sqlalchemy import func, literal, select
from sqlalchemy.orm import selectinload

from ..core.exceptions import CapacityExceeded, Conflict, ValidationFailed
from ..models.room import Room, room_occupants
from ..models.user import User
from .base import BaseRepository

logger = logging.getLogger(__name__)


class RoomRepository(BaseRepository[Room]):
    """Rooms and their occupants.

    Occupancy lives only in ``room_occupants``; every assignment goes through
    ``assign``, which locks the room row where the backend can and inserts the
    occupancy row only while the room still has a free bed, so a full room
    rejects the next student.
    """

    model = Room
    conflict_message = "Room number already exists"

    def list(self) -> List[Room]:
        return (
            self.db.query(Room)
            .options(selectinload(Room.occupants))
            .order_by(Room.room_number.asc())
            .all()
        )

    def get(self, id: str) -> Optional[Room]:
        return (
            self.db.query(Room)
            .options(selectinload(Room.occupants))
            .filter(Room.id == id)
            .first()
        )

    def get_by_number(self, room_number: str) -> Optional[Room]:
        return self.db.query(Room).filter(Room.room_number == room_number).first()

    def room_of(self, user: User) -> Optional[Room]:
        return (
            self.db.query(Room)
            .join(room_occupants, room_occupants.c.room_id == Room.id)
            .filter(room_occupants.c.user_id == user.id)
            .first()
        )

    def create(self, room_number: str, type: str, capacity: int, is_open: bool = True,
               occupant_ids: Sequence[str] = (), commit: bool = True) -> Room:
        if self.get_by_number(room_number) is not None:
            raise Conflict(self.conflict_message)
        if len(set(occupant_ids)) > capacity:
            raise CapacityExceeded(room_number)
        students = self._load_students(occupant_ids)

        room = Room(room_number=room_number, type=type, capacity=capacity, is_open=is_open)
        self.add(room, commit=False)
        for student in students:
            self._detach(student)
        self._persist(False)
        room.occupants.extend(students)
        self._persist(commit)
        logger.info("Room %s created with capacity %s", room_number, capacity)
        return room

    def update_room(self, room: Room, type: Optional[str] = None, capacity: Optional[int] = None,
                    is_open: Optional[bool] = None, occupant_ids: Optional[Sequence[str]] = None,
                    commit: bool = True) -> Room:
        room = self._lock(room.id)
        new_capacity = capacity if capacity is not None else room.capacity

        if occupant_ids is not None:
            if len(set(occupant_ids)) > new_capacity:
                raise CapacityExceeded(room.room_number)
            self._replace_occupants(room, occupant_ids)
        elif new_capacity < self._occupant_count(room.id):
            raise Conflict(
                f"Capacity cannot be lower than the current number of occupants "
                f"({self._occupant_count(room.id)}) of room {room.room_number}"
            )

        if type is not None:
            room.type = type
        room.capacity = new_capacity
        if is_open is not None:
            room.is_open = is_open
        self._persist(commit)
        return room

    def assign(self, room: Room, user: User, commit: bool = True) -> Room:
        """Put ``user`` in ``room``, moving them out of any other room."""
        room = self._lock(room.id)
        if not user.is_student:
            raise ValidationFailed.single("userId", "Only students can be assigned to rooms")
        if user in room.occupants:
            return room
        if self._occupant_count(room.id) >= room.capacity:
            logger.info("Rejected assignment of %s to full room %s", user.id, room.room_number)
            raise CapacityExceeded(room.room_number)

        self._detach(user)
        self._persist(False)
        if not self._insert_if_free(room.id, user.id):
            # another request took the last bed after the count above
            self.db.rollback()
            logger.info("Rejected assignment of %s to full room %s", user.id, room.room_number)
            raise CapacityExceeded(room.room_number)
        self.db.expire(room, ["occupants"])
        self.db.expire(user, ["room"])
        self._persist(commit)
        logger.info("Assigned %s to room %s", user.id, room.room_number)
        return room

    def unassign(self, user: User, commit: bool = True) -> None:
        self._detach(user)
        self._persist(commit)

    def _insert_if_free(self, room_id: str, user_id: str) -> bool:
        """Add the occupancy row only while the room has a free bed.

        The count and the insert run as one statement, so SQLite takes its
        write lock before counting and two writers cannot both see the last
        free bed.
        """
        taken = (
            select(func.count())
            .select_from(room_occupants)
            .where(room_occupants.c.room_id == room_id)
            .scalar_subquery()
        )
        capacity = select(Room.capacity).where(Room.id == room_id).scalar_subquery()
        statement = room_occupants.insert().from_select(
            ["room_id", "user_id"],
            select(literal(room_id), literal(user_id)).where(taken < capacity),
        )
        return self.db.execute(statement).rowcount == 1

    def _lock(self, room_id: str) -> Room:
        # FOR UPDATE where the backend supports it; a no-op on SQLite
        return (
            self.db.query(Room)
            .filter(Room.id == room_id)
            .with_for_update()
            .populate_existing()
            .one()
        )

    def _occupant_count(self, room_id: str) -> int:
        return (
            self.db.query(func.count())
            .select_from(room_occupants)
            .filter(room_occupants.c.room_id == room_id)
            .scalar()
        )

    def _detach(self, user: User) -> None:
        current = self.room_of(user)
        if current is not None and user in current.occupants:
            current.occupants.remove(user)

    def _replace_occupants(self, room: Room, occupant_ids: Sequence[str]) -> None:
        students = self._load_students(occupant_ids)
        wanted = {student.id for student in students}
        for occupant in list(room.occupants):
            if occupant.id not in wanted:
                room.occupants.remove(occupant)
        newcomers = [s for s in students if s not in room.occupants]
        for student in newcomers:
            self._detach(student)
        self._persist(False)
        room.occupants.extend(newcomers)

    def _load_students(self, user_ids: Sequence[str]) -> List[User]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        users = self.db.query(User).filter(User.id.in_(ids)).all()
        found = {user.id: user for user in users}
        missing = [uid for uid in ids if uid not in found]
        if missing:
            raise ValidationFailed.single("occupants", f"Unknown user id(s): {', '.join(missing)}")
        if any(not user.is_student for user in users):
            raise ValidationFailed.single("occupants", "Only students can be assigned to rooms")
        return [found[uid] for uid in ids]
