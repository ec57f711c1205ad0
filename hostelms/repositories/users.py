from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import selectinload

from ..models.user import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User
    conflict_message = "User with this email already exists."

    def list(self, role: Optional[str] = None) -> List[User]:
        query = self.db.query(User).options(selectinload(User.room))
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.name.asc()).all()

    def count_by_role(self, role: str) -> int:
        return self.db.query(User).filter(User.role == role).count()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(User.id).filter(User.email == email.lower())
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def get_by_verification_token(self, token: str, now: datetime) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(User.verification_token == token, User.verification_token_expiry > now)
            .first()
        )

    def get_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(User.reset_password_token == token, User.reset_password_token_expiry > now)
            .first()
        )
