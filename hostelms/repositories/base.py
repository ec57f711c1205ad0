import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import Conflict
from ..database import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """CRUD accessors shared by every entity repository.

    Mutating methods commit by default; pass ``commit=False`` to batch several
    writes and call ``commit()`` once. Unique-constraint violations surface as
    ``Conflict`` with ``conflict_message``.
    """

    model: Type[ModelT]
    conflict_message = "Resource already exists"

    def __init__(self, db: Session):
        self.db = db

    def get(self, id: str) -> Optional[ModelT]:
        return self.db.get(self.model, id)

    def list(self) -> List[ModelT]:
        return self.db.query(self.model).all()

    def count(self) -> int:
        return self.db.query(self.model).count()

    def add(self, obj: ModelT, commit: bool = True) -> ModelT:
        self.db.add(obj)
        self._persist(commit)
        return obj

    def update(self, obj: ModelT, changes: Dict[str, Any], commit: bool = True) -> ModelT:
        for field, value in changes.items():
            setattr(obj, field, value)
        self._persist(commit)
        return obj

    def delete(self, obj: ModelT, commit: bool = True) -> None:
        self.db.delete(obj)
        self._persist(commit)

    def commit(self) -> None:
        self._persist(True)

    def _persist(self, commit: bool) -> None:
        try:
            if commit:
                self.db.commit()
            else:
                self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("%s write rejected by a constraint: %s", self.model.__name__, exc.orig)
            raise Conflict(self.conflict_message) from exc
