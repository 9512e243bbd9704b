"""Repository base class for database operations.

Stores build on `BaseRepository` for the shared add/commit/refresh and
lookup plumbing, and wrap driver errors in `DatabaseError`.
"""

from typing import TypeVar, Generic, Type, Optional, List, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import DatabaseError, NotFoundError
from core.logger import get_logger
from database.models import Base

T = TypeVar('T', bound=Base)

logger = get_logger("core.repository")


class BaseRepository(Generic[T]):
    """Generic repository bound to one ORM model and one session.

    Attributes:
        model: SQLAlchemy model class to operate on.
        session: Database session for executing queries.
        resource: Human-readable resource name used in error messages.
    """

    resource = "Resource"

    def __init__(self, model: Type[T], session: Session):
        self.model = model
        self.session = session

    def create(self, obj: T) -> T:
        """Add, commit and refresh a new object.

        Raises:
            DatabaseError: If the commit fails; the session is rolled back.
        """
        return self._commit(obj, operation="create", add=True)

    def update(self, obj: T) -> T:
        """Commit pending changes on an existing object and refresh it."""
        return self._commit(obj, operation="update", add=False)

    def get_by_id(self, id: Any) -> Optional[T]:
        """Return the object with primary key `id`, or None."""
        return self.session.get(self.model, id)

    def get_or_404(self, id: Any) -> T:
        """Return the object with primary key `id`.

        Raises:
            NotFoundError: If no such object exists.
        """
        obj = self.get_by_id(id)
        if obj is None:
            raise NotFoundError(self.resource, id)
        return obj

    def delete_by_id(self, id: Any) -> None:
        """Delete the object with primary key `id`.

        Raises:
            NotFoundError: If no such object exists.
            DatabaseError: If the commit fails.
        """
        obj = self.get_or_404(id)
        try:
            self.session.delete(obj)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Delete failed for %s %s", self.resource, id)
            raise DatabaseError(f"Failed to delete {self.resource} '{id}': {exc}", operation="delete")

    def _commit(self, obj: T, operation: str, add: bool) -> T:
        try:
            if add:
                self.session.add(obj)
            self.session.commit()
            self.session.refresh(obj)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("%s failed for %s", operation.capitalize(), self.resource)
            raise DatabaseError(f"Failed to {operation} {self.resource}: {exc}", operation=operation)
        return obj
