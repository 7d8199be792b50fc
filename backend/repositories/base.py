"""
Base repository class providing common database operations.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import update
from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Type parameter T should be a SQLAlchemy model class with an integer ``id``.
    """

    def __init__(self, model: type[T], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity if found, None otherwise
        """
        return self.db.get(self.model, id)

    def add(self, entity: T) -> None:
        """Add entity to the session without committing."""
        self.db.add(entity)

    def create(self, entity: T) -> T:
        """
        Insert a new entity and commit.

        Args:
            entity: Entity to create

        Returns:
            Created entity, refreshed from the database
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Commit pending changes on ``entity`` and refresh it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        self.db.delete(entity)
        self.db.commit()

    def remove(self, entity: T) -> None:
        """Mark entity for deletion without committing."""
        self.db.delete(entity)

    def count(self) -> int:
        return self.db.query(self.model).count()

    def increment(self, entity_id: int, **deltas: int) -> None:
        """
        Atomically add ``deltas`` to integer columns of one row.

        Issues a single ``UPDATE ... SET col = col + :delta`` so concurrent
        writers never lose each other's updates. Does not commit.

        Args:
            entity_id: Row ID
            **deltas: Column name to signed amount, e.g. ``votes=-2``
        """
        values: dict[str, Any] = {
            name: getattr(self.model, name) + delta
            for name, delta in deltas.items()
            if delta
        }
        if not values:
            return
        self.db.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()

    def flush(self) -> None:
        """Flush pending changes without committing."""
        self.db.flush()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.db.rollback()

    def refresh(self, entity: T) -> None:
        """Reload entity state from the database."""
        self.db.refresh(entity)
