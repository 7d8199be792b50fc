"""Shared queries for per-user like rows (post likes and comment likes)."""

from typing import Generic, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import InstrumentedAttribute, Session

from repositories.base import BaseRepository
from repositories.database import Base

L = TypeVar("L", bound=Base)  # type: ignore[type-arg]


class LikeRepository(BaseRepository[L], Generic[L]):
    """
    A like row is unique per (target, user).

    ``target_column`` is the model column holding the liked target's id.
    """

    def __init__(self, model: type[L], target_column: InstrumentedAttribute, db: Session):
        super().__init__(model, db)
        self.target_column = target_column

    def get_for(self, target_id: int, user_id: int) -> L | None:
        return (
            self.db.query(self.model)
            .filter(self.target_column == target_id, self.model.user_id == user_id)
            .first()
        )

    def liked_target_ids(self, user_id: int, target_ids: list[int]) -> set[int]:
        """Which of ``target_ids`` the user has liked, in one query."""
        if not target_ids:
            return set()
        rows = (
            self.db.query(self.target_column)
            .filter(self.model.user_id == user_id, self.target_column.in_(target_ids))
            .all()
        )
        return {target_id for (target_id,) in rows}

    def count_for(self, target_id: int) -> int:
        return (
            self.db.query(func.count())
            .select_from(self.model)
            .filter(self.target_column == target_id)
            .scalar()
        )
