"""
Comment repository for database operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class CommentRepository(BaseRepository[db_models.Comment]):
    """Repository for Comment entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Comment, db)

    def get_for_post(
        self, post_id: int, comment_id: int
    ) -> Optional[db_models.Comment]:
        """
        Get a comment only if it belongs to the given post.

        Args:
            post_id: Post ID
            comment_id: Comment ID

        Returns:
            Comment if found on that post, None otherwise
        """
        return (
            self.db.query(db_models.Comment)
            .filter(
                db_models.Comment.id == comment_id,
                db_models.Comment.post_id == post_id,
            )
            .first()
        )

    def count_for_post(self, post_id: int) -> int:
        return (
            self.db.query(db_models.Comment)
            .filter(db_models.Comment.post_id == post_id)
            .count()
        )

    def get_likes(self, comment_id: int) -> int:
        value = (
            self.db.query(db_models.Comment.likes)
            .filter(db_models.Comment.id == comment_id)
            .scalar()
        )
        return int(value or 0)
