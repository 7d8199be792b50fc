"""
Post vote repository for database operations.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class VoteRepository(BaseRepository[db_models.PostVote]):
    """Repository for PostVote entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.PostVote, db)

    def get_by_post_and_user(
        self, post_id: int, user_id: int
    ) -> Optional[db_models.PostVote]:
        """
        Get the stored vote of one user on one post.

        Args:
            post_id: Post ID
            user_id: User ID

        Returns:
            PostVote if found, None otherwise
        """
        return (
            self.db.query(db_models.PostVote)
            .filter(
                db_models.PostVote.post_id == post_id,
                db_models.PostVote.user_id == user_id,
            )
            .first()
        )

    def get_user_votes(self, user_id: int, post_ids: list[int]) -> dict[int, int]:
        """
        Batch load a user's votes for several posts.

        Returns:
            Mapping of post ID to vote value; posts without a vote are absent
        """
        if not post_ids:
            return {}
        rows = (
            self.db.query(db_models.PostVote.post_id, db_models.PostVote.vote)
            .filter(
                db_models.PostVote.user_id == user_id,
                db_models.PostVote.post_id.in_(post_ids),
            )
            .all()
        )
        return {post_id: vote for post_id, vote in rows}

    def sum_for_post(self, post_id: int) -> int:
        """Sum of all stored votes on a post.

        Used to check that ``Post.votes`` agrees with the vote rows.
        """
        total = (
            self.db.query(func.coalesce(func.sum(db_models.PostVote.vote), 0))
            .filter(db_models.PostVote.post_id == post_id)
            .scalar()
        )
        return int(total or 0)
