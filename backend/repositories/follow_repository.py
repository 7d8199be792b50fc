"""
Repository for user-to-user follow relationships.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class FollowRepository(BaseRepository[db_models.UserFollow]):
    """Repository for UserFollow rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.UserFollow, db)

    def get(self, follower_id: int, followed_id: int) -> Optional[db_models.UserFollow]:
        return (
            self.db.query(db_models.UserFollow)
            .filter(
                db_models.UserFollow.follower_id == follower_id,
                db_models.UserFollow.followed_id == followed_id,
            )
            .first()
        )

    def count_followers(self, user_id: int) -> int:
        return (
            self.db.query(db_models.UserFollow)
            .filter(db_models.UserFollow.followed_id == user_id)
            .count()
        )

    def count_following(self, user_id: int) -> int:
        return (
            self.db.query(db_models.UserFollow)
            .filter(db_models.UserFollow.follower_id == user_id)
            .count()
        )

    def follower_counts(self, user_ids: list[int]) -> dict[int, int]:
        """
        Batch follower counts.

        Args:
            user_ids: Users to count followers for

        Returns:
            Mapping of user ID to follower count (0 for users without followers)
        """
        if not user_ids:
            return {}
        rows = (
            self.db.query(
                db_models.UserFollow.followed_id, func.count(db_models.UserFollow.id)
            )
            .filter(db_models.UserFollow.followed_id.in_(user_ids))
            .group_by(db_models.UserFollow.followed_id)
            .all()
        )
        counts = {uid: 0 for uid in user_ids}
        counts.update({followed_id: int(n) for followed_id, n in rows})
        return counts
