"""Repository for post likes."""

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from repositories.like_repository import LikeRepository


class PostLikeRepository(LikeRepository[db_models.PostLike]):
    def __init__(self, db: Session):
        super().__init__(db_models.PostLike, db_models.PostLike.post_id, db)

    def get_by_post_and_user(
        self, post_id: int, user_id: int
    ) -> db_models.PostLike | None:
        return self.get_for(post_id, user_id)

    def get_user_liked_post_ids(self, user_id: int, post_ids: list[int]) -> set[int]:
        return self.liked_target_ids(user_id, post_ids)

    def count_for_post(self, post_id: int) -> int:
        """Number of like rows.

        Used to check that ``Post.likes`` agrees with the like rows.
        """
        return self.count_for(post_id)
