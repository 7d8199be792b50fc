"""Repository for comment likes."""

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from repositories.like_repository import LikeRepository


class CommentLikeRepository(LikeRepository[db_models.CommentLike]):
    def __init__(self, db: Session):
        super().__init__(db_models.CommentLike, db_models.CommentLike.comment_id, db)

    def get_by_comment_and_user(
        self, comment_id: int, user_id: int
    ) -> db_models.CommentLike | None:
        return self.get_for(comment_id, user_id)

    def get_user_liked_comment_ids(
        self, user_id: int, comment_ids: list[int]
    ) -> set[int]:
        return self.liked_target_ids(user_id, comment_ids)
