"""Service for comment like business logic."""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import CommentNotFoundException
from repositories.comment_like_repository import CommentLikeRepository
from repositories.comment_repository import CommentRepository
from services.likes import desired_like_state
from services.post_service import PostService


class CommentLikeService:
    """Service for comment like operations."""

    @staticmethod
    def set_like(
        db: Session,
        post_id: int,
        comment_id: int,
        user_id: int,
        liked: Optional[bool] = None,
    ) -> schemas.CommentLikeResult:
        """
        Like, unlike or toggle a comment.

        Args:
            db: Database session
            post_id: Post the comment must belong to
            comment_id: Comment ID
            user_id: User ID
            liked: Target state, or None to flip the current state

        Returns:
            Like count and the resulting state

        Raises:
            PostNotFoundException: If post not found
            CommentNotFoundException: If comment not found on that post
        """
        PostService.get_post_or_404(db, post_id)

        comment_repo = CommentRepository(db)
        like_repo = CommentLikeRepository(db)

        comment = comment_repo.get_for_post(post_id, comment_id)
        if not comment:
            raise CommentNotFoundException()

        existing = like_repo.get_by_comment_and_user(comment_id, user_id)
        target = desired_like_state(existing is not None, liked)

        if target and existing is None:
            try:
                like_repo.add(
                    db_models.CommentLike(comment_id=comment_id, user_id=user_id)
                )
                like_repo.flush()
                comment_repo.increment(comment_id, likes=1)
                comment_repo.commit()
            except IntegrityError:
                comment_repo.rollback()
        elif not target and existing is not None:
            like_repo.remove(existing)
            comment_repo.increment(comment_id, likes=-1)
            comment_repo.commit()

        return schemas.CommentLikeResult(
            likes=comment_repo.get_likes(comment_id), is_liked=target
        )
