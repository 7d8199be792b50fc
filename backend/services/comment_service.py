"""
Comment service for business logic.
"""

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.exceptions import ValidationException
from repositories.comment_repository import CommentRepository
from repositories.post_repository import PostRepository
from services.post_service import PostService, serialize_comment

COMMENT_MAX_LENGTH = 1000


class CommentService:
    """Service for comment-related business logic."""

    @staticmethod
    def validate_content(content: str | None) -> str:
        """
        Trim and validate comment text.

        Raises:
            ValidationException: Empty after trimming, or too long
        """
        content = sanitize_plain_text(content) or ""
        if not content:
            raise ValidationException("Comment content is required")
        if len(content) > COMMENT_MAX_LENGTH:
            raise ValidationException(
                f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters"
            )
        return content

    @staticmethod
    def create_comment(
        db: Session, post_id: int, author: db_models.User, content: str | None
    ) -> schemas.Comment:
        """
        Add a comment to a post.

        Args:
            db: Database session
            post_id: Post ID
            author: Commenting user
            content: Raw comment text

        Returns:
            Created comment with author name

        Raises:
            ValidationException: Invalid content
            PostNotFoundException: If post not found
        """
        from services.notification_service import NotificationService

        content = CommentService.validate_content(content)
        post = PostService.get_post_or_404(db, post_id)

        comment_repo = CommentRepository(db)
        post_repo = PostRepository(db)

        comment = db_models.Comment(post_id=post_id, author_id=author.id, content=content)
        comment_repo.add(comment)
        comment_repo.flush()
        post_repo.increment(post_id, comment_count=1)
        post_repo.commit()
        comment_repo.refresh(comment)

        NotificationService.notify_comment(db, post, comment, author)

        return serialize_comment(comment)
