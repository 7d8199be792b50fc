"""
Post service for business logic.

Aggregate counters (likes, shares) are only changed through atomic SQL
increments issued in the same transaction as the per-user rows.
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from helpers.time_utils import format_time_ago_short
from models.exceptions import PostNotFoundException, ValidationException
from repositories.comment_like_repository import CommentLikeRepository
from repositories.post_like_repository import PostLikeRepository
from repositories.post_repository import PostRepository, PostSortOrder
from repositories.vote_repository import VoteRepository
from services.likes import desired_like_state
from services.upload_service import UploadKind, UploadService

ANONYMOUS_AUTHOR = "Anonymous"

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
DESCRIPTION_MIN_LENGTH = 10


def author_name(user: Optional[db_models.User]) -> str:
    return user.name if user is not None else ANONYMOUS_AUTHOR


def serialize_comment(
    comment: db_models.Comment, user_liked: bool = False, now: Optional[datetime] = None
) -> schemas.Comment:
    return schemas.Comment(
        id=comment.id,
        post_id=comment.post_id,
        author_id=comment.author_id,
        author=author_name(comment.author),
        content=comment.content,
        likes=comment.likes,
        created_at=comment.created_at,
        time_ago=format_time_ago_short(comment.created_at, now),
        user_liked=user_liked,
    )


def serialize_post(post: db_models.Post) -> schemas.Post:
    return schemas.Post(
        id=post.id,
        title=post.title,
        description=post.description,
        category=post.category,
        author_id=post.author_id,
        author=author_name(post.author),
        image=post.image,
        votes=post.votes,
        likes=post.likes,
        shares=post.shares,
        comment_count=post.comment_count,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


class PostService:
    """Service for post-related business logic."""

    @staticmethod
    def _with_details(
        db: Session,
        posts: List[db_models.Post],
        current_user_id: Optional[int],
    ) -> List[schemas.PostWithDetails]:
        """Attach the viewer's vote/like state, relative times and comments."""
        now = datetime.now(timezone.utc)
        post_ids = [post.id for post in posts]
        comment_ids = [comment.id for post in posts for comment in post.comments]

        user_votes: dict[int, int] = {}
        liked_posts: set[int] = set()
        liked_comments: set[int] = set()
        if current_user_id is not None:
            user_votes = VoteRepository(db).get_user_votes(current_user_id, post_ids)
            liked_posts = PostLikeRepository(db).get_user_liked_post_ids(
                current_user_id, post_ids
            )
            liked_comments = CommentLikeRepository(db).get_user_liked_comment_ids(
                current_user_id, comment_ids
            )

        return [
            schemas.PostWithDetails(
                **serialize_post(post).model_dump(),
                user_vote=user_votes.get(post.id, 0),
                user_liked=post.id in liked_posts,
                time_ago=format_time_ago_short(post.created_at, now),
                comments=[
                    serialize_comment(c, c.id in liked_comments, now)
                    for c in post.comments
                ],
            )
            for post in posts
        ]

    @staticmethod
    def list_posts(
        db: Session,
        sort: PostSortOrder = PostSortOrder.VOTES,
        category: Optional[db_models.PostCategory] = None,
        current_user_id: Optional[int] = None,
    ) -> List[schemas.PostWithDetails]:
        """
        Get the post feed.

        Args:
            db: Database session
            sort: votes (default), new or trending
            category: Optional category filter
            current_user_id: Viewer, for ``user_vote``/``user_liked`` (None if anonymous)

        Returns:
            Posts with author names, viewer state and comments
        """
        posts = PostRepository(db).list_posts(sort=sort, category=category)
        return PostService._with_details(db, posts, current_user_id)

    @staticmethod
    def get_post(
        db: Session, post_id: int, current_user_id: Optional[int] = None
    ) -> schemas.PostWithDetails:
        """
        Get a single post.

        Raises:
            PostNotFoundException: If post not found
        """
        post = PostRepository(db).get_with_comments(post_id)
        if not post:
            raise PostNotFoundException()
        return PostService._with_details(db, [post], current_user_id)[0]

    @staticmethod
    def get_post_or_404(db: Session, post_id: int) -> db_models.Post:
        post = PostRepository(db).get_by_id(post_id)
        if not post:
            raise PostNotFoundException()
        return post

    @staticmethod
    def validate_post_fields(
        title: Optional[str], description: Optional[str], category: Optional[str]
    ) -> tuple[str, str, db_models.PostCategory]:
        """
        Clean and validate the text fields of a new post.

        Raises:
            ValidationException: With a message naming the offending field
        """
        title = sanitize_plain_text(title) or ""
        description = sanitize_plain_text(description) or ""

        if not title:
            raise ValidationException("Title is required")
        if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
            raise ValidationException(
                f"Title must be between {TITLE_MIN_LENGTH} and "
                f"{TITLE_MAX_LENGTH} characters"
            )
        if not description:
            raise ValidationException("Description is required")
        if len(description) < DESCRIPTION_MIN_LENGTH:
            raise ValidationException(
                f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"
            )

        try:
            post_category = db_models.PostCategory((category or "").strip())
        except ValueError:
            allowed = ", ".join(c.value for c in db_models.PostCategory)
            raise ValidationException(f"Category must be one of: {allowed}")

        return title, description, post_category

    @staticmethod
    def create_post(
        db: Session,
        author: db_models.User,
        title: Optional[str],
        description: Optional[str],
        category: Optional[str],
        image: Optional[UploadFile] = None,
    ) -> schemas.Post:
        """
        Create a post with an optional image.

        The image is validated in memory before it is written; if creating
        the row fails afterwards, the stored file is deleted.

        Raises:
            ValidationException: Invalid fields or rejected image
        """
        title, description, post_category = PostService.validate_post_fields(
            title, description, category
        )
        post_repo = PostRepository(db)

        with UploadService.stored(image, UploadKind.POST_IMAGE) as stored:
            post = db_models.Post(
                title=title,
                description=description,
                category=post_category,
                author_id=author.id,
                image=stored.public_path if stored else None,
            )
            try:
                post = post_repo.create(post)
            except Exception:
                post_repo.rollback()
                raise

        logger.info(f"User {author.id} created post {post.id}")
        return serialize_post(post)

    @staticmethod
    def share_post(db: Session, post_id: int) -> int:
        """
        Record one share.

        Returns:
            New share count

        Raises:
            PostNotFoundException: If post not found
        """
        post_repo = PostRepository(db)
        PostService.get_post_or_404(db, post_id)
        post_repo.increment(post_id, shares=1)
        post_repo.commit()
        return post_repo.get_counter(post_id, "shares")

    @staticmethod
    def set_like(
        db: Session, post_id: int, user_id: int, liked: Optional[bool] = None
    ) -> schemas.PostLikeResult:
        """
        Like, unlike or toggle a post for a user.

        Args:
            db: Database session
            post_id: Post ID
            user_id: User ID
            liked: Target state, or None to flip the current state

        Returns:
            Like count and the resulting state

        Raises:
            PostNotFoundException: If post not found
        """
        post_repo = PostRepository(db)
        like_repo = PostLikeRepository(db)
        PostService.get_post_or_404(db, post_id)

        existing = like_repo.get_by_post_and_user(post_id, user_id)
        target = desired_like_state(existing is not None, liked)

        if target and existing is None:
            try:
                like_repo.add(db_models.PostLike(post_id=post_id, user_id=user_id))
                like_repo.flush()
                post_repo.increment(post_id, likes=1)
                post_repo.commit()
            except IntegrityError:
                # A concurrent request already liked it
                post_repo.rollback()
        elif not target and existing is not None:
            like_repo.remove(existing)
            post_repo.increment(post_id, likes=-1)
            post_repo.commit()

        return schemas.PostLikeResult(
            likes=post_repo.get_counter(post_id, "likes"), liked=target
        )
