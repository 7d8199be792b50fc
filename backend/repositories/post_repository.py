"""
Post repository for database operations.
"""

from enum import Enum
from typing import List, Optional

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session, joinedload, selectinload

import repositories.db_models as db_models
from helpers.sanitization import LIKE_ESCAPE_CHAR, contains_pattern
from .base import BaseRepository


class PostSortOrder(str, Enum):
    """Feed ordering options."""

    VOTES = "votes"
    NEW = "new"
    TRENDING = "trending"


class PostRepository(BaseRepository[db_models.Post]):
    """Repository for Post entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Post, db)

    def _with_author_and_comments(self):  # type: ignore[no-untyped-def]
        return self.db.query(db_models.Post).options(
            joinedload(db_models.Post.author),
            selectinload(db_models.Post.comments).joinedload(
                db_models.Comment.author
            ),
        )

    def get_with_comments(self, post_id: int) -> Optional[db_models.Post]:
        """
        Get a post with its author and comments (and their authors) loaded.

        Args:
            post_id: Post ID

        Returns:
            Post if found, None otherwise
        """
        return (
            self._with_author_and_comments()
            .filter(db_models.Post.id == post_id)
            .first()
        )

    def list_posts(
        self,
        sort: PostSortOrder = PostSortOrder.VOTES,
        category: Optional[db_models.PostCategory] = None,
    ) -> List[db_models.Post]:
        """
        List posts for the feed.

        Args:
            sort: votes (most voted first), new (newest first) or trending
                (most shared, then most voted)
            category: Optional category filter

        Returns:
            Posts with authors and comments loaded
        """
        query = self._with_author_and_comments()
        if category is not None:
            query = query.filter(db_models.Post.category == category)

        if sort == PostSortOrder.NEW:
            order = [db_models.Post.created_at.desc()]
        elif sort == PostSortOrder.TRENDING:
            order = [db_models.Post.shares.desc(), db_models.Post.votes.desc()]
        else:
            order = [db_models.Post.votes.desc()]

        return query.order_by(*order, db_models.Post.id.desc()).all()

    def search(self, term: str, limit: int) -> List[db_models.Post]:
        """
        Case-insensitive substring search on title, description and category.

        Results are ordered by votes, then newest first.
        """
        pattern = contains_pattern(term)
        return (
            self.db.query(db_models.Post)
            .options(joinedload(db_models.Post.author))
            .filter(
                or_(
                    db_models.Post.title.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    db_models.Post.description.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    cast(db_models.Post.category, String).ilike(
                        pattern, escape=LIKE_ESCAPE_CHAR
                    ),
                )
            )
            .order_by(db_models.Post.votes.desc(), db_models.Post.created_at.desc())
            .limit(limit)
            .all()
        )

    def suggest_titles(self, term: str, limit: int) -> List[db_models.Post]:
        """Posts whose title contains ``term``."""
        pattern = contains_pattern(term)
        return (
            self.db.query(db_models.Post)
            .filter(db_models.Post.title.ilike(pattern, escape=LIKE_ESCAPE_CHAR))
            .order_by(db_models.Post.votes.desc(), db_models.Post.id.desc())
            .limit(limit)
            .all()
        )

    def get_counter(self, post_id: int, column: str) -> int:
        """Read one aggregate counter straight from the database."""
        value = (
            self.db.query(getattr(db_models.Post, column))
            .filter(db_models.Post.id == post_id)
            .scalar()
        )
        return int(value or 0)
