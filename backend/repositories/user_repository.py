"""
User repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.sanitization import LIKE_ESCAPE_CHAR, contains_pattern
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email (case-insensitive; emails are stored lowercased).

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.email == email.strip().lower())
            .first()
        )

    def get_by_username(self, username: str) -> Optional[db_models.User]:
        """
        Get user by username.

        Args:
            username: Username

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.username == username)
            .first()
        )

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def username_exists(self, username: str) -> bool:
        return (
            self.db.query(db_models.User.id)
            .filter(db_models.User.username == username)
            .first()
            is not None
        )

    def get_all(self) -> List[db_models.User]:
        return self.db.query(db_models.User).order_by(db_models.User.id).all()

    def search(self, term: str, limit: int) -> List[db_models.User]:
        """
        Case-insensitive substring search on name, username and bio.

        Args:
            term: Raw search term (wildcards are escaped)
            limit: Maximum number of users to return

        Returns:
            Matching users
        """
        pattern = contains_pattern(term)
        return (
            self.db.query(db_models.User)
            .filter(
                or_(
                    db_models.User.name.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    db_models.User.username.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    db_models.User.bio.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                )
            )
            .order_by(db_models.User.id)
            .limit(limit)
            .all()
        )

    def suggest(self, term: str, limit: int) -> List[db_models.User]:
        """Users whose name or username contains ``term``."""
        pattern = contains_pattern(term)
        return (
            self.db.query(db_models.User)
            .filter(
                or_(
                    db_models.User.name.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    db_models.User.username.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                )
            )
            .order_by(db_models.User.id)
            .limit(limit)
            .all()
        )

    def get_contribution_stats(
        self, user_ids: Optional[List[int]] = None
    ) -> dict[int, dict[str, int]]:
        """
        Compute contribution counters per user.

        Args:
            user_ids: Restrict to these users (all users if None)

        Returns:
            Mapping of user ID to ``{"total_posts", "total_comments",
            "total_votes"}`` where ``total_votes`` is the sum of the vote
            aggregates on the user's own posts
        """
        post_query = self.db.query(
            db_models.Post.author_id,
            func.count(db_models.Post.id),
            func.coalesce(func.sum(db_models.Post.votes), 0),
        ).group_by(db_models.Post.author_id)
        comment_query = self.db.query(
            db_models.Comment.author_id, func.count(db_models.Comment.id)
        ).group_by(db_models.Comment.author_id)

        if user_ids is not None:
            post_query = post_query.filter(db_models.Post.author_id.in_(user_ids))
            comment_query = comment_query.filter(
                db_models.Comment.author_id.in_(user_ids)
            )
            stats = {
                uid: {"total_posts": 0, "total_comments": 0, "total_votes": 0}
                for uid in user_ids
            }
        else:
            stats = {
                uid: {"total_posts": 0, "total_comments": 0, "total_votes": 0}
                for (uid,) in self.db.query(db_models.User.id).all()
            }

        for author_id, post_count, vote_sum in post_query.all():
            if author_id in stats:
                stats[author_id]["total_posts"] = int(post_count)
                stats[author_id]["total_votes"] = int(vote_sum)

        for author_id, comment_count in comment_query.all():
            if author_id in stats:
                stats[author_id]["total_comments"] = int(comment_count)

        return stats
