"""
Topic repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.sanitization import LIKE_ESCAPE_CHAR, contains_pattern
from .base import BaseRepository


class TopicRepository(BaseRepository[db_models.Topic]):
    """Repository for Topic entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Topic, db)

    def get_by_slug(self, slug: str) -> Optional[db_models.Topic]:
        return (
            self.db.query(db_models.Topic)
            .filter(db_models.Topic.slug == slug)
            .first()
        )

    def get_by_name(self, name: str) -> Optional[db_models.Topic]:
        return (
            self.db.query(db_models.Topic)
            .filter(db_models.Topic.name == name)
            .first()
        )

    def list_active(self) -> List[db_models.Topic]:
        return (
            self.db.query(db_models.Topic)
            .filter(db_models.Topic.is_active == True)  # noqa: E712
            .order_by(
                db_models.Topic.post_count.desc(),
                db_models.Topic.follower_count.desc(),
                db_models.Topic.name,
            )
            .all()
        )

    def search(self, term: str, limit: int) -> List[db_models.Topic]:
        """
        Active topics whose name or description contains ``term``.

        Ordered by post count, then follower count.
        """
        pattern = contains_pattern(term)
        return (
            self.db.query(db_models.Topic)
            .filter(
                db_models.Topic.is_active == True,  # noqa: E712
                or_(
                    db_models.Topic.name.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    db_models.Topic.description.ilike(
                        pattern, escape=LIKE_ESCAPE_CHAR
                    ),
                ),
            )
            .order_by(
                db_models.Topic.post_count.desc(),
                db_models.Topic.follower_count.desc(),
                db_models.Topic.id,
            )
            .limit(limit)
            .all()
        )

    def get_follower(
        self, topic_id: int, user_id: int
    ) -> Optional[db_models.TopicFollower]:
        return (
            self.db.query(db_models.TopicFollower)
            .filter(
                db_models.TopicFollower.topic_id == topic_id,
                db_models.TopicFollower.user_id == user_id,
            )
            .first()
        )

    def get_follower_count(self, topic_id: int) -> int:
        value = (
            self.db.query(db_models.Topic.follower_count)
            .filter(db_models.Topic.id == topic_id)
            .scalar()
        )
        return int(value or 0)
