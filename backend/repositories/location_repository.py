"""
Location repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.sanitization import LIKE_ESCAPE_CHAR, contains_pattern
from .base import BaseRepository


class LocationRepository(BaseRepository[db_models.Location]):
    """Repository for Location entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Location, db)

    def get_by_slug(self, slug: str) -> Optional[db_models.Location]:
        return (
            self.db.query(db_models.Location)
            .filter(db_models.Location.slug == slug)
            .first()
        )

    def get_by_name(self, name: str) -> Optional[db_models.Location]:
        return (
            self.db.query(db_models.Location)
            .filter(db_models.Location.name == name)
            .first()
        )

    def list_active(
        self, location_type: Optional[db_models.LocationType] = None
    ) -> List[db_models.Location]:
        query = self.db.query(db_models.Location).filter(
            db_models.Location.is_active == True  # noqa: E712
        )
        if location_type is not None:
            query = query.filter(db_models.Location.type == location_type)
        return query.order_by(
            db_models.Location.post_count.desc(), db_models.Location.name
        ).all()

    def search(self, term: str, limit: int) -> List[db_models.Location]:
        """Active locations whose name or description contains ``term``."""
        pattern = contains_pattern(term)
        return (
            self.db.query(db_models.Location)
            .filter(
                db_models.Location.is_active == True,  # noqa: E712
                or_(
                    db_models.Location.name.ilike(pattern, escape=LIKE_ESCAPE_CHAR),
                    db_models.Location.description.ilike(
                        pattern, escape=LIKE_ESCAPE_CHAR
                    ),
                ),
            )
            .order_by(db_models.Location.post_count.desc(), db_models.Location.id)
            .limit(limit)
            .all()
        )
