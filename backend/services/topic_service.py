"""
Topic and location service.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import LocationNotFoundException, TopicNotFoundException
from repositories.location_repository import LocationRepository
from repositories.topic_repository import TopicRepository


class TopicService:
    """Service for browsing and following topics."""

    @staticmethod
    def list_topics(db: Session) -> List[schemas.Topic]:
        return [
            schemas.Topic.model_validate(t) for t in TopicRepository(db).list_active()
        ]

    @staticmethod
    def get_topic(db: Session, slug: str) -> db_models.Topic:
        """
        Raises:
            TopicNotFoundException: Unknown or inactive topic
        """
        topic = TopicRepository(db).get_by_slug(slug)
        if not topic or not topic.is_active:
            raise TopicNotFoundException()
        return topic

    @staticmethod
    def toggle_follow(
        db: Session, slug: str, user_id: int
    ) -> schemas.TopicFollowResult:
        """
        Follow a topic, or unfollow it if already followed.

        ``follower_count`` is kept in step with the follower rows via an
        atomic increment in the same transaction.
        """
        topic_repo = TopicRepository(db)
        topic = TopicService.get_topic(db, slug)

        existing = topic_repo.get_follower(topic.id, user_id)
        if existing is None:
            try:
                db.add(db_models.TopicFollower(topic_id=topic.id, user_id=user_id))
                topic_repo.flush()
                topic_repo.increment(topic.id, follower_count=1)
                topic_repo.commit()
            except IntegrityError:
                topic_repo.rollback()
            following = True
        else:
            db.delete(existing)
            topic_repo.increment(topic.id, follower_count=-1)
            topic_repo.commit()
            following = False

        return schemas.TopicFollowResult(
            following=following,
            follower_count=topic_repo.get_follower_count(topic.id),
        )


class LocationService:
    """Service for browsing locations."""

    @staticmethod
    def list_locations(
        db: Session, location_type: Optional[db_models.LocationType] = None
    ) -> List[schemas.Location]:
        return [
            schemas.Location.model_validate(loc)
            for loc in LocationRepository(db).list_active(location_type)
        ]

    @staticmethod
    def get_location(db: Session, slug: str) -> schemas.Location:
        """
        Raises:
            LocationNotFoundException: Unknown or inactive location
        """
        location = LocationRepository(db).get_by_slug(slug)
        if not location or not location.is_active:
            raise LocationNotFoundException()
        return schemas.Location.model_validate(location)
