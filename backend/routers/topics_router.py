from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.topic_service import LocationService, TopicService

router = APIRouter(prefix="/topics", tags=["topics"])
locations_router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=List[schemas.Topic])
def list_topics(db: Session = Depends(get_db)):
    """Active topics, busiest first."""
    return TopicService.list_topics(db)


@router.get("/{slug}", response_model=schemas.Topic)
def get_topic(slug: str, db: Session = Depends(get_db)):
    return TopicService.get_topic(db, slug)


@router.post(
    "/{slug}/follow", response_model=schemas.ApiResponse[schemas.TopicFollowResult]
)
def toggle_follow_topic(
    slug: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Follow the topic, or unfollow it if already followed."""
    return schemas.ApiResponse[schemas.TopicFollowResult](
        data=TopicService.toggle_follow(db, slug, current_user.id)
    )


@locations_router.get("", response_model=List[schemas.Location])
def list_locations(
    type: Optional[db_models.LocationType] = Query(None),
    db: Session = Depends(get_db),
):
    return LocationService.list_locations(db, type)


@locations_router.get("/{slug}", response_model=schemas.Location)
def get_location(slug: str, db: Session = Depends(get_db)):
    return LocationService.get_location(db, slug)
