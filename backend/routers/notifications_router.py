"""In-app notification endpoints for the current user."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from models.config import settings
from models.exceptions import NotFoundException
from repositories.database import get_db
from services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=schemas.ApiResponse[schemas.NotificationList])
def list_notifications(
    limit: PaginationLimit = 20,
    skip: PaginationSkip = 0,
    read: Optional[bool] = Query(None),
    sort: Literal["newest", "oldest"] = Query("newest"),
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    result = NotificationService.list_for_user(
        db, current_user.id, limit=limit, skip=skip, read=read, sort=sort
    )
    return schemas.ApiResponse[schemas.NotificationList](data=result)


@router.get("/unread/count", response_model=schemas.ApiResponse[schemas.UnreadCount])
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    count = NotificationService.unread_count(db, current_user.id)
    return schemas.ApiResponse[schemas.UnreadCount](
        data=schemas.UnreadCount(count=count)
    )


@router.api_route(
    "/read/all",
    methods=["PATCH", "PUT"],
    response_model=schemas.ApiResponse[schemas.MarkAllReadResult],
)
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    count = NotificationService.mark_all_as_read(db, current_user.id)
    return schemas.ApiResponse[schemas.MarkAllReadResult](
        data=schemas.MarkAllReadResult(count=count)
    )


@router.api_route(
    "/{notification_id}/read",
    methods=["PATCH", "PUT"],
    response_model=schemas.ApiResponse[schemas.NotificationEnvelope],
)
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    notification = NotificationService.mark_as_read(
        db, notification_id, current_user.id
    )
    return schemas.ApiResponse[schemas.NotificationEnvelope](
        data=schemas.NotificationEnvelope(notification=notification)
    )


@router.delete(
    "/{notification_id}", response_model=schemas.ApiResponse[schemas.DeleteResult]
)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    NotificationService.delete(db, notification_id, current_user.id)
    return schemas.ApiResponse[schemas.DeleteResult](data=schemas.DeleteResult())


@router.post(
    "/test",
    response_model=schemas.ApiResponse[schemas.Notification],
    status_code=201,
)
def create_test_notification(
    payload: schemas.NotificationTestRequest,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """
    Create a notification addressed to yourself.

    - type: comment, follower, vote or anything else for a system notification
    """
    if not settings.ENABLE_TEST_NOTIFICATIONS:
        raise NotFoundException("Not found")

    notification = NotificationService.create_test_notification(
        db, current_user, payload.type
    )
    return schemas.ApiResponse[schemas.Notification](data=notification)
