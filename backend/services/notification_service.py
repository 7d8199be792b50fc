"""
In-app notification service.

Dispatch helpers (``notify_*``) are best-effort: they run after the primary
write has been committed, never notify a user about their own action, and
log and swallow any failure so the triggering request still succeeds.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import NotificationNotFoundException
from models.notification_types import NotificationType, RelatedModel, RelatedRef
from repositories.notification_repository import NotificationRepository

TEST_NOTIFICATION_TYPES = {
    "comment": NotificationType.NEW_COMMENT,
    "follower": NotificationType.NEW_FOLLOWER,
    "vote": NotificationType.VOTE,
}


class NotificationService:
    """Create, list and update in-app notifications."""

    @staticmethod
    def create(
        db: Session,
        recipient_id: int,
        type: NotificationType,
        title: str,
        message: str,
        sender_id: Optional[int] = None,
        related: Optional[RelatedRef] = None,
        url: Optional[str] = None,
        image: Optional[str] = None,
    ) -> db_models.Notification:
        """Persist one notification and commit."""
        notification = db_models.Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=type,
            title=title,
            message=message,
            url=url,
            image=image,
        )
        notification.related = related
        return NotificationRepository(db).create(notification)

    @staticmethod
    def _dispatch(
        db: Session,
        recipient_id: Optional[int],
        sender: db_models.User,
        **fields,  # type: ignore[no-untyped-def]
    ) -> Optional[db_models.Notification]:
        if recipient_id is None or recipient_id == sender.id:
            return None

        try:
            return NotificationService.create(
                db, recipient_id=recipient_id, sender_id=sender.id, **fields
            )
        except Exception:
            db.rollback()
            logger.exception(
                f"Failed to create {fields.get('type')} notification "
                f"for user {recipient_id}"
            )
            return None

    @staticmethod
    def notify_comment(
        db: Session,
        post: db_models.Post,
        comment: db_models.Comment,
        commenter: db_models.User,
    ) -> Optional[db_models.Notification]:
        """Tell a post's author that someone commented on it."""
        return NotificationService._dispatch(
            db,
            post.author_id,
            commenter,
            type=NotificationType.NEW_COMMENT,
            title="New Comment",
            message=f'{commenter.name} commented on your post: "{post.title}"',
            related=RelatedRef(RelatedModel.POST, post.id),
            url=f"/post/{post.id}?comment={comment.id}",
        )

    @staticmethod
    def notify_vote(
        db: Session, post: db_models.Post, voter: db_models.User
    ) -> Optional[db_models.Notification]:
        """Tell a post's author that someone upvoted it."""
        return NotificationService._dispatch(
            db,
            post.author_id,
            voter,
            type=NotificationType.VOTE,
            title="New Vote",
            message=f'{voter.name} voted on your post: "{post.title}"',
            related=RelatedRef(RelatedModel.POST, post.id),
            url=f"/post/{post.id}",
        )

    @staticmethod
    def notify_follower(
        db: Session, followed: db_models.User, follower: db_models.User
    ) -> Optional[db_models.Notification]:
        """Tell a user they have a new follower."""
        return NotificationService._dispatch(
            db,
            followed.id,
            follower,
            type=NotificationType.NEW_FOLLOWER,
            title="New Follower",
            message=f"{follower.name} started following you",
            related=RelatedRef(RelatedModel.USER, follower.id),
            url=f"/@{follower.username}",
            image=follower.avatar,
        )

    @staticmethod
    def list_for_user(
        db: Session,
        user_id: int,
        limit: int = 20,
        skip: int = 0,
        read: Optional[bool] = None,
        sort: str = "newest",
    ) -> schemas.NotificationList:
        """
        List a user's notifications with pagination info.

        Args:
            db: Database session
            user_id: Recipient
            limit: Page size
            skip: Offset
            read: Optional read-state filter
            sort: "newest" (default) or "oldest"

        Returns:
            Notifications plus ``{limit, skip, unread_count}``
        """
        repo = NotificationRepository(db)
        notifications = repo.list_for_recipient(
            user_id, limit=limit, skip=skip, read=read, newest_first=sort != "oldest"
        )
        return schemas.NotificationList(
            notifications=[
                schemas.Notification.model_validate(n) for n in notifications
            ],
            pagination=schemas.NotificationPagination(
                limit=limit, skip=skip, unread_count=repo.count_unread(user_id)
            ),
        )

    @staticmethod
    def unread_count(db: Session, user_id: int) -> int:
        return NotificationRepository(db).count_unread(user_id)

    @staticmethod
    def mark_as_read(
        db: Session, notification_id: int, user_id: int
    ) -> schemas.Notification:
        """
        Mark one of the user's notifications as read.

        Raises:
            NotificationNotFoundException: Missing or owned by another user
        """
        repo = NotificationRepository(db)
        notification = repo.get_for_recipient(notification_id, user_id)
        if not notification:
            raise NotificationNotFoundException()

        notification.read = True
        repo.update(notification)
        return schemas.Notification.model_validate(notification)

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        count = NotificationRepository(db).mark_all_read(user_id)
        logger.info(f"Marked {count} notifications read for user {user_id}")
        return count

    @staticmethod
    def delete(db: Session, notification_id: int, user_id: int) -> None:
        """
        Delete one of the user's notifications.

        Raises:
            NotificationNotFoundException: Missing or owned by another user
        """
        repo = NotificationRepository(db)
        notification = repo.get_for_recipient(notification_id, user_id)
        if not notification:
            raise NotificationNotFoundException()
        repo.delete(notification)

    @staticmethod
    def create_test_notification(
        db: Session, user: db_models.User, kind: str
    ) -> schemas.Notification:
        """Create a synthetic notification addressed to ``user`` itself."""
        type = TEST_NOTIFICATION_TYPES.get(kind, NotificationType.SYSTEM)
        notification = NotificationService.create(
            db,
            recipient_id=user.id,
            sender_id=user.id,
            type=type,
            title="Test Notification",
            message=f"This is a test {type.value} notification",
            url="/notifications",
        )
        return schemas.Notification.model_validate(notification)
