"""
Notification repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class NotificationRepository(BaseRepository[db_models.Notification]):
    """Repository for Notification entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Notification, db)

    def get_for_recipient(
        self, notification_id: int, recipient_id: int
    ) -> Optional[db_models.Notification]:
        """
        Get a notification only if it is addressed to ``recipient_id``.

        Args:
            notification_id: Notification ID
            recipient_id: User ID of the expected recipient

        Returns:
            Notification if found and owned, None otherwise
        """
        return (
            self.db.query(db_models.Notification)
            .options(joinedload(db_models.Notification.sender))
            .filter(
                db_models.Notification.id == notification_id,
                db_models.Notification.recipient_id == recipient_id,
            )
            .first()
        )

    def list_for_recipient(
        self,
        recipient_id: int,
        limit: int = 20,
        skip: int = 0,
        read: Optional[bool] = None,
        newest_first: bool = True,
    ) -> List[db_models.Notification]:
        """
        List a user's notifications with their senders loaded.

        Args:
            recipient_id: User ID
            limit: Maximum number of notifications
            skip: Number of notifications to skip
            read: Filter on read state (None for both)
            newest_first: Sort by creation time descending when True

        Returns:
            Notifications
        """
        query = (
            self.db.query(db_models.Notification)
            .options(joinedload(db_models.Notification.sender))
            .filter(db_models.Notification.recipient_id == recipient_id)
        )
        if read is not None:
            query = query.filter(db_models.Notification.read == read)

        if newest_first:
            order = [
                db_models.Notification.created_at.desc(),
                db_models.Notification.id.desc(),
            ]
        else:
            order = [
                db_models.Notification.created_at.asc(),
                db_models.Notification.id.asc(),
            ]

        return query.order_by(*order).offset(skip).limit(limit).all()

    def count_unread(self, recipient_id: int) -> int:
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.recipient_id == recipient_id,
                db_models.Notification.read == False,  # noqa: E712
            )
            .count()
        )

    def mark_all_read(self, recipient_id: int) -> int:
        """
        Mark every unread notification of a user as read and commit.

        Returns:
            Number of notifications that changed
        """
        result = self.db.execute(
            update(db_models.Notification)
            .where(
                db_models.Notification.recipient_id == recipient_id,
                db_models.Notification.read == False,  # noqa: E712
            )
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return int(result.rowcount or 0)
