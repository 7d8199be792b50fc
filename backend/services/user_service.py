"""
User Service

Handles profiles, contribution stats, leaderboards and user following.
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
from models.exceptions import UserNotFoundException, ValidationException
from repositories.follow_repository import FollowRepository
from repositories.user_repository import UserRepository
from services.upload_service import UploadKind, UploadService

POINTS_PER_POST = 10
POINTS_PER_COMMENT = 5
POINTS_PER_VOTE = 2
TOP_CONTRIBUTORS_LIMIT = 5

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 500


def calculate_points(stats: dict[str, int]) -> int:
    """Contribution points: 10 per post, 5 per comment, 2 per vote received."""
    return (
        stats["total_posts"] * POINTS_PER_POST
        + stats["total_comments"] * POINTS_PER_COMMENT
        + stats["total_votes"] * POINTS_PER_VOTE
    )


class UserService:
    """Service for user profiles and follow relationships."""

    @staticmethod
    def get_stats(db: Session, user_id: int) -> schemas.UserStats:
        stats = UserRepository(db).get_contribution_stats([user_id])[user_id]
        return schemas.UserStats(**stats)

    @staticmethod
    def build_profile(
        db: Session, user: db_models.User, include_email: bool = False
    ) -> schemas.UserProfile:
        """
        Build a profile response for ``user``.

        Args:
            db: Database session
            user: Profile owner
            include_email: Only true when the caller is the owner

        Returns:
            Profile with stats and follow counts
        """
        follow_repo = FollowRepository(db)
        profile = schemas.UserProfile.model_validate(
            {
                **schemas.UserPublic.model_validate(user).model_dump(),
                "stats": UserService.get_stats(db, user.id),
                "followers": follow_repo.count_followers(user.id),
                "following": follow_repo.count_following(user.id),
            }
        )
        if include_email:
            profile.email = user.email
        return profile

    @staticmethod
    def get_by_username(db: Session, username: str) -> db_models.User:
        """
        Raises:
            UserNotFoundException: If no user has this username
        """
        user = UserRepository(db).get_by_username(username)
        if not user:
            raise UserNotFoundException()
        return user

    @staticmethod
    def update_profile(
        db: Session,
        user: db_models.User,
        name: Optional[str] = None,
        bio: Optional[str] = None,
        avatar: Optional[UploadFile] = None,
    ) -> schemas.UserProfile:
        """
        Update name, bio and avatar of the current user.

        The new avatar is stored first; if the update then fails it is
        deleted again. The previous avatar file is only removed once the
        change is committed.

        Raises:
            ValidationException: Name or bio out of range, or rejected avatar
        """
        if name is not None:
            name = sanitize_plain_text(name) or ""
            if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
                raise ValidationException(
                    f"Name must be between {NAME_MIN_LENGTH} and "
                    f"{NAME_MAX_LENGTH} characters"
                )
        if bio is not None:
            bio = sanitize_plain_text(bio) or ""
            if len(bio) > BIO_MAX_LENGTH:
                raise ValidationException(
                    f"Bio cannot exceed {BIO_MAX_LENGTH} characters"
                )

        user_repo = UserRepository(db)
        old_avatar = user.avatar

        with UploadService.stored(avatar, UploadKind.AVATAR) as stored:
            if name is not None:
                user.name = name
            if bio is not None:
                user.bio = bio
            if stored is not None:
                user.avatar = stored.public_path
            user.last_active = datetime.now(timezone.utc)
            try:
                user_repo.update(user)
            except Exception:
                user_repo.rollback()
                raise

        if stored is not None and old_avatar:
            UploadService.delete_public_path(old_avatar)

        return UserService.build_profile(db, user, include_email=True)

    @staticmethod
    def get_top_contributors(db: Session) -> List[schemas.TopContributor]:
        """Top users by contribution points."""
        user_repo = UserRepository(db)
        stats = user_repo.get_contribution_stats()
        users = {user.id: user for user in user_repo.get_all()}

        ranked = sorted(
            users.values(),
            key=lambda u: (-calculate_points(stats[u.id]), u.id),
        )[:TOP_CONTRIBUTORS_LIMIT]

        return [
            schemas.TopContributor(
                id=user.id,
                name=user.name,
                username=user.username,
                avatar=user.avatar,
                points=calculate_points(stats[user.id]),
                stats=schemas.UserStats(**stats[user.id]),
            )
            for user in ranked
        ]

    @staticmethod
    def follow(
        db: Session, follower: db_models.User, username: str
    ) -> schemas.FollowResult:
        """
        Follow another user. Following twice is a no-op.

        Raises:
            UserNotFoundException: Unknown username
            ValidationException: Trying to follow yourself
        """
        from services.notification_service import NotificationService

        followed = UserService.get_by_username(db, username)
        if followed.id == follower.id:
            raise ValidationException("You cannot follow yourself")

        follow_repo = FollowRepository(db)
        created = False
        if follow_repo.get(follower.id, followed.id) is None:
            try:
                follow_repo.create(
                    db_models.UserFollow(
                        follower_id=follower.id, followed_id=followed.id
                    )
                )
                created = True
            except IntegrityError:
                # Concurrent follow of the same pair
                follow_repo.rollback()

        if created:
            logger.info(f"User {follower.id} followed user {followed.id}")
            NotificationService.notify_follower(db, followed, follower)

        return schemas.FollowResult(
            following=True, followers=follow_repo.count_followers(followed.id)
        )

    @staticmethod
    def unfollow(
        db: Session, follower: db_models.User, username: str
    ) -> schemas.FollowResult:
        """
        Stop following a user. Unfollowing someone not followed is a no-op.

        Raises:
            UserNotFoundException: Unknown username
        """
        followed = UserService.get_by_username(db, username)
        follow_repo = FollowRepository(db)

        existing = follow_repo.get(follower.id, followed.id)
        if existing is not None:
            follow_repo.delete(existing)

        return schemas.FollowResult(
            following=False, followers=follow_repo.count_followers(followed.id)
        )
