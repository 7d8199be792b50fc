"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .comment_like_repository import CommentLikeRepository
from .comment_repository import CommentRepository
from .follow_repository import FollowRepository
from .like_repository import LikeRepository
from .location_repository import LocationRepository
from .notification_repository import NotificationRepository
from .post_like_repository import PostLikeRepository
from .post_repository import PostRepository, PostSortOrder
from .topic_repository import TopicRepository
from .user_repository import UserRepository
from .vote_repository import VoteRepository

__all__ = [
    "BaseRepository",
    "CommentLikeRepository",
    "CommentRepository",
    "FollowRepository",
    "LikeRepository",
    "LocationRepository",
    "NotificationRepository",
    "PostLikeRepository",
    "PostRepository",
    "PostSortOrder",
    "TopicRepository",
    "UserRepository",
    "VoteRepository",
]
