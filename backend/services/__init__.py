"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .auth_service import AuthService
from .comment_like_service import CommentLikeService
from .comment_service import CommentService
from .notification_service import NotificationService
from .post_service import PostService
from .topic_service import LocationService, TopicService
from .upload_service import UploadKind, UploadService
from .user_service import UserService
from .vote_service import VoteService

__all__ = [
    "AuthService",
    "CommentLikeService",
    "CommentService",
    "LocationService",
    "NotificationService",
    "PostService",
    "TopicService",
    "UploadKind",
    "UploadService",
    "UserService",
    "VoteService",
]
