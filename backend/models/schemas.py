from datetime import datetime
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models.notification_types import NotificationType, RelatedModel
from repositories.db_models import LocationType, PostCategory

T = TypeVar("T")


# Response envelope
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# User Schemas
class UserPublic(BaseModel):
    """Public user fields. The password hash is never part of any schema."""

    id: int
    name: str
    username: str
    bio: str = ""
    avatar: Optional[str] = None
    is_admin: bool = False
    last_active: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class User(UserPublic):
    email: EmailStr


class AuthenticatedUser(User):
    """User payload returned by register/login/verify/refresh."""

    token: str


class VerifyResponse(BaseModel):
    success: bool = True
    user: AuthenticatedUser


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserStats(BaseModel):
    total_posts: int = 0
    total_comments: int = 0
    total_votes: int = 0


class UserProfile(UserPublic):
    """Profile with contribution stats and follow counts."""

    email: Optional[EmailStr] = None  # only set on the caller's own profile
    stats: UserStats
    followers: int = 0
    following: int = 0


class TopContributor(BaseModel):
    id: int
    name: str
    username: str
    avatar: Optional[str] = None
    points: int
    stats: UserStats


class FollowResult(BaseModel):
    following: bool
    followers: int


# Comment Schemas
class CommentCreate(BaseModel):
    content: str


class Comment(BaseModel):
    id: int
    post_id: int
    author_id: Optional[int] = None
    author: str
    content: str
    likes: int = 0
    created_at: datetime
    time_ago: str
    user_liked: bool = False

    model_config = ConfigDict(from_attributes=True)


class CommentLikeResult(BaseModel):
    likes: int
    is_liked: bool


# Post Schemas
class Post(BaseModel):
    id: int
    title: str
    description: str
    category: PostCategory
    author_id: Optional[int] = None
    author: str
    image: Optional[str] = None
    votes: int = 0
    likes: int = 0
    shares: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PostWithDetails(Post):
    """Post as shown in feeds and on the detail page."""

    user_vote: int = 0
    user_liked: bool = False
    time_ago: str
    comments: List[Comment] = []


class VoteRequest(BaseModel):
    direction: int


class VoteResult(BaseModel):
    votes: int


class LikeRequest(BaseModel):
    """
    ``liked=True``/``False`` sets the like state (idempotent); a missing or
    null value flips the current state.
    """

    liked: Optional[bool] = None


class PostLikeResult(BaseModel):
    likes: int
    liked: bool


class ShareResult(BaseModel):
    shares: int


# Topic and Location Schemas
class Topic(BaseModel):
    id: int
    name: str
    slug: str
    description: str = ""
    post_count: int = 0
    follower_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TopicFollowResult(BaseModel):
    following: bool
    follower_count: int


class Location(BaseModel):
    id: int
    name: str
    slug: str
    description: str = ""
    type: LocationType
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    post_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Notification Schemas
class NotificationSender(BaseModel):
    id: int
    name: str
    username: str
    avatar: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Notification(BaseModel):
    id: int
    recipient_id: int
    sender: Optional[NotificationSender] = None
    type: NotificationType
    title: str
    message: str
    read: bool
    related_model: Optional[RelatedModel] = None
    related_id: Optional[int] = None
    url: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationPagination(BaseModel):
    limit: int
    skip: int
    unread_count: int


class NotificationList(BaseModel):
    notifications: List[Notification]
    pagination: NotificationPagination


class NotificationEnvelope(BaseModel):
    notification: Notification


class UnreadCount(BaseModel):
    count: int


class MarkAllReadResult(BaseModel):
    success: bool = True
    count: int


class DeleteResult(BaseModel):
    success: bool = True


class NotificationTestRequest(BaseModel):
    type: str = "other"


# Search Schemas
class IssueSearchResult(BaseModel):
    id: int
    title: str
    description: str
    category: str
    status: str
    author: str
    author_username: str
    posted_at: str
    votes: int
    comments: int


class PersonSearchResult(BaseModel):
    id: int
    name: str
    username: str
    avatar: str
    bio: str
    followers: int


class TopicSearchResult(BaseModel):
    id: Union[int, str]
    name: str
    count: int
    description: str
    is_new_suggestion: Optional[bool] = None
    is_fallback: Optional[bool] = None


class LocationSearchResult(BaseModel):
    id: Union[int, str]
    name: str
    count: int
    type: str
    is_fallback: Optional[bool] = None


class SearchResults(BaseModel):
    issues: List[IssueSearchResult] = []
    people: List[PersonSearchResult] = []
    topics: List[TopicSearchResult] = []
    locations: List[LocationSearchResult] = []


class SearchSuggestion(BaseModel):
    type: str
    text: str
    id: Union[int, str]
    username: Optional[str] = None


# Health
class HealthResponse(BaseModel):
    status: str
    environment: str
    timestamp: str
    database: str
