"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Posts keep denormalised aggregate counters (votes, likes, shares,
comment_count). They are only ever changed through atomic SQL increments in
the repositories, in the same transaction as the per-user rows they summarise.
"""

import enum
import re
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from models.notification_types import NotificationType, RelatedModel, RelatedRef
from repositories.database import Base


class PostCategory(str, enum.Enum):
    TRAFFIC = "Traffic"
    ENVIRONMENT = "Environment"
    PUBLIC_SAFETY = "Public Safety"
    SANITATION = "Sanitation"


class LocationType(str, enum.Enum):
    PARK = "Park"
    DISTRICT = "District"
    NEIGHBORHOOD = "Neighborhood"
    STREET = "Street"
    JUNCTION = "Junction"
    AREA = "Area"
    OTHER = "Other"


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def slugify(name: str) -> str:
    """
    Build a URL slug from a display name.

    Lowercases, strips characters that are neither word characters nor
    whitespace, then joins whitespace runs with hyphens.
    """
    slug = re.sub(r"[^\w\s]", "", name.lower())
    return re.sub(r"\s+", "-", slug.strip())


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    username: Mapped[str] = mapped_column(
        String(60), unique=True, index=True, nullable=False
    )
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    bio: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_active: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    # Relationships
    posts: Mapped[List["Post"]] = relationship("Post", back_populates="author")
    comments: Mapped[List["Comment"]] = relationship("Comment", back_populates="author")

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_votes", "votes"),
        Index("ix_posts_created_at", "created_at"),
        Index("ix_posts_category", "category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[PostCategory] = mapped_column(
        Enum(PostCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    author_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    votes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    shares: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    # Relationships
    author: Mapped[Optional["User"]] = relationship("User", back_populates="posts")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )
    user_votes: Mapped[List["PostVote"]] = relationship(
        "PostVote", back_populates="post", cascade="all, delete-orphan"
    )
    user_likes: Mapped[List["PostLike"]] = relationship(
        "PostLike", back_populates="post", cascade="all, delete-orphan"
    )


class PostVote(Base):
    """Latest vote of one user on one post."""

    __tablename__ = "post_votes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_vote_post_user"),
        CheckConstraint("vote IN (-1, 0, 1)", name="ck_post_vote_direction"),
        Index("ix_post_votes_post", "post_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    vote: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    post: Mapped["Post"] = relationship("Post", back_populates="user_votes")


class PostLike(Base):
    """Membership of a user in a post's like set."""

    __tablename__ = "post_likes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_like_post_user"),
        Index("ix_post_likes_post", "post_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    post: Mapped["Post"] = relationship("Post", back_populates="user_likes")


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_post", "post_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    post: Mapped["Post"] = relationship("Post", back_populates="comments")
    author: Mapped[Optional["User"]] = relationship("User", back_populates="comments")
    user_likes: Mapped[List["CommentLike"]] = relationship(
        "CommentLike", back_populates="comment", cascade="all, delete-orphan"
    )


class CommentLike(Base):
    """Tracks user likes on comments."""

    __tablename__ = "comment_likes"
    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_comment_like_comment_user"),
        Index("ix_comment_likes_comment", "comment_id"),
        Index("ix_comment_likes_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    comment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    comment: Mapped["Comment"] = relationship("Comment", back_populates="user_likes")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_read_created", "recipient_id", "read", "created_at"),
        CheckConstraint(
            "(related_model IS NULL AND related_id IS NULL) "
            "OR (related_model IS NOT NULL AND related_id IS NOT NULL)",
            name="ck_notification_related_ref",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    recipient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    related_model: Mapped[Optional[RelatedModel]] = mapped_column(
        Enum(RelatedModel, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    related_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    recipient: Mapped["User"] = relationship("User", foreign_keys=[recipient_id])
    sender: Mapped[Optional["User"]] = relationship("User", foreign_keys=[sender_id])

    @property
    def related(self) -> RelatedRef | None:
        return RelatedRef.from_columns(self.related_model, self.related_id)

    @related.setter
    def related(self, ref: RelatedRef | None) -> None:
        if ref is None:
            self.related_model = None
            self.related_id = None
        else:
            self.related_model = ref.model
            self.related_id = ref.id


class TopicFollower(Base):
    __tablename__ = "topic_followers"
    __table_args__ = (
        UniqueConstraint("topic_id", "user_id", name="uq_topic_follower_topic_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    topic_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    post_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    follower_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    @validates("name")
    def _sync_slug(self, key: str, value: str) -> str:
        value = value.strip()
        self.slug = slugify(value)
        return value


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    type: Mapped[LocationType] = mapped_column(
        Enum(LocationType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    post_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    @validates("name")
    def _sync_slug(self, key: str, value: str) -> str:
        value = value.strip()
        self.slug = slugify(value)
        return value


class UserFollow(Base):
    __tablename__ = "user_follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "followed_id", name="uq_user_follow_pair"),
        CheckConstraint("follower_id <> followed_id", name="ck_user_follow_not_self"),
        Index("ix_user_follows_followed", "followed_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    follower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    followed_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
