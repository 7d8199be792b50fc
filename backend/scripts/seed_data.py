#!/usr/bin/env python3
# ruff: noqa: E402
# E402 disabled: sys.path modification must occur before imports
"""
Seed the database with sample civic issues.

Creates a handful of test users, five sample posts with votes, likes and
comments, and the default topics and locations. Aggregate counters are
derived from the rows created here, so they stay consistent with the
per-user vote and like tables.

Usage in Docker:
    docker compose exec backend python scripts/seed_data.py

Usage locally:
    cd backend && uv run python scripts/seed_data.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from sqlalchemy.orm import Session

from authentication.auth import get_password_hash
from init_db import seed_topics_and_locations
from models.config import settings
from repositories.database import DatabaseHandle
from repositories.db_models import (
    Comment,
    CommentLike,
    Post,
    PostCategory,
    PostLike,
    PostVote,
    User,
)

TEST_PASSWORD = "password123"

TEST_USERS = [
    ("test@example.com", "testuser", "Test User"),
    ("alice@example.com", "alice", "Alice Martin"),
    ("bob@example.com", "bob", "Bob Tremblay"),
    ("claire@example.com", "claire", "Claire Gagnon"),
]

# (title, description, category, image, upvoters, likers, shares)
SAMPLE_POSTS = [
    (
        "Traffic Light Malfunction at Main Street",
        "The traffic light at the intersection has been malfunctioning for the past 2 days, causing significant delays.",
        PostCategory.TRAFFIC,
        "https://images.unsplash.com/photo-1597176116047-876a32798fcc",
        4,
        3,
        12,
    ),
    (
        "Park Cleanup Initiative",
        "Organizing a community cleanup event at Central Park this weekend. Looking for volunteers!",
        PostCategory.ENVIRONMENT,
        "https://images.unsplash.com/photo-1618477461853-cf6ed80faba5",
        3,
        2,
        8,
    ),
    (
        "Street Light Outage in Residential Area",
        "Multiple street lights are out on Oak Avenue, creating safety concerns for residents.",
        PostCategory.PUBLIC_SAFETY,
        None,
        2,
        2,
        5,
    ),
    (
        "Waste Collection Delay Notice",
        "Due to maintenance issues, waste collection in the downtown area will be delayed by one day this week.",
        PostCategory.SANITATION,
        None,
        1,
        1,
        3,
    ),
    (
        "New Bike Lane Construction",
        "Construction of dedicated bike lanes on Maple Street will begin next week. Please expect minor traffic adjustments.",
        PostCategory.TRAFFIC,
        "https://images.unsplash.com/photo-1517649763962-0c623066013b",
        4,
        4,
        15,
    ),
]

SAMPLE_COMMENTS = [
    "This needs immediate attention!",
    "I noticed this issue too. Very concerning.",
    "The authorities should look into this.",
]


def check_existing_data(db: Session) -> bool:
    """Check if database already has posts."""
    return db.query(Post).count() > 0


def get_or_create_users(db: Session) -> list[User]:
    users = []
    for email, username, name in TEST_USERS:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            user = User(
                email=email,
                username=username,
                name=name,
                hashed_password=get_password_hash(TEST_PASSWORD),
            )
            db.add(user)
        users.append(user)
    db.flush()
    return users


def seed_posts(db: Session, users: list[User]) -> tuple[int, int]:
    """Create the sample posts; returns (posts, comments) created."""
    comment_count = 0
    for index, (title, description, category, image, upvoters, likers, shares) in enumerate(
        SAMPLE_POSTS
    ):
        author = users[index % len(users)]
        comments = [
            Comment(author_id=users[(index + offset) % len(users)].id, content=content)
            for offset, content in enumerate(SAMPLE_COMMENTS[: index % 3 + 1])
        ]
        post = Post(
            title=title,
            description=description,
            category=category,
            image=image,
            author_id=author.id,
            votes=upvoters,
            likes=likers,
            shares=shares,
            comment_count=len(comments),
            comments=comments,
        )
        db.add(post)
        db.flush()

        for voter in users[:upvoters]:
            db.add(PostVote(post_id=post.id, user_id=voter.id, vote=1))
        for liker in users[:likers]:
            db.add(PostLike(post_id=post.id, user_id=liker.id))

        # The first user likes every comment
        for comment in comments:
            comment.likes = 1
            db.add(CommentLike(comment_id=comment.id, user_id=users[0].id))

        comment_count += len(comments)

    return len(SAMPLE_POSTS), comment_count


def seed_sample_data(store: DatabaseHandle | None = None) -> None:
    """Seed database with sample users, posts and comments."""
    store = store or DatabaseHandle.connect(settings.DATABASE_URL)
    store.create_schema()
    db = store.session()

    try:
        print("=" * 60)
        print("Seeding database with sample civic issues")
        print("=" * 60)

        if check_existing_data(db):
            print("\nDatabase already has posts, skipping seed.")
            return

        print("\nCreating test users...")
        users = get_or_create_users(db)
        print(f"  Created/found {len(users)} test users")

        print("\nCreating sample posts...")
        post_count, comment_count = seed_posts(db, users)
        db.commit()
        print(f"  Created {post_count} posts and {comment_count} comments")

        print("\nCreating topics and locations...")
        seed_topics_and_locations(db)

        print("\n" + "=" * 60)
        print("Seed complete!")
        print("=" * 60)
        print("\nTest user credentials:")
        print(f"  Email: {TEST_USERS[0][0]}")
        print(f"  Password: {TEST_PASSWORD}")
        print("=" * 60)

    except Exception as e:
        print(f"\nError seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_sample_data()
