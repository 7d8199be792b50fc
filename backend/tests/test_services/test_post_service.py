"""Tests for PostService."""

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

import repositories.db_models as db_models
from models.exceptions import (
    InvalidUploadException,
    PostNotFoundException,
    ValidationException,
)
from models.config import settings
from repositories.post_like_repository import PostLikeRepository
from services.post_service import PostService


def make_upload(filename: str, content: bytes, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestValidatePostFields:
    """Field validation for new posts."""

    def test_valid_fields(self):
        title, description, category = PostService.validate_post_fields(
            "  <b>Broken</b> bench ", "The bench in the square is broken.", "Public Safety"
        )
        assert title == "Broken bench"
        assert category == db_models.PostCategory.PUBLIC_SAFETY

    @pytest.mark.parametrize(
        "title, description, category, message",
        [
            (None, "Long enough description", "Traffic", "Title is required"),
            ("ab", "Long enough description", "Traffic", "Title must be between 3 and 200 characters"),
            ("x" * 201, "Long enough description", "Traffic", "Title must be between 3 and 200 characters"),
            ("Valid title", "   ", "Traffic", "Description is required"),
            ("Valid title", "too short", "Traffic", "Description must be at least 10 characters"),
            ("Valid title", "Long enough description", "Weather", "Category must be one of"),
            ("Valid title", "Long enough description", None, "Category must be one of"),
        ],
    )
    def test_invalid_fields(self, title, description, category, message):
        with pytest.raises(ValidationException) as exc_info:
            PostService.validate_post_fields(title, description, category)
        assert exc_info.value.message.startswith(message)


class TestCreatePost:
    """Creating posts with and without images."""

    def test_create_without_image(self, db_session, test_user, upload_dir):
        post = PostService.create_post(
            db_session,
            author=test_user,
            title="Flooded underpass",
            description="The underpass floods every time it rains.",
            category="Environment",
        )

        assert post.id is not None
        assert post.author == "Test User"
        assert post.image is None
        assert post.votes == post.likes == post.shares == post.comment_count == 0

    def test_create_with_image_stores_file(self, db_session, test_user, upload_dir):
        post = PostService.create_post(
            db_session,
            author=test_user,
            title="Graffiti on the library",
            description="Fresh graffiti covers the library entrance.",
            category="Sanitation",
            image=make_upload("wall.PNG", b"\x89PNG fake", "image/png"),
        )

        assert post.image.startswith("/uploads/")
        assert post.image.endswith(".png")
        stored = upload_dir / post.image.rsplit("/", 1)[1]
        assert stored.read_bytes() == b"\x89PNG fake"

    def test_rejected_image_leaves_no_post_and_no_file(
        self, db_session, test_user, upload_dir
    ):
        with pytest.raises(InvalidUploadException) as exc_info:
            PostService.create_post(
                db_session,
                author=test_user,
                title="Graffiti on the library",
                description="Fresh graffiti covers the library entrance.",
                category="Sanitation",
                image=make_upload("notes.txt", b"hello", "text/plain"),
            )

        assert exc_info.value.message == (
            "Only image files (jpeg, jpg, png, gif) are allowed!"
        )
        assert db_session.query(db_models.Post).count() == 0
        assert list(upload_dir.iterdir()) == []

    def test_oversize_image_rejected(self, db_session, test_user, upload_dir, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_BYTES", 10)

        with pytest.raises(InvalidUploadException) as exc_info:
            PostService.create_post(
                db_session,
                author=test_user,
                title="Graffiti on the library",
                description="Fresh graffiti covers the library entrance.",
                category="Sanitation",
                image=make_upload("wall.jpg", b"x" * 11, "image/jpeg"),
            )

        assert exc_info.value.message == "File upload error: File too large"
        assert db_session.query(db_models.Post).count() == 0

    def test_invalid_fields_store_nothing(self, db_session, test_user, upload_dir):
        with pytest.raises(ValidationException):
            PostService.create_post(
                db_session,
                author=test_user,
                title="No",
                description="Fresh graffiti covers the library entrance.",
                category="Sanitation",
                image=make_upload("wall.jpg", b"jpeg", "image/jpeg"),
            )

        assert list(upload_dir.iterdir()) == []

    def test_failed_insert_removes_stored_file(
        self, db_session, test_user, upload_dir, monkeypatch
    ):
        from repositories.post_repository import PostRepository

        def fail(self, entity):
            raise RuntimeError("insert failed")

        monkeypatch.setattr(PostRepository, "create", fail)

        with pytest.raises(RuntimeError):
            PostService.create_post(
                db_session,
                author=test_user,
                title="Graffiti on the library",
                description="Fresh graffiti covers the library entrance.",
                category="Sanitation",
                image=make_upload("wall.gif", b"GIF89a", "image/gif"),
            )

        assert list(upload_dir.iterdir()) == []


class TestGetPost:
    """Reading posts with viewer state."""

    def test_get_post_with_viewer_state(
        self, db_session, test_post, test_comment, other_user
    ):
        PostService.set_like(db_session, test_post.id, other_user.id, True)

        post = PostService.get_post(db_session, test_post.id, other_user.id)

        assert post.user_liked is True
        assert post.user_vote == 0
        assert post.comment_count == 1
        assert post.comments[0].author == "Other User"
        assert post.time_ago.endswith("ago")

    def test_anonymous_viewer(self, db_session, test_post):
        post = PostService.get_post(db_session, test_post.id)
        assert post.user_liked is False
        assert post.user_vote == 0

    def test_missing_post(self, db_session):
        with pytest.raises(PostNotFoundException):
            PostService.get_post(db_session, 12345)

    def test_deleted_author_shows_anonymous(self, db_session, test_post, test_user):
        db_session.delete(test_user)
        db_session.commit()
        db_session.expire_all()

        assert PostService.get_post(db_session, test_post.id).author == "Anonymous"


class TestLikesAndShares:
    """Post likes follow the set/toggle contract; shares only grow."""

    def test_toggle_without_target(self, db_session, test_post, other_user):
        first = PostService.set_like(db_session, test_post.id, other_user.id)
        second = PostService.set_like(db_session, test_post.id, other_user.id)

        assert (first.likes, first.liked) == (1, True)
        assert (second.likes, second.liked) == (0, False)

    def test_explicit_target_is_idempotent(self, db_session, test_post, other_user):
        PostService.set_like(db_session, test_post.id, other_user.id, True)
        again = PostService.set_like(db_session, test_post.id, other_user.id, True)

        assert (again.likes, again.liked) == (1, True)
        assert PostLikeRepository(db_session).count_for_post(test_post.id) == 1

    def test_unlike_when_not_liked_is_noop(self, db_session, test_post, other_user):
        result = PostService.set_like(db_session, test_post.id, other_user.id, False)
        assert (result.likes, result.liked) == (0, False)

    def test_likes_equal_like_rows(self, db_session, test_post, test_user, other_user):
        PostService.set_like(db_session, test_post.id, test_user.id)
        PostService.set_like(db_session, test_post.id, other_user.id)
        result = PostService.set_like(db_session, test_post.id, test_user.id)

        assert result.likes == PostLikeRepository(db_session).count_for_post(
            test_post.id
        )
        assert result.likes == 1

    def test_like_missing_post(self, db_session, other_user):
        with pytest.raises(PostNotFoundException):
            PostService.set_like(db_session, 4242, other_user.id)

    def test_share_increments(self, db_session, test_post):
        assert PostService.share_post(db_session, test_post.id) == 1
        assert PostService.share_post(db_session, test_post.id) == 2

    def test_share_missing_post(self, db_session):
        with pytest.raises(PostNotFoundException):
            PostService.share_post(db_session, 4242)
