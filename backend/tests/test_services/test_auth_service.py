"""Tests for AuthService and token helpers."""

from datetime import timedelta

import pytest

import models.schemas as schemas
from authentication.auth import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    verify_password,
)
from models.exceptions import (
    AuthenticationException,
    InvalidCredentialsException,
    InvalidTokenException,
    TokenExpiredException,
    UserAlreadyExistsException,
)
from services.auth_service import AuthService


class TestTokens:
    """Access and refresh tokens are signed with different secrets."""

    def test_access_token_round_trip(self):
        assert decode_access_token(create_access_token(7)) == 7

    def test_refresh_token_round_trip(self):
        assert decode_refresh_token(create_refresh_token(7)) == 7

    def test_tokens_are_not_interchangeable(self):
        with pytest.raises(InvalidTokenException):
            decode_access_token(create_refresh_token(7))
        with pytest.raises(InvalidTokenException):
            decode_refresh_token(create_access_token(7))

    def test_expired_token(self):
        token = create_access_token(7, expires_delta=timedelta(minutes=-5))
        with pytest.raises(TokenExpiredException) as exc_info:
            decode_access_token(token)
        assert exc_info.value.error_code == "token_expired"

    def test_clock_skew_within_tolerance_is_accepted(self):
        token = create_access_token(7, expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) == 7

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenException):
            decode_access_token("not-a-jwt")


class TestGenerateUsername:
    """Usernames derive from the display name with a numeric suffix on collision."""

    def test_strips_non_alphanumerics(self, db_session):
        assert AuthService.generate_username(db_session, "Jane O'Doe-Smith") == (
            "janeodoesmith"
        )

    def test_empty_base_falls_back_to_user(self, db_session):
        assert AuthService.generate_username(db_session, "!!") == "user"

    def test_collisions_get_counter(self, db_session):
        usernames = []
        for i in range(3):
            user, _ = AuthService.register(
                db_session,
                schemas.RegisterRequest(
                    name="Jane Doe", email=f"jane{i}@example.com", password="secret1"
                ),
            )
            usernames.append(user.username)

        assert usernames == ["janedoe", "janedoe1", "janedoe2"]


class TestRegisterAndLogin:
    """Registration and login issue both tokens."""

    def test_register(self, db_session):
        user, refresh = AuthService.register(
            db_session,
            schemas.RegisterRequest(
                name="  Sam Lee ", email="Sam@Example.com", password="secret1"
            ),
        )

        assert user.name == "Sam Lee"
        assert user.email == "sam@example.com"
        assert user.username == "samlee"
        assert decode_access_token(user.token) == user.id
        assert decode_refresh_token(refresh) == user.id

    def test_password_is_hashed(self, db_session):
        from repositories.user_repository import UserRepository

        user, _ = AuthService.register(
            db_session,
            schemas.RegisterRequest(name="Sam", email="sam@example.com", password="secret1"),
        )
        stored = UserRepository(db_session).get_by_id(user.id)
        assert stored.hashed_password != "secret1"
        assert verify_password("secret1", stored.hashed_password)
        assert "hashed_password" not in user.model_dump()

    def test_duplicate_email(self, db_session, test_user):
        with pytest.raises(UserAlreadyExistsException):
            AuthService.register(
                db_session,
                schemas.RegisterRequest(
                    name="Copy Cat", email="TEST@example.com", password="secret1"
                ),
            )

    def test_login(self, db_session, test_user):
        user, refresh = AuthService.login(db_session, "test@example.com", "testpassword123")
        assert user.id == test_user.id
        assert decode_refresh_token(refresh) == test_user.id

    @pytest.mark.parametrize(
        "email, password",
        [("test@example.com", "wrong"), ("nobody@example.com", "testpassword123")],
    )
    def test_login_rejects_bad_credentials(self, db_session, test_user, email, password):
        with pytest.raises(InvalidCredentialsException):
            AuthService.login(db_session, email, password)


class TestVerifyAndRefresh:
    """Session checks from bearer token or refresh cookie."""

    def test_verify_echoes_valid_access_token(self, db_session, test_user):
        token = create_access_token(test_user.id)
        assert AuthService.verify(db_session, token, None).token == token

    def test_verify_falls_back_to_refresh_cookie(self, db_session, test_user):
        expired = create_access_token(test_user.id, expires_delta=timedelta(hours=-1))
        user = AuthService.verify(db_session, expired, create_refresh_token(test_user.id))

        assert user.id == test_user.id
        assert user.token != expired
        assert decode_access_token(user.token) == test_user.id

    def test_verify_without_anything(self, db_session):
        with pytest.raises(AuthenticationException) as exc_info:
            AuthService.verify(db_session, None, None)
        assert exc_info.value.message == "Invalid token"

    def test_refresh_missing_cookie(self, db_session):
        with pytest.raises(AuthenticationException) as exc_info:
            AuthService.refresh(db_session, None)
        assert exc_info.value.error_code == "missing_token"

    def test_refresh_with_access_token_is_rejected(self, db_session, test_user):
        with pytest.raises(AuthenticationException) as exc_info:
            AuthService.refresh(db_session, create_access_token(test_user.id))
        assert exc_info.value.message == "Invalid refresh token"

    def test_refresh_for_deleted_user(self, db_session, test_user):
        token = create_refresh_token(test_user.id)
        db_session.delete(test_user)
        db_session.commit()

        with pytest.raises(AuthenticationException):
            AuthService.refresh(db_session, token)
