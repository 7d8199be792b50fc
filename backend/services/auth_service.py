"""
Authentication Service

Handles registration, login and token management. The access token is
returned in the response body; the refresh token only ever travels in an
HttpOnly cookie.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from fastapi import Response
from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from authentication.auth import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_password_hash,
)
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InvalidCredentialsException,
    UserAlreadyExistsException,
)
from repositories.user_repository import UserRepository

USERNAME_STRIP_PATTERN = re.compile(r"[^a-z0-9]")


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    """Set the refresh token cookie with secure attributes."""
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,  # HTTPS only in prod
        samesite="strict",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _authenticated(user: db_models.User, token: str) -> schemas.AuthenticatedUser:
    return schemas.AuthenticatedUser.model_validate(
        {**schemas.User.model_validate(user).model_dump(), "token": token}
    )


class AuthService:
    """Service for authentication business logic."""

    @staticmethod
    def generate_username(db: Session, name: str) -> str:
        """
        Derive a unique username from a display name.

        The base is the lowercased name with everything but ``[a-z0-9]``
        removed ("user" if nothing is left). On collision a counter starting
        at 1 is appended: ``jane``, ``jane1``, ``jane2``...
        """
        user_repo = UserRepository(db)
        base = USERNAME_STRIP_PATTERN.sub("", name.lower()) or "user"

        username = base
        counter = 1
        while user_repo.username_exists(username):
            username = f"{base}{counter}"
            counter += 1
        return username

    @staticmethod
    def register(
        db: Session, data: schemas.RegisterRequest
    ) -> tuple[schemas.AuthenticatedUser, str]:
        """
        Create a new account.

        Args:
            db: Database session
            data: Validated registration payload

        Returns:
            Tuple of (user with access token, refresh token)

        Raises:
            UserAlreadyExistsException: If the email is already registered
        """
        user_repo = UserRepository(db)
        if user_repo.email_exists(data.email):
            raise UserAlreadyExistsException()

        user = db_models.User(
            name=data.name,
            email=data.email,
            username=AuthService.generate_username(db, data.name),
            hashed_password=get_password_hash(data.password),
        )
        user = user_repo.create(user)
        logger.info(f"Registered user {user.id} as @{user.username}")

        return (
            _authenticated(user, create_access_token(user.id)),
            create_refresh_token(user.id),
        )

    @staticmethod
    def login(
        db: Session, email: str, password: str
    ) -> tuple[schemas.AuthenticatedUser, str]:
        """
        Authenticate a user and issue both tokens.

        Raises:
            InvalidCredentialsException: If email or password is incorrect
        """
        user = authenticate_user(db, email, password)
        if not user:
            raise InvalidCredentialsException()

        user.last_active = datetime.now(timezone.utc)
        UserRepository(db).update(user)

        return (
            _authenticated(user, create_access_token(user.id)),
            create_refresh_token(user.id),
        )

    @staticmethod
    def verify(
        db: Session, access_token: Optional[str], refresh_token: Optional[str]
    ) -> schemas.AuthenticatedUser:
        """
        Resolve the session behind a request.

        A valid access token is echoed back. Otherwise a valid refresh cookie
        yields a freshly issued access token.

        Raises:
            AuthenticationException: "Invalid token" when neither verifies
        """
        user_repo = UserRepository(db)

        if access_token:
            try:
                user = user_repo.get_by_id(decode_access_token(access_token))
            except AuthenticationException:
                user = None
            if user is not None:
                return _authenticated(user, access_token)

        if refresh_token:
            try:
                user = user_repo.get_by_id(decode_refresh_token(refresh_token))
            except AuthenticationException:
                user = None
            if user is not None:
                return _authenticated(user, create_access_token(user.id))

        raise AuthenticationException("Invalid token")

    @staticmethod
    def refresh(db: Session, refresh_token: Optional[str]) -> schemas.AuthenticatedUser:
        """
        Issue a new access token from the refresh cookie.

        Raises:
            AuthenticationException: Missing cookie, or cookie that does not
                verify or whose user no longer exists
        """
        if not refresh_token:
            raise AuthenticationException(
                "No refresh token found", error_code="missing_token"
            )

        try:
            user_id = decode_refresh_token(refresh_token)
        except AuthenticationException:
            raise AuthenticationException("Invalid refresh token")

        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise AuthenticationException("Invalid refresh token")

        return _authenticated(user, create_access_token(user.id))
