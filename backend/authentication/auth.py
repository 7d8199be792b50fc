from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    InsufficientPermissionsException,
    InvalidTokenException,
    MissingTokenException,
    TokenExpiredException,
    AuthenticationException,
)
from repositories.database import get_db

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def _create_token(
    user_id: int, token_type: str, secret: str, expires_delta: timedelta
) -> str:
    to_encode = {
        "sub": str(user_id),
        "type": token_type,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        user_id,
        ACCESS_TOKEN_TYPE,
        settings.SECRET_KEY,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(
    user_id: int, expires_delta: Optional[timedelta] = None
) -> str:
    return _create_token(
        user_id,
        REFRESH_TOKEN_TYPE,
        settings.REFRESH_TOKEN_SECRET,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, secret: str, expected_type: str) -> int:
    """
    Verify a signed token and return the user ID it was issued for.

    Raises:
        TokenExpiredException: If the signature has expired (after leeway).
        InvalidTokenException: If the token is malformed, has the wrong
            ``type`` claim or no usable subject.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.ALGORITHM],
            leeway=settings.TOKEN_CLOCK_TOLERANCE_SECONDS,
        )
    except jwt.exceptions.ExpiredSignatureError:
        raise TokenExpiredException()
    except jwt.exceptions.InvalidTokenError:
        raise InvalidTokenException()

    if payload.get("type") != expected_type:
        raise InvalidTokenException()

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise InvalidTokenException()


def decode_access_token(token: str) -> int:
    return decode_token(token, settings.SECRET_KEY, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> int:
    return decode_token(token, settings.REFRESH_TOKEN_SECRET, REFRESH_TOKEN_TYPE)


def authenticate_user(db: Session, email: str, password: str) -> db_models.User | None:
    user = (
        db.query(db_models.User)
        .filter(db_models.User.email == email.strip().lower())
        .first()
    )
    if not user:
        return None
    if not verify_password(password, str(user.hashed_password)):
        return None
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> db_models.User:
    """
    Get the current authenticated user from the bearer token.

    Raises:
        MissingTokenException: No Authorization header.
        TokenExpiredException: Token signature expired.
        InvalidTokenException: Token malformed or not an access token.
        AuthenticationException: Token subject no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenException()

    user_id = decode_access_token(credentials.credentials)

    user = db.get(db_models.User, user_id)
    if user is None:
        raise AuthenticationException("User not found", error_code="user_not_found")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[db_models.User]:
    """
    Get current user if authenticated, otherwise return None.

    If no credentials are provided, returns None (anonymous access).
    If credentials are provided but expired, raises TokenExpiredException
    so the user knows to re-login (returns 401).
    If credentials are malformed or invalid, returns None.
    """
    if credentials is None:
        return None

    try:
        user_id = decode_access_token(credentials.credentials)
    except InvalidTokenException:
        return None

    return db.get(db_models.User, user_id)


async def get_admin_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Require admin permissions.

    Raises:
        InsufficientPermissionsException: If user is not an admin.
    """
    if not bool(current_user.is_admin):
        raise InsufficientPermissionsException("Access denied. Admin only.")
    return current_user
