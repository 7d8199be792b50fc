"""Authentication router endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.rate_limiter import limiter
from models.config import settings
from repositories.database import get_db
from services.auth_service import (
    AuthService,
    clear_refresh_cookie,
    set_refresh_cookie,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=schemas.ApiResponse[schemas.AuthenticatedUser],
    status_code=201,
)
@limiter.limit("5/minute")
def register(
    request: Request,
    response: Response,
    data: schemas.RegisterRequest,
    db: Session = Depends(get_db),
) -> schemas.ApiResponse[schemas.AuthenticatedUser]:
    """
    Register a new user.

    The username is derived from the name. Rate limited to 5 per minute.
    """
    user, refresh_token = AuthService.register(db, data)
    set_refresh_cookie(response, refresh_token)
    return schemas.ApiResponse[schemas.AuthenticatedUser](data=user)


@router.post("/login", response_model=schemas.ApiResponse[schemas.AuthenticatedUser])
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    data: schemas.LoginRequest,
    db: Session = Depends(get_db),
) -> schemas.ApiResponse[schemas.AuthenticatedUser]:
    """
    Login user. Rate limited to 10 per minute.

    Domain exceptions are caught by centralized exception handlers.
    """
    user, refresh_token = AuthService.login(db, data.email, data.password)
    set_refresh_cookie(response, refresh_token)
    return schemas.ApiResponse[schemas.AuthenticatedUser](data=user)


@router.get("/verify", response_model=schemas.VerifyResponse)
def verify(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        auth.bearer_scheme
    ),
    db: Session = Depends(get_db),
) -> schemas.VerifyResponse:
    """
    Check the current session.

    Falls back to the refresh cookie when the bearer token is missing,
    invalid or expired, returning a fresh access token in that case.
    """
    user = AuthService.verify(
        db,
        access_token=credentials.credentials if credentials else None,
        refresh_token=request.cookies.get(settings.REFRESH_COOKIE_NAME),
    )
    return schemas.VerifyResponse(user=user)


@router.post("/refresh", response_model=schemas.ApiResponse[schemas.AuthenticatedUser])
def refresh_token(
    request: Request, db: Session = Depends(get_db)
) -> schemas.ApiResponse[schemas.AuthenticatedUser]:
    """Issue a new access token from the refresh cookie."""
    user = AuthService.refresh(db, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    return schemas.ApiResponse[schemas.AuthenticatedUser](data=user)


@router.post("/logout", response_model=schemas.MessageResponse)
def logout(response: Response) -> schemas.MessageResponse:
    """Clear the refresh cookie."""
    clear_refresh_cookie(response)
    return schemas.MessageResponse(message="Logged out successfully")
