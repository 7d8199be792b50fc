from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/top-contributors",
    response_model=schemas.ApiResponse[List[schemas.TopContributor]],
)
def get_top_contributors(db: Session = Depends(get_db)):
    """Top 5 users by points (10 per post, 5 per comment, 2 per vote received)."""
    return schemas.ApiResponse[List[schemas.TopContributor]](
        data=UserService.get_top_contributors(db)
    )


@router.get("/profile", response_model=schemas.ApiResponse[schemas.UserProfile])
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    profile = UserService.build_profile(db, current_user, include_email=True)
    return schemas.ApiResponse[schemas.UserProfile](data=profile)


@router.put("/profile", response_model=schemas.ApiResponse[schemas.UserProfile])
def update_my_profile(
    name: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Update name, bio and avatar (multipart form)."""
    profile = UserService.update_profile(
        db, current_user, name=name, bio=bio, avatar=avatar
    )
    return schemas.ApiResponse[schemas.UserProfile](data=profile)


@router.get(
    "/profile/{username}", response_model=schemas.ApiResponse[schemas.UserProfile]
)
def get_profile_by_username(username: str, db: Session = Depends(get_db)):
    user = UserService.get_by_username(db, username)
    return schemas.ApiResponse[schemas.UserProfile](
        data=UserService.build_profile(db, user)
    )


@router.post(
    "/{username}/follow", response_model=schemas.ApiResponse[schemas.FollowResult]
)
def follow_user(
    username: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    return schemas.ApiResponse[schemas.FollowResult](
        data=UserService.follow(db, current_user, username)
    )


@router.delete(
    "/{username}/follow", response_model=schemas.ApiResponse[schemas.FollowResult]
)
def unfollow_user(
    username: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    return schemas.ApiResponse[schemas.FollowResult](
        data=UserService.unfollow(db, current_user, username)
    )
