from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from repositories.post_repository import PostSortOrder
from services.comment_like_service import CommentLikeService
from services.comment_service import CommentService
from services.post_service import PostService
from services.vote_service import VoteService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[schemas.PostWithDetails])
def list_posts(
    sort: PostSortOrder = Query(PostSortOrder.VOTES),
    category: Optional[db_models.PostCategory] = Query(None),
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
):
    """
    Get the post feed.

    - sort: votes (default), new or trending
    - category: optional category filter
    """
    return PostService.list_posts(
        db,
        sort=sort,
        category=category,
        current_user_id=current_user.id if current_user else None,
    )


@router.post(
    "", response_model=schemas.ApiResponse[schemas.Post], status_code=201
)
def create_post(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Create a post (multipart form, optional ``image``)."""
    post = PostService.create_post(
        db,
        author=current_user,
        title=title,
        description=description,
        category=category,
        image=image,
    )
    return schemas.ApiResponse[schemas.Post](data=post)


@router.get("/{post_id}", response_model=schemas.PostWithDetails)
def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
):
    return PostService.get_post(
        db, post_id, current_user_id=current_user.id if current_user else None
    )


@router.post("/{post_id}/vote", response_model=schemas.ApiResponse[schemas.VoteResult])
def vote_on_post(
    post_id: int,
    vote: schemas.VoteRequest,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """
    Vote on a post.

    - direction: 1 (up), -1 (down) or 0 (remove vote)
    """
    votes = VoteService.vote_on_post(db, post_id, current_user, vote.direction)
    return schemas.ApiResponse[schemas.VoteResult](data=schemas.VoteResult(votes=votes))


@router.post(
    "/{post_id}/like", response_model=schemas.ApiResponse[schemas.PostLikeResult]
)
def like_post(
    post_id: int,
    like: Optional[schemas.LikeRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Set (``liked`` true/false) or toggle (no body) the like on a post."""
    result = PostService.set_like(
        db, post_id, current_user.id, like.liked if like else None
    )
    return schemas.ApiResponse[schemas.PostLikeResult](data=result)


@router.post(
    "/{post_id}/share", response_model=schemas.ApiResponse[schemas.ShareResult]
)
def share_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    shares = PostService.share_post(db, post_id)
    return schemas.ApiResponse[schemas.ShareResult](
        data=schemas.ShareResult(shares=shares)
    )


@router.post(
    "/{post_id}/comments",
    response_model=schemas.ApiResponse[schemas.Comment],
    status_code=201,
)
def add_comment(
    post_id: int,
    comment: schemas.CommentCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    created = CommentService.create_comment(db, post_id, current_user, comment.content)
    return schemas.ApiResponse[schemas.Comment](data=created)


@router.post(
    "/{post_id}/comments/{comment_id}/like",
    response_model=schemas.ApiResponse[schemas.CommentLikeResult],
)
def like_comment(
    post_id: int,
    comment_id: int,
    like: Optional[schemas.LikeRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Set (``liked`` true/false) or toggle (no body) the like on a comment."""
    result = CommentLikeService.set_like(
        db, post_id, comment_id, current_user.id, like.liked if like else None
    )
    return schemas.ApiResponse[schemas.CommentLikeResult](data=result)
