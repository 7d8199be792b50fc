"""
Vote service for business logic.
"""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import InvalidVoteDirectionException
from repositories.post_repository import PostRepository
from repositories.vote_repository import VoteRepository
from services.post_service import PostService

VALID_DIRECTIONS = (-1, 0, 1)


class VoteService:
    """Service for vote-related business logic."""

    @staticmethod
    def _apply_vote(db: Session, post_id: int, user_id: int, direction: int) -> None:
        vote_repo = VoteRepository(db)
        post_repo = PostRepository(db)

        existing = vote_repo.get_by_post_and_user(post_id, user_id)
        previous = existing.vote if existing else 0

        if existing:
            existing.vote = direction
        else:
            vote_repo.add(
                db_models.PostVote(post_id=post_id, user_id=user_id, vote=direction)
            )
        vote_repo.flush()

        # The aggregate moves by the difference so it always equals the sum
        # of the stored per-user votes
        post_repo.increment(post_id, votes=direction - previous)
        post_repo.commit()

    @staticmethod
    def vote_on_post(
        db: Session, post_id: int, voter: db_models.User, direction: int
    ) -> int:
        """
        Record a user's vote on a post, replacing any earlier vote.

        Args:
            db: Database session
            post_id: Post ID
            voter: Voting user
            direction: 1 (up), -1 (down) or 0 (clear)

        Returns:
            New vote total of the post

        Raises:
            InvalidVoteDirectionException: Direction outside {-1, 0, 1}
            PostNotFoundException: If post not found
        """
        from services.notification_service import NotificationService

        if direction not in VALID_DIRECTIONS:
            raise InvalidVoteDirectionException()

        post = PostService.get_post_or_404(db, post_id)

        try:
            VoteService._apply_vote(db, post_id, voter.id, direction)
        except IntegrityError:
            # First vote raced with another first vote from the same user;
            # the row exists now so the retry takes the update path
            db.rollback()
            logger.warning(f"Retrying vote of user {voter.id} on post {post_id}")
            VoteService._apply_vote(db, post_id, voter.id, direction)

        votes = PostRepository(db).get_counter(post_id, "votes")

        if direction > 0:
            NotificationService.notify_vote(db, post, voter)

        return votes
