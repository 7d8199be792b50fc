"""Tests for VoteService."""

import pytest

import repositories.db_models as db_models
from models.exceptions import InvalidVoteDirectionException, PostNotFoundException
from models.notification_types import NotificationType
from repositories.vote_repository import VoteRepository
from services.vote_service import VoteService


class TestVoteService:
    """Test cases for vote operations."""

    def test_upvote_returns_new_total(self, db_session, test_post, other_user):
        votes = VoteService.vote_on_post(db_session, test_post.id, other_user, 1)
        assert votes == 1

    def test_repeating_a_vote_is_idempotent(self, db_session, test_post, other_user):
        VoteService.vote_on_post(db_session, test_post.id, other_user, 1)
        votes = VoteService.vote_on_post(db_session, test_post.id, other_user, 1)
        assert votes == 1

    def test_switching_direction_moves_by_two(self, db_session, test_post, other_user):
        VoteService.vote_on_post(db_session, test_post.id, other_user, 1)
        votes = VoteService.vote_on_post(db_session, test_post.id, other_user, -1)
        assert votes == -1

    def test_zero_clears_vote(self, db_session, test_post, other_user):
        VoteService.vote_on_post(db_session, test_post.id, other_user, -1)
        votes = VoteService.vote_on_post(db_session, test_post.id, other_user, 0)
        assert votes == 0

    def test_total_equals_sum_of_user_votes(
        self, db_session, test_post, test_user, other_user, user_factory
    ):
        third = user_factory("Third User", "thirduser", "third@example.com")
        sequence = [
            (test_user, 1),
            (other_user, -1),
            (third, 1),
            (other_user, 1),
            (test_user, 0),
            (third, -1),
            (other_user, 1),
        ]
        for voter, direction in sequence:
            votes = VoteService.vote_on_post(db_session, test_post.id, voter, direction)

        assert votes == VoteRepository(db_session).sum_for_post(test_post.id)
        assert votes == 0

    @pytest.mark.parametrize("direction", [2, -2, 5])
    def test_invalid_direction(self, db_session, test_post, other_user, direction):
        with pytest.raises(InvalidVoteDirectionException):
            VoteService.vote_on_post(db_session, test_post.id, other_user, direction)

    def test_invalid_direction_checked_before_post_lookup(self, db_session, other_user):
        with pytest.raises(InvalidVoteDirectionException):
            VoteService.vote_on_post(db_session, 99999, other_user, 3)

    def test_nonexistent_post(self, db_session, other_user):
        with pytest.raises(PostNotFoundException):
            VoteService.vote_on_post(db_session, 99999, other_user, 1)


class TestVoteNotifications:
    """Upvotes notify the post author, except on their own post."""

    def _notifications(self, db_session, user_id):
        return (
            db_session.query(db_models.Notification)
            .filter(db_models.Notification.recipient_id == user_id)
            .all()
        )

    def test_upvote_notifies_author(self, db_session, test_post, test_user, other_user):
        VoteService.vote_on_post(db_session, test_post.id, other_user, 1)

        notifications = self._notifications(db_session, test_user.id)
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.VOTE
        assert notifications[0].sender_id == other_user.id
        assert notifications[0].url == f"/post/{test_post.id}"

    def test_downvote_does_not_notify(self, db_session, test_post, test_user, other_user):
        VoteService.vote_on_post(db_session, test_post.id, other_user, -1)
        assert self._notifications(db_session, test_user.id) == []

    def test_own_vote_does_not_notify(self, db_session, test_post, test_user):
        VoteService.vote_on_post(db_session, test_post.id, test_user, 1)
        assert self._notifications(db_session, test_user.id) == []
