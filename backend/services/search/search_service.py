"""
Search service - aggregated search across issues, people, topics and locations.

Each category is queried concurrently on a thread pool. Every task opens its
own session from the session factory (sessions are not thread-safe) and runs
inside a copy of the request context so its logs keep the correlation ID.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, List, TypeVar
from urllib.parse import quote

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

import models.schemas as schemas
from core.correlation import in_current_context
from helpers.time_utils import format_relative_time
from models.config import get_settings
from models.exceptions import ValidationException
from repositories.follow_repository import FollowRepository
from repositories.location_repository import LocationRepository
from repositories.post_repository import PostRepository
from repositories.topic_repository import TopicRepository
from repositories.user_repository import UserRepository

from .fallbacks import (
    fallback_location_suggestion,
    fallback_locations,
    fallback_topic_suggestion,
    fallback_topics,
    new_topic_suggestion,
)

R = TypeVar("R")

SINGLE_TYPE_LIMIT = 20
ALL_TYPES_LIMIT = 5
SUGGESTION_LIMIT = 2
# Topic and location suggestions only kick in for queries longer than this
SUGGESTION_MIN_QUERY_LENGTH = 2


class SearchType(str, Enum):
    ALL = "all"
    ISSUES = "issues"
    PEOPLE = "people"
    TOPICS = "topics"
    LOCATIONS = "locations"


def issue_status(votes: int) -> str:
    """Display status derived from a post's vote total."""
    if votes >= 50:
        return "In Progress"
    if votes >= 10:
        return "Under Review"
    return "Open"


def default_avatar(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name, safe='')}&background=random"


class SearchService:
    """
    Aggregated search.

    Follows the static method pattern for consistency with other services,
    but takes a session factory instead of a session because each category
    runs on its own thread.
    """

    # Category searches: (db, term, limit, single_type) -> results

    @staticmethod
    def search_issues(
        db: Session, term: str, limit: int, single_type: bool = False
    ) -> List[schemas.IssueSearchResult]:
        return [
            schemas.IssueSearchResult(
                id=post.id,
                title=post.title,
                description=post.description,
                category=post.category.value,
                status=issue_status(post.votes),
                author=post.author.name if post.author else "Unknown",
                author_username=post.author.username if post.author else "unknown",
                posted_at=format_relative_time(post.created_at),
                votes=post.votes,
                comments=post.comment_count,
            )
            for post in PostRepository(db).search(term, limit)
        ]

    @staticmethod
    def search_people(
        db: Session, term: str, limit: int, single_type: bool = False
    ) -> List[schemas.PersonSearchResult]:
        people = UserRepository(db).search(term, limit)
        followers = FollowRepository(db).follower_counts([p.id for p in people])
        return [
            schemas.PersonSearchResult(
                id=person.id,
                name=person.name,
                username=person.username,
                avatar=person.avatar or default_avatar(person.name),
                bio=person.bio or f"User profile for {person.name}",
                followers=followers.get(person.id, 0),
            )
            for person in people
        ]

    @staticmethod
    def search_topics(
        db: Session, term: str, limit: int, single_type: bool = False
    ) -> List[schemas.TopicSearchResult]:
        try:
            topics = TopicRepository(db).search(term, limit)
        except SQLAlchemyError as e:
            logger.warning(f"Topic search failed, using fallback topics: {e}")
            return fallback_topics(term, single_type)

        if not topics and len(term.strip()) > SUGGESTION_MIN_QUERY_LENGTH:
            return [new_topic_suggestion(term)]

        return [
            schemas.TopicSearchResult(
                id=topic.id,
                name=topic.name,
                count=topic.post_count,
                description=topic.description,
            )
            for topic in topics
        ]

    @staticmethod
    def search_locations(
        db: Session, term: str, limit: int, single_type: bool = False
    ) -> List[schemas.LocationSearchResult]:
        try:
            locations = LocationRepository(db).search(term, limit)
        except SQLAlchemyError as e:
            logger.warning(f"Location search failed, using fallback locations: {e}")
            return fallback_locations(term, single_type)

        return [
            schemas.LocationSearchResult(
                id=location.id,
                name=location.name,
                count=location.post_count,
                type=location.type.value,
            )
            for location in locations
        ]

    # Suggestion sources: (db, term) -> suggestions

    @staticmethod
    def suggest_issues(db: Session, term: str) -> List[schemas.SearchSuggestion]:
        return [
            schemas.SearchSuggestion(type="issue", text=post.title, id=post.id)
            for post in PostRepository(db).suggest_titles(term, SUGGESTION_LIMIT)
        ]

    @staticmethod
    def suggest_users(db: Session, term: str) -> List[schemas.SearchSuggestion]:
        return [
            schemas.SearchSuggestion(
                type="user",
                text=f"{user.name} (@{user.username})",
                id=user.id,
                username=user.username,
            )
            for user in UserRepository(db).suggest(term, SUGGESTION_LIMIT)
        ]

    @staticmethod
    def suggest_topics(db: Session, term: str) -> List[schemas.SearchSuggestion]:
        try:
            topics = TopicRepository(db).search(term, SUGGESTION_LIMIT)
        except SQLAlchemyError as e:
            logger.warning(f"Topic suggestions failed, using fallback: {e}")
            return [fallback_topic_suggestion(term)]
        return [
            schemas.SearchSuggestion(type="topic", text=topic.name, id=topic.id)
            for topic in topics
        ]

    @staticmethod
    def suggest_locations(db: Session, term: str) -> List[schemas.SearchSuggestion]:
        try:
            locations = LocationRepository(db).search(term, SUGGESTION_LIMIT)
        except SQLAlchemyError as e:
            logger.warning(f"Location suggestions failed, using fallback: {e}")
            return [fallback_location_suggestion(term)]
        return [
            schemas.SearchSuggestion(type="location", text=location.name, id=location.id)
            for location in locations
        ]

    @staticmethod
    def _run_with_session(
        session_factory: sessionmaker, fn: Callable[..., R], *args: Any
    ) -> R:
        db = session_factory()
        try:
            return fn(db, *args)
        finally:
            db.close()

    @staticmethod
    def _fan_out(
        session_factory: sessionmaker, tasks: dict[str, tuple]
    ) -> dict[str, Any]:
        """
        Run ``{key: (fn, *args)}`` concurrently and collect ``{key: result}``.

        The first task error is re-raised once all tasks have finished.
        """
        workers = max(1, min(len(tasks), get_settings().SEARCH_FAN_OUT_WORKERS))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures: dict[str, Future] = {
                key: pool.submit(
                    in_current_context(SearchService._run_with_session),
                    session_factory,
                    *task,
                )
                for key, task in tasks.items()
            }
            return {key: future.result() for key, future in futures.items()}

    @staticmethod
    def search(
        session_factory: sessionmaker,
        query: str,
        search_type: SearchType = SearchType.ALL,
    ) -> schemas.SearchResults:
        """
        Search every category selected by ``search_type``.

        Args:
            session_factory: Factory used to open one session per category
            query: Raw query string
            search_type: ``all`` or a single category

        Returns:
            Results with all four category keys; unselected categories are empty

        Raises:
            ValidationException: If the query is empty or blank
        """
        term = (query or "").strip()
        if not term:
            raise ValidationException("Search query is required")

        categories: dict[SearchType, Callable[..., list]] = {
            SearchType.ISSUES: SearchService.search_issues,
            SearchType.PEOPLE: SearchService.search_people,
            SearchType.TOPICS: SearchService.search_topics,
            SearchType.LOCATIONS: SearchService.search_locations,
        }
        single_type = search_type != SearchType.ALL
        limit = SINGLE_TYPE_LIMIT if single_type else ALL_TYPES_LIMIT

        tasks = {
            category.value: (fn, term, limit, single_type)
            for category, fn in categories.items()
            if search_type in (SearchType.ALL, category)
        }
        results = SearchService._fan_out(session_factory, tasks)

        logger.debug(
            f"Search '{term}' ({search_type.value}): "
            + ", ".join(f"{key}={len(items)}" for key, items in results.items())
        )
        return schemas.SearchResults(**results)

    @staticmethod
    def suggestions(
        session_factory: sessionmaker, query: str
    ) -> List[schemas.SearchSuggestion]:
        """
        Autocomplete suggestions: issue titles and users, then topics and
        locations for queries longer than two characters.

        An empty query returns no suggestions.
        """
        term = (query or "").strip()
        if not term:
            return []

        tasks: dict[str, tuple] = {
            "issues": (SearchService.suggest_issues, term),
            "users": (SearchService.suggest_users, term),
        }
        if len(term) > SUGGESTION_MIN_QUERY_LENGTH:
            tasks["topics"] = (SearchService.suggest_topics, term)
            tasks["locations"] = (SearchService.suggest_locations, term)

        results = SearchService._fan_out(session_factory, tasks)
        return [item for key in tasks for item in results[key]]
