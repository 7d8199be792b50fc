"""
Placeholder results used when the topic or location tables cannot be read.

Issue and people searches never fall back; their errors propagate.
"""

import time
from typing import List

import models.schemas as schemas

TOPIC_KEYWORDS = [
    "Maintenance",
    "Safety",
    "Development",
    "Construction",
    "Community",
    "Improvements",
    "Issues",
    "Planning",
]

LOCATION_TYPES = ["Park", "District", "Neighborhood", "Street", "Junction", "Area"]


def new_topic_suggestion(query: str) -> schemas.TopicSearchResult:
    """Offer to create a topic when nothing matched."""
    return schemas.TopicSearchResult(
        id=f"new-topic-{int(time.time() * 1000)}",
        name=query,
        description=f"Create a new topic for discussions about {query}.",
        count=0,
        is_new_suggestion=True,
    )


def fallback_topics(query: str, single_type: bool) -> List[schemas.TopicSearchResult]:
    """
    Topic names built from keywords related to ``query``.

    A keyword is related when either string contains the other
    (case-insensitive). Up to 10 are returned for a topics-only search and 3
    otherwise; with no related keyword a single generic entry is returned.
    """
    needle = query.lower()
    keywords = [
        kw for kw in TOPIC_KEYWORDS if needle in kw.lower() or kw.lower() in needle
    ][: 10 if single_type else 3]

    if not keywords:
        return [
            schemas.TopicSearchResult(
                id="fallback-generic",
                name=query,
                count=0,
                description=f"Issues related to {query}.",
                is_fallback=True,
            )
        ]

    return [
        schemas.TopicSearchResult(
            id=f"fallback-{i}",
            name=f"{query} {kw}",
            count=0,
            description=f"Issues related to {query} {kw.lower()}.",
            is_fallback=True,
        )
        for i, kw in enumerate(keywords)
    ]


def fallback_locations(
    query: str, single_type: bool
) -> List[schemas.LocationSearchResult]:
    """One entry per location type: all of them for a locations-only search, else 3."""
    types = LOCATION_TYPES[: 8 if single_type else 3]
    return [
        schemas.LocationSearchResult(
            id=f"fallback-{i}",
            name=f"{query} {location_type}",
            count=0,
            type=location_type,
            is_fallback=True,
        )
        for i, location_type in enumerate(types)
    ]


def fallback_topic_suggestion(query: str) -> schemas.SearchSuggestion:
    return schemas.SearchSuggestion(
        type="topic",
        text=f"{query} maintenance",
        id=f"topic-{int(time.time() * 1000)}-1",
    )


def fallback_location_suggestion(query: str) -> schemas.SearchSuggestion:
    return schemas.SearchSuggestion(
        type="location",
        text=f"{query} neighborhood",
        id=f"location-{int(time.time() * 1000)}-1",
    )
