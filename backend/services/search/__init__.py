"""Search service package."""

from services.search.search_service import SearchService, SearchType

__all__ = [
    "SearchService",
    "SearchType",
]
