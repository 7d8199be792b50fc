from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import sessionmaker

import models.schemas as schemas
from repositories.database import get_session_factory
from services.search import SearchService, SearchType

router = APIRouter(prefix="/search", tags=["search"])


@router.get(
    "",
    response_model=schemas.SearchResults,
    response_model_exclude_none=True,
)
def search(
    q: str = Query(""),
    type: SearchType = Query(SearchType.ALL),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Search issues, people, topics and locations.

    The response always has all four keys; categories not selected by
    ``type`` are empty lists.
    """
    return SearchService.search(session_factory, q, type)


@router.get(
    "/suggestions",
    response_model=List[schemas.SearchSuggestion],
    response_model_exclude_none=True,
)
def suggestions(
    q: str = Query(""),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    return SearchService.suggestions(session_factory, q)
