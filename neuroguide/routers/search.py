"""
Search Router.

GET /search?q=... matches the caller's topics, study guides, videos and notes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth import TokenIdentity
from ..constants import MAX_SEARCH_QUERY_LENGTH
from ..dependencies import get_current_user, get_search_service
from ..exceptions import RequestDataError
from ..models import NoteResponse, SearchResults, StudyGuideResponse, TopicResponse, VideoResponse
from ..search_service import SearchService

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResults)
def search(
    q: Optional[str] = Query(None, max_length=MAX_SEARCH_QUERY_LENGTH),
    current_user: TokenIdentity = Depends(get_current_user),
    service: SearchService = Depends(get_search_service),
):
    """Case-insensitive substring search, grouped by entity type."""
    if q is None or not q.strip():
        raise RequestDataError("Search query is required", errors=[{"field": "q", "message": "Search query is required"}])

    hits = service.search(current_user.user_id, q)
    return SearchResults(
        topics=[TopicResponse.model_validate(t) for t in hits.topics],
        study_guides=[StudyGuideResponse.model_validate(g) for g in hits.study_guides],
        videos=[VideoResponse.model_validate(v) for v in hits.videos],
        notes=[NoteResponse.model_validate(n) for n in hits.notes],
    )
