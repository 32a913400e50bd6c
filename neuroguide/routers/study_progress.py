"""
Study Progress Router.

One counters record per user. Counters are maintained by the client and are
not derived from the other collections.
"""

from fastapi import APIRouter, Depends

from ..auth import TokenIdentity
from ..dependencies import get_current_user, get_progress_repository
from ..models import StudyProgressResponse, StudyProgressUpdate
from ..repository import StudyProgressRepository

router = APIRouter(prefix="/study-progress", tags=["study-progress"])


@router.get("", response_model=StudyProgressResponse)
def get_progress(
    current_user: TokenIdentity = Depends(get_current_user),
    progress: StudyProgressRepository = Depends(get_progress_repository),
):
    """Current counters; a zeroed record is created on first read."""
    return StudyProgressResponse.model_validate(progress.get_or_create(current_user.user_id))


@router.put("", response_model=StudyProgressResponse)
def update_progress(
    progress_update: StudyProgressUpdate,
    current_user: TokenIdentity = Depends(get_current_user),
    progress: StudyProgressRepository = Depends(get_progress_repository),
):
    """Set the counters provided; the record is created if missing."""
    record = progress.upsert(current_user.user_id, progress_update.model_dump(exclude_unset=True))
    return StudyProgressResponse.model_validate(record)
