"""
Shared Dependencies for the NeuroGuide API.

Provides:
- Per-request database sessions from the application's Database
- The access gate (get_current_user)
- Repository and service instances bound to the request session
"""

import logging
from typing import Iterator, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import TokenIdentity, decode_access_token, identity_from_claims
from .blob_storage import InlinePayloadStore
from .config import Settings
from .constants import API_PREFIX
from .exceptions import InvalidTokenError, MissingTokenError
from .repository import (
    BookmarkRepository,
    NoteRepository,
    ScheduleItemRepository,
    StudyGuideRepository,
    StudyProgressRepository,
    TopicRepository,
    UserRepository,
    VideoRepository,
)
from .search_service import SearchService

logger = logging.getLogger(__name__)

# =============================================================================
# Application Resources
# =============================================================================

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, always closed."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_payload_store(request: Request) -> InlinePayloadStore:
    return request.app.state.payload_store


# =============================================================================
# Access Gate
# =============================================================================

# auto_error=False: a missing token is a 401 we raise ourselves
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/auth/login", auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> TokenIdentity:
    """
    Resolve the bearer token into the caller's identity.

    Raises:
        MissingTokenError: no bearer token (401)
        InvalidTokenError: bad signature, malformed or expired (403)
    """
    if not token:
        raise MissingTokenError()

    try:
        claims = decode_access_token(token, settings.secret_key)
    except ValueError:
        logger.debug("Rejected invalid or expired access token")
        raise InvalidTokenError()

    return identity_from_claims(claims)


# =============================================================================
# Repositories & Services
# =============================================================================

def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_topic_repository(db: Session = Depends(get_db)) -> TopicRepository:
    return TopicRepository(db)


def get_study_guide_repository(db: Session = Depends(get_db)) -> StudyGuideRepository:
    return StudyGuideRepository(db)


def get_video_repository(db: Session = Depends(get_db)) -> VideoRepository:
    return VideoRepository(db)


def get_schedule_repository(db: Session = Depends(get_db)) -> ScheduleItemRepository:
    return ScheduleItemRepository(db)


def get_bookmark_repository(db: Session = Depends(get_db)) -> BookmarkRepository:
    return BookmarkRepository(db)


def get_note_repository(db: Session = Depends(get_db)) -> NoteRepository:
    return NoteRepository(db)


def get_progress_repository(db: Session = Depends(get_db)) -> StudyProgressRepository:
    return StudyProgressRepository(db)


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    return SearchService(
        topics=TopicRepository(db),
        study_guides=StudyGuideRepository(db),
        videos=VideoRepository(db),
        notes=NoteRepository(db),
    )
