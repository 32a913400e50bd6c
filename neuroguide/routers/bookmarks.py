"""
Bookmarks Router.

A bookmark targets a PDF (optionally a page), a video (optionally a
timestamp label) or a note. The referenced resource is not checked for
existence; bookmarks to deleted resources are kept.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import ValidationError

from ..auth import TokenIdentity
from ..dependencies import get_bookmark_repository, get_current_user
from ..exceptions import NotFoundError, RequestDataError
from ..models import (
    TARGET_MISMATCH_MESSAGE,
    BookmarkCreate,
    BookmarkResponse,
    BookmarkUpdate,
    MessageResponse,
    build_bookmark_target,
)
from ..repository import BookmarkRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("", response_model=List[BookmarkResponse])
def list_bookmarks(
    current_user: TokenIdentity = Depends(get_current_user),
    bookmarks: BookmarkRepository = Depends(get_bookmark_repository),
):
    return [BookmarkResponse.model_validate(b) for b in bookmarks.list(current_user.user_id)]


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
def get_bookmark(
    bookmark_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    bookmarks: BookmarkRepository = Depends(get_bookmark_repository),
):
    bookmark = bookmarks.get(current_user.user_id, bookmark_id)
    if bookmark is None:
        raise NotFoundError("Bookmark")
    return BookmarkResponse.model_validate(bookmark)


@router.post("", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
def create_bookmark(
    bookmark_data: BookmarkCreate,
    current_user: TokenIdentity = Depends(get_current_user),
    bookmarks: BookmarkRepository = Depends(get_bookmark_repository),
):
    bookmark = bookmarks.create(current_user.user_id, bookmark_data.model_dump())
    logger.info(f"Created {bookmark.resource_type} bookmark {bookmark.id} for user {current_user.user_id}")
    return BookmarkResponse.model_validate(bookmark)


@router.put("/{bookmark_id}", response_model=BookmarkResponse)
def update_bookmark(
    bookmark_id: str,
    bookmark_update: BookmarkUpdate,
    current_user: TokenIdentity = Depends(get_current_user),
    bookmarks: BookmarkRepository = Depends(get_bookmark_repository),
):
    """
    Partial update. The merged resourceType/pageNumber/timestampLabel must
    still describe a valid target, e.g. switching a PDF bookmark to a video
    requires clearing its pageNumber in the same request.
    """
    existing = bookmarks.get(current_user.user_id, bookmark_id)
    if existing is None:
        raise NotFoundError("Bookmark")

    changes = bookmark_update.model_dump(exclude_unset=True)
    try:
        build_bookmark_target(
            changes.get("resource_type", existing.resource_type),
            changes.get("resource_id", existing.resource_id),
            changes.get("page_number", existing.page_number),
            changes.get("timestamp_label", existing.timestamp_label),
        )
    except ValidationError:
        raise RequestDataError.for_field("resourceType", TARGET_MISMATCH_MESSAGE)

    bookmark = bookmarks.update(current_user.user_id, bookmark_id, changes)
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", response_model=MessageResponse)
def delete_bookmark(
    bookmark_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    bookmarks: BookmarkRepository = Depends(get_bookmark_repository),
):
    if not bookmarks.delete(current_user.user_id, bookmark_id):
        raise NotFoundError("Bookmark")
    return MessageResponse(message="Bookmark deleted successfully")
