"""Notes Router."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import TokenIdentity
from ..dependencies import get_current_user, get_note_repository, get_topic_repository
from ..exceptions import NotFoundError
from ..models import MessageResponse, NoteCreate, NoteResponse, NoteUpdate
from ..repository import NoteRepository, TopicRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=List[NoteResponse])
def list_notes(
    topic_id: Optional[str] = Query(None, alias="topicId"),
    current_user: TokenIdentity = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
):
    return [NoteResponse.model_validate(n) for n in notes.list(current_user.user_id, topic_id=topic_id)]


@router.get("/{note_id}", response_model=NoteResponse)
def get_note(
    note_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
):
    note = notes.get(current_user.user_id, note_id)
    if note is None:
        raise NotFoundError("Note")
    return NoteResponse.model_validate(note)


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    note_data: NoteCreate,
    current_user: TokenIdentity = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
    topics: TopicRepository = Depends(get_topic_repository),
):
    topics.ensure_owned(current_user.user_id, note_data.topic_id)
    note = notes.create(current_user.user_id, note_data.model_dump())
    logger.info(f"Created note {note.id} for user {current_user.user_id}")
    return NoteResponse.model_validate(note)


@router.put("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: str,
    note_update: NoteUpdate,
    current_user: TokenIdentity = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
    topics: TopicRepository = Depends(get_topic_repository),
):
    if notes.get(current_user.user_id, note_id) is None:
        raise NotFoundError("Note")

    changes = note_update.model_dump(exclude_unset=True)
    topics.ensure_owned(current_user.user_id, changes.get("topic_id"))

    note = notes.update(current_user.user_id, note_id, changes)
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}", response_model=MessageResponse)
def delete_note(
    note_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    notes: NoteRepository = Depends(get_note_repository),
):
    if not notes.delete(current_user.user_id, note_id):
        raise NotFoundError("Note")
    return MessageResponse(message="Note deleted successfully")
