"""
Topics Router.

Topics group study guides, videos, schedule items and notes. Deleting a topic
keeps those records and clears their topicId.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ..auth import TokenIdentity
from ..dependencies import get_current_user, get_topic_repository
from ..exceptions import NotFoundError
from ..models import MessageResponse, TopicCreate, TopicResponse, TopicUpdate
from ..repository import TopicRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/topics", tags=["topics"])


@router.get("", response_model=List[TopicResponse])
def list_topics(
    current_user: TokenIdentity = Depends(get_current_user),
    topics: TopicRepository = Depends(get_topic_repository),
):
    """All of the caller's topics, newest first."""
    return [TopicResponse.model_validate(t) for t in topics.list(current_user.user_id)]


@router.get("/{topic_id}", response_model=TopicResponse)
def get_topic(
    topic_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    topics: TopicRepository = Depends(get_topic_repository),
):
    topic = topics.get(current_user.user_id, topic_id)
    if topic is None:
        raise NotFoundError("Topic")
    return TopicResponse.model_validate(topic)


@router.post("", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
def create_topic(
    topic_data: TopicCreate,
    current_user: TokenIdentity = Depends(get_current_user),
    topics: TopicRepository = Depends(get_topic_repository),
):
    topic = topics.create(current_user.user_id, topic_data.model_dump())
    logger.info(f"Created topic {topic.id} for user {current_user.user_id}")
    return TopicResponse.model_validate(topic)


@router.put("/{topic_id}", response_model=TopicResponse)
def update_topic(
    topic_id: str,
    topic_update: TopicUpdate,
    current_user: TokenIdentity = Depends(get_current_user),
    topics: TopicRepository = Depends(get_topic_repository),
):
    """Update only the fields provided."""
    topic = topics.update(current_user.user_id, topic_id, topic_update.model_dump(exclude_unset=True))
    if topic is None:
        raise NotFoundError("Topic")
    return TopicResponse.model_validate(topic)


@router.delete("/{topic_id}", response_model=MessageResponse)
def delete_topic(
    topic_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    topics: TopicRepository = Depends(get_topic_repository),
):
    if not topics.delete(current_user.user_id, topic_id):
        raise NotFoundError("Topic")
    return MessageResponse(message="Topic deleted successfully")
