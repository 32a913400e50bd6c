"""
Videos Router.

Externally hosted videos logged against an optional topic.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import TokenIdentity
from ..dependencies import get_current_user, get_topic_repository, get_video_repository
from ..exceptions import NotFoundError
from ..models import MessageResponse, VideoCreate, VideoResponse, VideoUpdate
from ..repository import TopicRepository, VideoRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("", response_model=List[VideoResponse])
def list_videos(
    topic_id: Optional[str] = Query(None, alias="topicId"),
    current_user: TokenIdentity = Depends(get_current_user),
    videos: VideoRepository = Depends(get_video_repository),
):
    """All of the caller's videos, newest first, optionally for one topic."""
    return [VideoResponse.model_validate(v) for v in videos.list(current_user.user_id, topic_id=topic_id)]


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    videos: VideoRepository = Depends(get_video_repository),
):
    video = videos.get(current_user.user_id, video_id)
    if video is None:
        raise NotFoundError("Video")
    return VideoResponse.model_validate(video)


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def create_video(
    video_data: VideoCreate,
    current_user: TokenIdentity = Depends(get_current_user),
    videos: VideoRepository = Depends(get_video_repository),
    topics: TopicRepository = Depends(get_topic_repository),
):
    topics.ensure_owned(current_user.user_id, video_data.topic_id)
    video = videos.create(current_user.user_id, video_data.model_dump())
    logger.info(f"Created video {video.id} for user {current_user.user_id}")
    return VideoResponse.model_validate(video)


@router.put("/{video_id}", response_model=VideoResponse)
def update_video(
    video_id: str,
    video_update: VideoUpdate,
    current_user: TokenIdentity = Depends(get_current_user),
    videos: VideoRepository = Depends(get_video_repository),
    topics: TopicRepository = Depends(get_topic_repository),
):
    if videos.get(current_user.user_id, video_id) is None:
        raise NotFoundError("Video")

    changes = video_update.model_dump(exclude_unset=True)
    topics.ensure_owned(current_user.user_id, changes.get("topic_id"))

    video = videos.update(current_user.user_id, video_id, changes)
    return VideoResponse.model_validate(video)


@router.delete("/{video_id}", response_model=MessageResponse)
def delete_video(
    video_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    videos: VideoRepository = Depends(get_video_repository),
):
    if not videos.delete(current_user.user_id, video_id):
        raise NotFoundError("Video")
    return MessageResponse(message="Video deleted successfully")
