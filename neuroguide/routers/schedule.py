"""
Schedule Router.

Timed study tasks. startTime must be strictly before endTime, both on create
and after a partial update has been merged with the stored item.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import TokenIdentity
from ..dependencies import get_current_user, get_schedule_repository, get_topic_repository
from ..exceptions import NotFoundError, RequestDataError
from ..models import MessageResponse, ScheduleItemCreate, ScheduleItemResponse, ScheduleItemUpdate
from ..repository import ScheduleItemRepository, TopicRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get("", response_model=List[ScheduleItemResponse])
def list_schedule_items(
    day: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD; items starting that UTC day"),
    current_user: TokenIdentity = Depends(get_current_user),
    schedule: ScheduleItemRepository = Depends(get_schedule_repository),
):
    """Items ordered by start time, optionally limited to one calendar day."""
    return [ScheduleItemResponse.model_validate(i) for i in schedule.list(current_user.user_id, day=day)]


@router.get("/{item_id}", response_model=ScheduleItemResponse)
def get_schedule_item(
    item_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    schedule: ScheduleItemRepository = Depends(get_schedule_repository),
):
    item = schedule.get(current_user.user_id, item_id)
    if item is None:
        raise NotFoundError("Schedule item")
    return ScheduleItemResponse.model_validate(item)


@router.post("", response_model=ScheduleItemResponse, status_code=status.HTTP_201_CREATED)
def create_schedule_item(
    item_data: ScheduleItemCreate,
    current_user: TokenIdentity = Depends(get_current_user),
    schedule: ScheduleItemRepository = Depends(get_schedule_repository),
    topics: TopicRepository = Depends(get_topic_repository),
):
    topics.ensure_owned(current_user.user_id, item_data.topic_id)
    item = schedule.create(current_user.user_id, item_data.model_dump())
    logger.info(f"Scheduled item {item.id} for user {current_user.user_id} at {item.start_time}")
    return ScheduleItemResponse.model_validate(item)


@router.put("/{item_id}", response_model=ScheduleItemResponse)
def update_schedule_item(
    item_id: str,
    item_update: ScheduleItemUpdate,
    current_user: TokenIdentity = Depends(get_current_user),
    schedule: ScheduleItemRepository = Depends(get_schedule_repository),
    topics: TopicRepository = Depends(get_topic_repository),
):
    existing = schedule.get(current_user.user_id, item_id)
    if existing is None:
        raise NotFoundError("Schedule item")

    changes = item_update.model_dump(exclude_unset=True)
    start_time = changes.get("start_time", existing.start_time)
    end_time = changes.get("end_time", existing.end_time)
    if start_time >= end_time:
        raise RequestDataError.for_field("endTime", "startTime must be before endTime")
    topics.ensure_owned(current_user.user_id, changes.get("topic_id"))

    item = schedule.update(current_user.user_id, item_id, changes)
    return ScheduleItemResponse.model_validate(item)


@router.delete("/{item_id}", response_model=MessageResponse)
def delete_schedule_item(
    item_id: str,
    current_user: TokenIdentity = Depends(get_current_user),
    schedule: ScheduleItemRepository = Depends(get_schedule_repository),
):
    if not schedule.delete(current_user.user_id, item_id):
        raise NotFoundError("Schedule item")
    return MessageResponse(message="Schedule item deleted successfully")
