"""
Repository pattern for NeuroGuide data access.

Every per-user repository filters on both the record id and the owning user
id, so a record that belongs to someone else behaves exactly like a missing
one. Repository methods commit their own unit of work.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from .db_models import (
    DBBookmark,
    DBNote,
    DBScheduleItem,
    DBStudyGuide,
    DBStudyProgress,
    DBTopic,
    DBUser,
    DBVideo,
)
from .exceptions import ConflictError, RequestDataError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class UserScopedRepository(Generic[ModelT]):
    """
    CRUD for one entity type, always scoped to a single owner.

    Subclasses set ``model`` and may override ``_ordering``.
    """

    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def _scoped(self, user_id: str) -> Query:
        return self.db.query(self.model).filter(self.model.user_id == user_id)

    def _ordering(self) -> list:
        return [self.model.created_at.desc()]

    def list(self, user_id: str) -> List[ModelT]:
        return self._scoped(user_id).order_by(*self._ordering()).all()

    def get(self, user_id: str, record_id: str) -> Optional[ModelT]:
        return self._scoped(user_id).filter(self.model.id == record_id).first()

    def create(self, user_id: str, data: Dict[str, Any]) -> ModelT:
        record = self.model(**data, user_id=user_id)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.debug(f"Created {record!r} for user {user_id}")
        return record

    def update(self, user_id: str, record_id: str, changes: Dict[str, Any]) -> Optional[ModelT]:
        """Shallow merge: only keys present in ``changes`` are written."""
        record = self.get(user_id, record_id)
        if record is None:
            return None
        for field, value in changes.items():
            setattr(record, field, value)
        self.db.commit()
        self.db.refresh(record)
        return record

    def delete(self, user_id: str, record_id: str) -> bool:
        record = self.get(user_id, record_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        return True


# =============================================================================
# TOPICS
# =============================================================================

class TopicRepository(UserScopedRepository[DBTopic]):
    model = DBTopic

    # Tables whose topic_id is cleared when a topic is deleted
    dependents = (DBStudyGuide, DBVideo, DBScheduleItem, DBNote)

    def ensure_owned(self, user_id: str, topic_id: Optional[str]) -> None:
        """
        Check that an optional topic reference names one of the user's topics.

        Raises:
            RequestDataError: on an unknown or foreign topic id
        """
        if topic_id is None:
            return
        if self.get(user_id, topic_id) is None:
            raise RequestDataError.for_field("topicId", "Topic not found")

    def delete(self, user_id: str, record_id: str) -> bool:
        """Delete a topic and set topic_id to null on everything that referenced it."""
        topic = self.get(user_id, record_id)
        if topic is None:
            return False

        cleared = 0
        for dependent in self.dependents:
            cleared += (
                self.db.query(dependent)
                .filter(dependent.user_id == user_id, dependent.topic_id == record_id)
                .update({dependent.topic_id: None}, synchronize_session=False)
            )
        self.db.delete(topic)
        self.db.commit()
        # Instances loaded earlier in this session may still hold the old id
        self.db.expire_all()

        logger.info(f"Deleted topic {record_id}; cleared reference on {cleared} records")
        return True


# =============================================================================
# STUDY MATERIAL
# =============================================================================

class StudyGuideRepository(UserScopedRepository[DBStudyGuide]):
    model = DBStudyGuide

    def _ordering(self) -> list:
        return [DBStudyGuide.uploaded_at.desc()]

    def list_legacy(self, user_id: Optional[str] = None) -> List[DBStudyGuide]:
        """Guides still stored on disk; all users when user_id is None."""
        query = self.db.query(DBStudyGuide)
        if user_id is not None:
            query = query.filter(DBStudyGuide.user_id == user_id)
        return (
            query.filter(DBStudyGuide.file_path.isnot(None), DBStudyGuide.compressed_size.is_(None))
            .order_by(DBStudyGuide.uploaded_at)
            .all()
        )


class VideoRepository(UserScopedRepository[DBVideo]):
    model = DBVideo

    def list(self, user_id: str, topic_id: Optional[str] = None) -> List[DBVideo]:
        query = self._scoped(user_id)
        if topic_id is not None:
            query = query.filter(DBVideo.topic_id == topic_id)
        return query.order_by(*self._ordering()).all()


class NoteRepository(UserScopedRepository[DBNote]):
    model = DBNote

    def list(self, user_id: str, topic_id: Optional[str] = None) -> List[DBNote]:
        query = self._scoped(user_id)
        if topic_id is not None:
            query = query.filter(DBNote.topic_id == topic_id)
        return query.order_by(*self._ordering()).all()


class ScheduleItemRepository(UserScopedRepository[DBScheduleItem]):
    model = DBScheduleItem

    def _ordering(self) -> list:
        return [DBScheduleItem.start_time.asc()]

    def list(self, user_id: str, day: Optional[date] = None) -> List[DBScheduleItem]:
        """All items, or those starting within [day 00:00, day + 24h) UTC."""
        query = self._scoped(user_id)
        if day is not None:
            start = datetime.combine(day, time.min)
            query = query.filter(
                DBScheduleItem.start_time >= start,
                DBScheduleItem.start_time < start + timedelta(days=1),
            )
        return query.order_by(*self._ordering()).all()


class BookmarkRepository(UserScopedRepository[DBBookmark]):
    model = DBBookmark


# =============================================================================
# STUDY PROGRESS
# =============================================================================

class StudyProgressRepository:
    """One counters row per user, created on first access."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[DBStudyProgress]:
        return self.db.query(DBStudyProgress).filter(DBStudyProgress.user_id == user_id).first()

    def get_or_create(self, user_id: str) -> DBStudyProgress:
        progress = self.get(user_id)
        if progress is not None:
            return progress

        progress = DBStudyProgress(user_id=user_id)
        self.db.add(progress)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request created the row first
            self.db.rollback()
            return self.get(user_id)
        self.db.refresh(progress)
        return progress

    def upsert(self, user_id: str, changes: Dict[str, Any]) -> DBStudyProgress:
        progress = self.get_or_create(user_id)
        for field, value in changes.items():
            setattr(progress, field, value)
        self.db.commit()
        self.db.refresh(progress)
        return progress


# =============================================================================
# USERS
# =============================================================================

class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[DBUser]:
        return self.db.query(DBUser).filter(DBUser.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[DBUser]:
        return self.db.query(DBUser).filter(DBUser.email == email.lower()).first()

    def create(self, email: str, hashed_password: str, name: str) -> DBUser:
        user = DBUser(email=email.lower(), hashed_password=hashed_password, name=name)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("User already exists") from e
        self.db.refresh(user)
        return user
