"""
SQLAlchemy database models.

One table per entity; every per-user row carries user_id and is only ever
read through a user-scoped query (see repository.py).
Separate from Pydantic models (models.py) which handle API validation.

Timestamps are naive UTC.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, LargeBinary, String, Text
from sqlalchemy.orm import declarative_base, deferred

from .constants import DEFAULT_TOPIC_COLOR

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _owner_column():
    return Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)


def _topic_column():
    return Column(String(36), ForeignKey("topics.id", ondelete="SET NULL"), nullable=True, index=True)


class DBUser(Base):
    """User account table."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<DBUser(id='{self.id}', email='{self.email}')>"


class DBTopic(Base):
    """Subject area used to group study material."""
    __tablename__ = "topics"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = _owner_column()
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    color = Column(String(7), nullable=False, default=DEFAULT_TOPIC_COLOR)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_topic_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<DBTopic(id='{self.id}', name='{self.name}')>"


class DBStudyGuide(Base):
    """Uploaded PDF with its gzip-compressed bytes stored inline."""
    __tablename__ = "study_guides"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = _owner_column()
    topic_id = _topic_column()
    title = Column(String(255), nullable=False)
    file_name = Column(String(255), nullable=False)

    # Inline payload; deferred so listings never pull the bytes
    compressed_data = deferred(Column(LargeBinary, nullable=True))
    original_size = Column(Integer, nullable=True)
    compressed_size = Column(Integer, nullable=True)

    # Records created before inline storage point at a file on disk
    file_path = Column(String(1024), nullable=True)

    total_pages = Column(Integer, nullable=True)
    current_page = Column(Integer, nullable=False, default=1)
    uploaded_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_study_guide_user_uploaded", "user_id", "uploaded_at"),
    )

    def __repr__(self):
        return f"<DBStudyGuide(id='{self.id}', title='{self.title}', size={self.original_size})>"


class DBVideo(Base):
    """External video logged for study."""
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = _owner_column()
    topic_id = _topic_column()
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String(2048), nullable=False)
    platform = Column(String(50), nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    thumbnail_url = Column(String(2048), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<DBVideo(id='{self.id}', title='{self.title}')>"


class DBScheduleItem(Base):
    """Timed study task."""
    __tablename__ = "schedule_items"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = _owner_column()
    topic_id = _topic_column()
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="not-started")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_schedule_user_start", "user_id", "start_time"),
    )

    def __repr__(self):
        return f"<DBScheduleItem(id='{self.id}', start={self.start_time}, status='{self.status}')>"


class DBBookmark(Base):
    """Pointer to a PDF page, video moment or note."""
    __tablename__ = "bookmarks"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = _owner_column()
    resource_type = Column(String(10), nullable=False)
    resource_id = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    page_number = Column(Integer, nullable=True)
    timestamp_label = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<DBBookmark(id='{self.id}', type='{self.resource_type}', resource='{self.resource_id}')>"


class DBNote(Base):
    """Free-form note."""
    __tablename__ = "notes"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = _owner_column()
    topic_id = _topic_column()
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<DBNote(id='{self.id}', title='{self.title}')>"


class DBStudyProgress(Base):
    """Per-user counters, one row per user, maintained by the client."""
    __tablename__ = "study_progress"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    total_topics = Column(Integer, nullable=False, default=0)
    completed_topics = Column(Integer, nullable=False, default=0)
    study_hours = Column(Integer, nullable=False, default=0)
    videos_watched = Column(Integer, nullable=False, default=0)
    bookmark_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<DBStudyProgress(user_id='{self.user_id}')>"
