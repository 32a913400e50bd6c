"""Request and response schemas for the NeuroGuide API.

Python field names match the database columns; the JSON surface is camelCase
through the alias generator. Input models reject unknown keys, except that a
client-supplied ``userId`` is silently dropped: ownership always comes from the
access token.
"""

import base64
import binascii
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .constants import (
    DEFAULT_TOPIC_COLOR,
    MAX_DESCRIPTION_LENGTH,
    MAX_FILENAME_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTE_CONTENT_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_PLATFORM_LENGTH,
    MAX_TIMESTAMP_LABEL_LENGTH,
    MAX_TITLE_LENGTH,
    MIN_PASSWORD_LENGTH,
    TOPIC_COLOR_PATTERN,
)
from .sanitization import validate_http_url


# =============================================================================
# Enums for validated parameters
# =============================================================================

class ScheduleStatus(str, Enum):
    """Progress state of a scheduled task."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class ResourceKind(str, Enum):
    """What a bookmark points at."""
    PDF = "pdf"
    VIDEO = "video"
    NOTE = "note"


class StorageMode(str, Enum):
    """Where a study guide's PDF bytes currently live."""
    INLINE = "inline"
    LEGACY_FILE = "legacy-file"
    MISSING = "missing"


# =============================================================================
# Shared field types
# =============================================================================

def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_TITLE_LENGTH)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_NAME_LENGTH)]
Description = Annotated[str, StringConstraints(max_length=MAX_DESCRIPTION_LENGTH)]
NoteContent = Annotated[str, StringConstraints(min_length=1, max_length=MAX_NOTE_CONTENT_LENGTH)]
TopicRef = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
HttpUrlStr = Annotated[str, AfterValidator(validate_http_url)]
UTCDateTime = Annotated[datetime, AfterValidator(_to_naive_utc)]
Color = Annotated[str, StringConstraints(pattern=TOPIC_COLOR_PATTERN)]
PageNumber = Annotated[int, Field(ge=1)]
Counter = Annotated[int, Field(ge=0)]


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("Field cannot be null")
    return value


class APIModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InputModel(APIModel):
    """Base for request bodies: unknown keys are an error, userId is ignored."""
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    @model_validator(mode="before")
    @classmethod
    def drop_client_user_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and ("userId" in data or "user_id" in data):
            data = {k: v for k, v in data.items() if k not in ("userId", "user_id")}
        return data


class ResponseModel(APIModel):
    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# Auth Models
# =============================================================================

class UserRegister(InputModel):
    """Schema for creating an account."""
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    name: Name

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class UserLogin(InputModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(ResponseModel):
    """Public view of an account. Never carries the password hash."""
    id: str
    email: str
    name: str
    created_at: datetime


class LoginResponse(APIModel):
    user: UserResponse
    token: str


# =============================================================================
# Topic Models
# =============================================================================

class TopicCreate(InputModel):
    name: Name
    description: Description = ""
    color: Color = DEFAULT_TOPIC_COLOR

    @field_validator("description", mode="before")
    @classmethod
    def null_description_is_empty(cls, v):
        return "" if v is None else v


class TopicUpdate(InputModel):
    name: Optional[Name] = None
    description: Optional[Description] = None
    color: Optional[Color] = None

    @field_validator("name", "color")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)

    @field_validator("description", mode="before")
    @classmethod
    def null_description_is_empty(cls, v):
        return "" if v is None else v


class TopicResponse(ResponseModel):
    id: str
    user_id: str
    name: str
    description: str
    color: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Study Guide Models
# =============================================================================

class StudyGuideUploadForm(InputModel):
    """Text fields accompanying a multipart PDF upload."""
    title: Title
    topic_id: TopicRef = None
    total_pages: Optional[PageNumber] = None


class StudyGuideCreate(InputModel):
    """JSON upload: the PDF travels base64 encoded in ``content``."""
    title: Title
    topic_id: TopicRef = None
    file_name: str = Field(..., min_length=1, max_length=MAX_FILENAME_LENGTH)
    content: str
    total_pages: Optional[PageNumber] = None
    current_page: PageNumber = 1

    @field_validator("file_name")
    @classmethod
    def must_be_pdf(cls, v: str) -> str:
        if not v.lower().endswith(".pdf"):
            raise ValueError("Only PDF files are allowed")
        return v

    @field_validator("content")
    @classmethod
    def must_be_base64(cls, v: str) -> str:
        # Accept data URLs as produced by FileReader.readAsDataURL
        if v.startswith("data:") and "," in v:
            v = v.split(",", 1)[1]
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Content must be base64 encoded")
        return v

    def decoded_content(self) -> bytes:
        return base64.b64decode(self.content, validate=True)


class StudyGuideUpdate(InputModel):
    """Metadata only; the PDF bytes are immutable once uploaded."""
    title: Optional[Title] = None
    topic_id: TopicRef = None
    total_pages: Optional[PageNumber] = None
    current_page: Optional[PageNumber] = None

    @field_validator("title", "current_page")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class StudyGuideResponse(ResponseModel):
    id: str
    user_id: str
    topic_id: Optional[str] = None
    title: str
    file_name: str
    original_size: Optional[int] = None
    compressed_size: Optional[int] = None
    total_pages: Optional[int] = None
    current_page: int
    uploaded_at: datetime
    updated_at: datetime


class StorageStatusEntry(APIModel):
    id: str
    title: str
    file_name: str
    storage: StorageMode
    original_size: Optional[int] = None
    compressed_size: Optional[int] = None
    compression_ratio: Optional[float] = None


class StorageStatusReport(APIModel):
    total: int
    inline: int
    legacy_file: int
    missing: int
    guides: List[StorageStatusEntry]


class MigrationReport(APIModel):
    message: str
    migrated_count: int
    errors: Optional[List[str]] = None


# =============================================================================
# Video Models
# =============================================================================

class VideoCreate(InputModel):
    title: Title
    description: Optional[Description] = None
    url: HttpUrlStr
    platform: Optional[Annotated[str, StringConstraints(max_length=MAX_PLATFORM_LENGTH)]] = None
    duration_seconds: Optional[Counter] = None
    thumbnail_url: Optional[HttpUrlStr] = None
    topic_id: TopicRef = None


class VideoUpdate(InputModel):
    title: Optional[Title] = None
    description: Optional[Description] = None
    url: Optional[HttpUrlStr] = None
    platform: Optional[Annotated[str, StringConstraints(max_length=MAX_PLATFORM_LENGTH)]] = None
    duration_seconds: Optional[Counter] = None
    thumbnail_url: Optional[HttpUrlStr] = None
    topic_id: TopicRef = None

    @field_validator("title", "url")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class VideoResponse(ResponseModel):
    id: str
    user_id: str
    topic_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    url: str
    platform: Optional[str] = None
    duration_seconds: Optional[int] = None
    thumbnail_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Schedule Models
# =============================================================================

class ScheduleItemCreate(InputModel):
    title: Title
    description: Optional[Description] = None
    start_time: UTCDateTime
    end_time: UTCDateTime
    status: ScheduleStatus = ScheduleStatus.NOT_STARTED.value
    topic_id: TopicRef = None

    @model_validator(mode="after")
    def check_interval(self):
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class ScheduleItemUpdate(InputModel):
    """Partial update; interval ordering is checked after merging with the stored item."""
    title: Optional[Title] = None
    description: Optional[Description] = None
    start_time: Optional[UTCDateTime] = None
    end_time: Optional[UTCDateTime] = None
    status: Optional[ScheduleStatus] = None
    topic_id: TopicRef = None

    @field_validator("title", "start_time", "end_time", "status")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class ScheduleItemResponse(ResponseModel):
    id: str
    user_id: str
    topic_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: ScheduleStatus
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Bookmark Models
# =============================================================================

class _TargetBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, max_length=64)


class PdfTarget(_TargetBase):
    kind: Literal["pdf"] = "pdf"
    page_number: Optional[PageNumber] = None


class VideoTarget(_TargetBase):
    kind: Literal["video"] = "video"
    timestamp_label: Optional[Annotated[str, StringConstraints(max_length=MAX_TIMESTAMP_LABEL_LENGTH)]] = None


class NoteTarget(_TargetBase):
    kind: Literal["note"] = "note"


TARGET_MISMATCH_MESSAGE = "pageNumber is only allowed for pdf bookmarks and timestampLabel only for video bookmarks"

BookmarkTarget = Annotated[Union[PdfTarget, VideoTarget, NoteTarget], Field(discriminator="kind")]
_target_adapter = TypeAdapter(BookmarkTarget)


def build_bookmark_target(kind, resource_id, page_number=None, timestamp_label=None):
    """
    Build the tagged target for a bookmark.

    A page number is only valid for PDFs and a timestamp label only for
    videos; any other combination raises pydantic.ValidationError.
    """
    data = {"kind": ResourceKind(kind).value, "id": resource_id}
    if page_number is not None:
        data["page_number"] = page_number
    if timestamp_label is not None:
        data["timestamp_label"] = timestamp_label
    return _target_adapter.validate_python(data)


class BookmarkCreate(InputModel):
    resource_type: ResourceKind
    resource_id: str = Field(..., min_length=1, max_length=64)
    title: Title
    description: Optional[Description] = None
    page_number: Optional[PageNumber] = None
    timestamp_label: Optional[Annotated[str, StringConstraints(max_length=MAX_TIMESTAMP_LABEL_LENGTH)]] = None

    @model_validator(mode="after")
    def check_target(self):
        try:
            build_bookmark_target(self.resource_type, self.resource_id, self.page_number, self.timestamp_label)
        except ValidationError:
            raise ValueError(TARGET_MISMATCH_MESSAGE)
        return self


class BookmarkUpdate(InputModel):
    """Partial update; the merged target is validated before saving."""
    resource_type: Optional[ResourceKind] = None
    resource_id: Optional[str] = Field(default=None, min_length=1, max_length=64)
    title: Optional[Title] = None
    description: Optional[Description] = None
    page_number: Optional[PageNumber] = None
    timestamp_label: Optional[Annotated[str, StringConstraints(max_length=MAX_TIMESTAMP_LABEL_LENGTH)]] = None

    @field_validator("resource_type", "resource_id", "title")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class BookmarkResponse(ResponseModel):
    id: str
    user_id: str
    resource_type: ResourceKind
    resource_id: str
    title: str
    description: Optional[str] = None
    page_number: Optional[int] = None
    timestamp_label: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Note Models
# =============================================================================

class NoteCreate(InputModel):
    title: Title
    content: NoteContent
    topic_id: TopicRef = None


class NoteUpdate(InputModel):
    title: Optional[Title] = None
    content: Optional[NoteContent] = None
    topic_id: TopicRef = None

    @field_validator("title", "content")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class NoteResponse(ResponseModel):
    id: str
    user_id: str
    topic_id: Optional[str] = None
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Study Progress Models
# =============================================================================

class StudyProgressUpdate(InputModel):
    total_topics: Optional[Counter] = None
    completed_topics: Optional[Counter] = None
    study_hours: Optional[Counter] = None
    videos_watched: Optional[Counter] = None
    bookmark_count: Optional[Counter] = None

    @field_validator("total_topics", "completed_topics", "study_hours", "videos_watched", "bookmark_count")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class StudyProgressResponse(ResponseModel):
    id: str
    user_id: str
    total_topics: int
    completed_topics: int
    study_hours: int
    videos_watched: int
    bookmark_count: int
    updated_at: datetime


# =============================================================================
# Search Models
# =============================================================================

class SearchResults(APIModel):
    topics: List[TopicResponse]
    study_guides: List[StudyGuideResponse]
    videos: List[VideoResponse]
    notes: List[NoteResponse]
