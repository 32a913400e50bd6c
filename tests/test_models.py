"""
Tests for request/response schemas.
"""

import base64
from datetime import datetime

import pytest
from pydantic import ValidationError

from neuroguide.models import (
    TARGET_MISMATCH_MESSAGE,
    BookmarkCreate,
    NoteTarget,
    PdfTarget,
    ScheduleItemCreate,
    StudyGuideCreate,
    TopicCreate,
    VideoTarget,
    build_bookmark_target,
)


# =============================================================================
# BOOKMARK TARGET TESTS
# =============================================================================

def test_build_pdf_target():
    target = build_bookmark_target("pdf", "guide-1", page_number=3)

    assert isinstance(target, PdfTarget)
    assert target.page_number == 3


def test_build_video_target():
    target = build_bookmark_target("video", "video-1", timestamp_label="10:05")

    assert isinstance(target, VideoTarget)
    assert target.timestamp_label == "10:05"


def test_note_target_has_no_position():
    assert isinstance(build_bookmark_target("note", "note-1"), NoteTarget)

    with pytest.raises(ValidationError):
        build_bookmark_target("note", "note-1", page_number=1)


def test_mismatched_position_rejected():
    with pytest.raises(ValidationError):
        build_bookmark_target("video", "video-1", page_number=2)
    with pytest.raises(ValidationError):
        build_bookmark_target("pdf", "guide-1", timestamp_label="00:10")


def test_bookmark_create_valid_target():
    bookmark = BookmarkCreate.model_validate({
        "resourceType": "pdf", "resourceId": "guide-1", "title": "Figure", "pageNumber": 7,
    })

    assert bookmark.page_number == 7


def test_bookmark_create_mismatched_target():
    """Creation goes through the same tagged-target construction as updates."""
    with pytest.raises(ValidationError) as exc_info:
        BookmarkCreate.model_validate({
            "resourceType": "note", "resourceId": "note-1", "title": "Margin", "timestampLabel": "01:00",
        })

    assert TARGET_MISMATCH_MESSAGE in str(exc_info.value)


# =============================================================================
# INPUT MODEL TESTS
# =============================================================================

def test_user_id_dropped_from_input():
    topic = TopicCreate.model_validate({"name": "Math", "userId": "attacker"})

    assert "user_id" not in topic.model_dump()


def test_unknown_keys_rejected():
    with pytest.raises(ValidationError):
        TopicCreate.model_validate({"name": "Math", "owner": "x"})


def test_schedule_times_normalized_to_naive_utc():
    item = ScheduleItemCreate.model_validate({
        "title": "Block",
        "startTime": "2026-10-20T09:00:00-05:00",
        "endTime": "2026-10-20T10:00:00-05:00",
    })

    assert item.start_time == datetime(2026, 10, 20, 14, 0)
    assert item.start_time.tzinfo is None
    assert item.status == "not-started"


def test_study_guide_create_decodes_content():
    guide = StudyGuideCreate.model_validate({
        "title": "T",
        "fileName": "t.pdf",
        "content": base64.b64encode(b"%PDF-1.4 data").decode(),
    })

    assert guide.decoded_content() == b"%PDF-1.4 data"
    assert guide.current_page == 1
