"""
Tests for the Database resource and the repositories built on it.

Tests database setup, health checks, per-user scoping and the topic
delete behaviour at the repository level.
"""

from datetime import date, datetime

import pytest
from sqlalchemy import inspect, text

from neuroguide.database import Database
from neuroguide.db_models import DBNote, DBScheduleItem, DBStudyProgress, DBTopic
from neuroguide.exceptions import ConflictError, RequestDataError
from neuroguide.repository import (
    NoteRepository,
    ScheduleItemRepository,
    StudyProgressRepository,
    TopicRepository,
    UserRepository,
)


@pytest.fixture
def users(db_session):
    repo = UserRepository(db_session)
    alice = repo.create("alice@example.com", "hash", "Alice")
    bob = repo.create("bob@example.com", "hash", "Bob")
    return alice, bob


# =============================================================================
# DATABASE TESTS
# =============================================================================

def test_init_db_creates_tables(database):
    """Test database initialization creates every table."""
    tables = set(inspect(database.engine).get_table_names())

    assert {
        "users", "topics", "study_guides", "videos",
        "schedule_items", "bookmarks", "notes", "study_progress",
    } <= tables


def test_health_check(database):
    health = database.check_health()

    assert health == {"connected": True, "type": "sqlite"}


def test_foreign_keys_enforced(database):
    with database.session_scope() as db:
        assert db.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_session_scope_rolls_back_on_error(database):
    with pytest.raises(RuntimeError):
        with database.session_scope() as db:
            db.add(DBTopic(user_id="nobody", name="Orphan"))
            raise RuntimeError("boom")

    with database.session_scope() as db:
        assert db.query(DBTopic).count() == 0


def test_separate_databases_are_isolated():
    """Two in-memory databases never share rows."""
    first, second = Database("sqlite://"), Database("sqlite://")
    first.init_db()
    second.init_db()

    UserRepository(first.session()).create("solo@example.com", "hash", "Solo")

    assert UserRepository(second.session()).get_by_email("solo@example.com") is None
    first.dispose()
    second.dispose()


# =============================================================================
# USER REPOSITORY TESTS
# =============================================================================

def test_duplicate_email_is_conflict(db_session, users):
    with pytest.raises(ConflictError):
        UserRepository(db_session).create("ALICE@example.com", "hash", "Alice again")


def test_lookup_is_case_insensitive(db_session, users):
    assert UserRepository(db_session).get_by_email("Alice@Example.COM").id == users[0].id


# =============================================================================
# SCOPED REPOSITORY TESTS
# =============================================================================

def test_records_scoped_to_owner(db_session, users):
    alice, bob = users
    topics = TopicRepository(db_session)
    topic = topics.create(alice.id, {"name": "Math"})

    assert topics.get(bob.id, topic.id) is None
    assert topics.update(bob.id, topic.id, {"name": "Stolen"}) is None
    assert topics.delete(bob.id, topic.id) is False
    assert topics.get(alice.id, topic.id).name == "Math"
    assert topics.list(bob.id) == []


def test_ensure_owned(db_session, users):
    alice, bob = users
    topics = TopicRepository(db_session)
    topic = topics.create(alice.id, {"name": "Math"})

    topics.ensure_owned(alice.id, topic.id)
    topics.ensure_owned(alice.id, None)
    with pytest.raises(RequestDataError) as exc_info:
        topics.ensure_owned(bob.id, topic.id)

    assert exc_info.value.errors == [{"field": "topicId", "message": "Topic not found"}]


def test_topic_delete_sets_null(db_session, users):
    alice, _ = users
    topics = TopicRepository(db_session)
    notes = NoteRepository(db_session)
    topic = topics.create(alice.id, {"name": "Math"})
    note = notes.create(alice.id, {"title": "Sums", "content": "1+1", "topic_id": topic.id})

    assert topics.delete(alice.id, topic.id) is True

    assert db_session.get(DBNote, note.id).topic_id is None
    assert notes.list(alice.id, topic_id=topic.id) == []


def test_deleting_user_cascades(db_session, users):
    alice, _ = users
    TopicRepository(db_session).create(alice.id, {"name": "Math"})

    db_session.delete(alice)
    db_session.commit()

    assert db_session.query(DBTopic).count() == 0


def test_schedule_day_window(db_session, users):
    alice, _ = users
    schedule = ScheduleItemRepository(db_session)
    for title, start, end in [
        ("before", datetime(2026, 10, 19, 23, 59), datetime(2026, 10, 20, 0, 30)),
        ("first", datetime(2026, 10, 20, 0, 0), datetime(2026, 10, 20, 1, 0)),
        ("last", datetime(2026, 10, 20, 23, 59), datetime(2026, 10, 21, 0, 30)),
        ("after", datetime(2026, 10, 21, 0, 0), datetime(2026, 10, 21, 1, 0)),
    ]:
        schedule.create(alice.id, {"title": title, "start_time": start, "end_time": end})

    items = schedule.list(alice.id, day=date(2026, 10, 20))

    assert [i.title for i in items] == ["first", "last"]
    assert len(schedule.list(alice.id)) == 4


def test_schedule_status_default(db_session, users):
    alice, _ = users
    item = ScheduleItemRepository(db_session).create(alice.id, {
        "title": "Read",
        "start_time": datetime(2026, 10, 20, 9),
        "end_time": datetime(2026, 10, 20, 10),
    })

    assert db_session.get(DBScheduleItem, item.id).status == "not-started"


# =============================================================================
# STUDY PROGRESS REPOSITORY TESTS
# =============================================================================

def test_progress_get_or_create_is_idempotent(db_session, users):
    alice, _ = users
    progress = StudyProgressRepository(db_session)

    first = progress.get_or_create(alice.id)
    second = progress.get_or_create(alice.id)

    assert first.id == second.id
    assert db_session.query(DBStudyProgress).count() == 1


def test_progress_upsert(db_session, users):
    alice, _ = users
    progress = StudyProgressRepository(db_session)

    record = progress.upsert(alice.id, {"study_hours": 4})
    record = progress.upsert(alice.id, {"bookmark_count": 2})

    assert record.study_hours == 4
    assert record.bookmark_count == 2
