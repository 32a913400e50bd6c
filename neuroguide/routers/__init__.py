"""
API Routers for the NeuroGuide backend.

Each router handles one resource, mounted under /api by main.create_app:
- auth: Register, login, current account
- topics: Topic CRUD
- study_guides: PDF upload, retrieval and metadata CRUD
- videos: Video CRUD
- schedule: Schedule item CRUD with day filter
- bookmarks: Bookmark CRUD
- notes: Note CRUD
- study_progress: Per-user progress counters
- search: Cross-entity text search
"""

from . import (
    auth,
    bookmarks,
    notes,
    schedule,
    search,
    study_guides,
    study_progress,
    topics,
    videos,
)

__all__ = [
    "auth",
    "bookmarks",
    "notes",
    "schedule",
    "search",
    "study_guides",
    "study_progress",
    "topics",
    "videos",
]
