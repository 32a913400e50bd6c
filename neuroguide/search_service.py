"""
Cross-entity search over a user's study material.

Loads the user's topics, study guides, videos and notes and keeps those whose
text fields contain the query (case-insensitive). Cost grows linearly with the
number of records the user owns; the four loads run one after another on the
request's session.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from .db_models import DBNote, DBStudyGuide, DBTopic, DBVideo
from .repository import NoteRepository, StudyGuideRepository, TopicRepository, VideoRepository
from .sanitization import normalize_search_query

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SearchHits:
    topics: List[DBTopic] = field(default_factory=list)
    study_guides: List[DBStudyGuide] = field(default_factory=list)
    videos: List[DBVideo] = field(default_factory=list)
    notes: List[DBNote] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.topics) + len(self.study_guides) + len(self.videos) + len(self.notes)


def _contains(needle: str, *haystacks: Optional[str]) -> bool:
    return any(h and needle in h.casefold() for h in haystacks)


def _matching(records: Iterable[T], needle: str, fields: Callable[[T], Sequence[Optional[str]]]) -> List[T]:
    return [record for record in records if _contains(needle, *fields(record))]


class SearchService:
    def __init__(
        self,
        topics: TopicRepository,
        study_guides: StudyGuideRepository,
        videos: VideoRepository,
        notes: NoteRepository,
    ):
        self.topics = topics
        self.study_guides = study_guides
        self.videos = videos
        self.notes = notes

    def search(self, user_id: str, query: str) -> SearchHits:
        """
        Match ``query`` against:
            topics: name, description
            study guides: title, fileName
            videos: title, description
            notes: title, content

        An empty (or whitespace) query matches nothing; callers reject it first.
        """
        needle = normalize_search_query(query)
        if not needle:
            return SearchHits()

        hits = SearchHits(
            topics=_matching(self.topics.list(user_id), needle, lambda t: (t.name, t.description)),
            study_guides=_matching(self.study_guides.list(user_id), needle, lambda g: (g.title, g.file_name)),
            videos=_matching(self.videos.list(user_id), needle, lambda v: (v.title, v.description)),
            notes=_matching(self.notes.list(user_id), needle, lambda n: (n.title, n.content)),
        )
        logger.debug(f"Search for user {user_id} matched {hits.total} records")
        return hits
