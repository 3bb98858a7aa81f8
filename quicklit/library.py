"""Reading material records and the stored form of their chapter outline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
from typing import List, Optional, Sequence
import uuid

from .ingest import Chapter
from .text.words import count_words

logger = logging.getLogger(__name__)


def serialize_chapters(chapters: Optional[Sequence[Chapter]]) -> Optional[bytes]:
    """Encode *chapters* as the JSON blob stored next to the material text."""

    if chapters is None:
        return None
    return json.dumps([chapter.to_dict() for chapter in chapters]).encode("utf-8")


def deserialize_chapters(data: Optional[bytes]) -> Optional[List[Chapter]]:
    """Decode a chapter blob; malformed records are dropped."""

    if data is None:
        return None
    try:
        records = json.loads(data)
    except (ValueError, UnicodeDecodeError):
        logger.warning("Discarding unreadable chapter data")
        return None
    if not isinstance(records, list):
        return None

    chapters: List[Chapter] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        title = record.get("title")
        start = record.get("startPosition")
        href = record.get("href")
        if not isinstance(title, str) or not isinstance(href, str):
            continue
        if not isinstance(start, int) or isinstance(start, bool):
            continue
        chapters.append(Chapter(title=title, start_position=start, href=href))
    return chapters


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ReadingMaterial:
    """A document in the library together with the reader's progress."""

    title: str
    content: str
    current_position: int = 0
    chapter_data: Optional[bytes] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=_now)
    last_read_at: datetime = field(default_factory=_now)
    word_count: int = field(init=False)

    def __post_init__(self) -> None:
        if self.current_position < 0:
            raise ValueError("current_position must not be negative")
        self.word_count = count_words(self.content)

    @classmethod
    def create(
        cls,
        title: str,
        content: str,
        *,
        current_position: int = 0,
        chapters: Optional[Sequence[Chapter]] = None,
    ) -> "ReadingMaterial":
        return cls(
            title=title,
            content=content,
            current_position=current_position,
            chapter_data=serialize_chapters(chapters),
        )

    @property
    def chapters(self) -> Optional[List[Chapter]]:
        return deserialize_chapters(self.chapter_data)

    def set_chapters(self, chapters: Optional[Sequence[Chapter]]) -> None:
        self.chapter_data = serialize_chapters(chapters)


__all__ = ["ReadingMaterial", "deserialize_chapters", "serialize_chapters"]
