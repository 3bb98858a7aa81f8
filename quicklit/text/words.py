"""Word tokenisation shared by chapter building and playback.

Chapter start positions are only meaningful if every consumer splits the text
the same way, so all word counting goes through :func:`split_words`.
"""

from __future__ import annotations

from typing import List, Optional, Set

from ..ingest import Chapter, ExtractionResult

PARAGRAPH_SEPARATOR = "\n\n"


def split_words(text: str) -> List[str]:
    """Split *text* on whitespace and newlines, dropping empty tokens."""

    return text.split()


def count_words(text: str) -> int:
    return len(split_words(text))


class WordPositionAccumulator:
    """Running state of a spine walk: text so far, chapters and seen titles."""

    def __init__(self) -> None:
        self._parts: List[str] = []
        self.chapters: List[Chapter] = []
        self.seen_titles: Set[str] = set()
        self.word_count = 0

    def add_chapter(self, title: str, body: str, href: str) -> Chapter:
        chapter = Chapter(title=title, start_position=self.word_count, href=href)
        self.chapters.append(chapter)
        self.seen_titles.add(title)
        self._append(body)
        return chapter

    def add_continuation(self, body: str) -> None:
        self._append(body)

    def _append(self, body: str) -> None:
        self._parts.append(body)
        self.word_count += count_words(body)

    @property
    def full_text(self) -> str:
        return PARAGRAPH_SEPARATOR.join(self._parts)

    def result(self, book_title: Optional[str] = None) -> ExtractionResult:
        return ExtractionResult(
            full_text=self.full_text,
            chapters=list(self.chapters),
            book_title=book_title,
        )


__all__ = [
    "PARAGRAPH_SEPARATOR",
    "WordPositionAccumulator",
    "count_words",
    "split_words",
]
