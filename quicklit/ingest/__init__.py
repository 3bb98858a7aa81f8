"""Document ingestion for QuickLit.

Every supported format is reduced to one plain-text stream. EPUB files
additionally yield a chapter outline keyed by word position.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


class ExtractionError(Exception):
    """Base class for failures that abort the import of a single file."""

    message = "The file could not be imported."

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class UnsupportedFormat(ExtractionError):
    message = "The file format is not supported or the file is corrupted."


class BadArchive(ExtractionError):
    message = "The file could not be opened or processed."


class UnsupportedYet(ExtractionError):
    message = "This format support is coming soon."


@dataclass(frozen=True)
class Chapter:
    """A navigable chapter starting at a word index of the extracted text."""

    title: str
    start_position: int
    href: str

    @property
    def source_ref(self) -> str:
        return self.href

    def to_dict(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "startPosition": self.start_position,
            "href": self.href,
        }


@dataclass
class ExtractionResult:
    """Output of a single import: the text body plus its chapter outline."""

    full_text: str
    chapters: List[Chapter] = field(default_factory=list)
    book_title: Optional[str] = None


__all__ = [
    "BadArchive",
    "Chapter",
    "ExtractionError",
    "ExtractionResult",
    "UnsupportedFormat",
    "UnsupportedYet",
]
