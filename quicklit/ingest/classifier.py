"""Heuristics that turn EPUB content documents into chapters.

Each spine document is either skipped (navigation, front matter, empty),
merged into the preceding chapter as a continuation, or opens a new chapter
with a detected title. Title detection is an ordered chain of strategies over
the parsed document; the first strategy that produces a usable title wins and
the href based fallback always succeeds.
"""

from __future__ import annotations

import enum
import logging
import re
import unicodedata
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Iterable, Iterator, Optional, Pattern, Sequence, Set, Tuple

from bs4 import BeautifulSoup, Tag

from .html_text import (
    HEADING_TAGS,
    document_title,
    element_text,
    parse_document,
    remove_elements,
    visible_text,
)

LOGGER = logging.getLogger(__name__)

# Common class patterns for chapter titles, most specific first.
TITLE_SELECTORS = (
    "h1.chapter-title",
    "h2.chapter-title",
    "h3.chapter-title",
    ".chapter-title",
    ".chaptertitle",
    ".title-chapter",
    "h1.title",
    "h2.title",
    "h3.title",
    ".chapter h1",
    ".chapter h2",
    ".chapter h3",
    "section[epub\\:type='chapter'] h1",
    "section[epub\\:type='chapter'] h2",
)
CHAPTER_NUMBER_SELECTORS = ("h1.chapter-number", ".chapter-number", ".chapternumber")
# Substrings that mark an <h1> as a chapter number heading (case-insensitive).
CHAPTER_NUMBER_MARKERS = ("chapter", "prologue")
HEADING_SELECTOR = ", ".join(HEADING_TAGS)
TITLE_SWEEP_SELECTOR = "title, " + HEADING_SELECTOR

NAVIGATION_PATTERNS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"(toc|tableofcontents|nav|navigation|index)",
        r"(cover|titlepage)",
        r"(copyright|legal|notice)",
        r"(color inserts)",
        r"(table of contents page)",
        r"(title page)",
        r"(copyrights and credits)",
        r"(newsletter)",
    )
)
SKIP_PATTERNS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"(tableofcontents|toc|table of contents)",
        r"(color inserts)",
        r"(table of contents page)",
        r"(title page)",
        r"(copyrights and credits)",
        r"(newsletter)",
    )
)
DEFAULT_CONTINUATION_PATTERNS = (r"(?i)^text/",)

BOOK_TITLE_WORDS = re.compile(
    r"^(foreword|afterword|introduction|preface|appendix|index|glossary)$", re.I
)
BOOK_METADATA = re.compile(r"(copyright|published by|all rights|by .*|author[s]?)", re.I)
NUMERIC_ONLY = re.compile(r"^\d+$")
CHAPTER_NUMBER_PATTERNS = (
    re.compile(r"^(CHAPTER|Chapter|CHAP|Chap)?\s*\d+$"),
    re.compile(r"^\d+$"),
    re.compile(r"^(CHAPTER|Chapter)\s+\d+\s*:?$"),
    re.compile(r"^Part\s+\d+$"),
)
PROLOGUE = re.compile(r"prologue", re.I)
IMAGE_SUFFIX = re.compile(r"[^a-zA-Z0-9]+Image$", re.I)
NBSP_ENTITIES = ("&nbsp;", "&#160;", "\xa0")
REPEATED_SPACES = re.compile(r" {2,}")


def _is_trimmable(char: str) -> bool:
    return char.isspace() or unicodedata.category(char).startswith("P")


def clean_title_text(text: str) -> str:
    """Normalise a raw heading into a display title."""

    cleaned = text.strip()
    for entity in NBSP_ENTITIES:
        cleaned = cleaned.replace(entity, " ")
    cleaned = REPEATED_SPACES.sub(" ", cleaned)
    start, end = 0, len(cleaned)
    while start < end and _is_trimmable(cleaned[start]):
        start += 1
    while end > start and _is_trimmable(cleaned[end - 1]):
        end -= 1
    return cleaned[start:end]


def is_likely_book_title(text: str) -> bool:
    """Return ``True`` when *text* reads like book metadata, not a chapter."""

    trimmed = text.strip()
    lowered = trimmed.lower()
    return (
        len(trimmed) < 3
        or len(trimmed) > 100
        or BOOK_TITLE_WORDS.search(trimmed) is not None
        or BOOK_METADATA.search(trimmed) is not None
        or NUMERIC_ONLY.search(trimmed) is not None
        or lowered == "chapter"
        or lowered == "part"
    )


def is_chapter_number(text: str) -> bool:
    """Return ``True`` when *text* is a bare chapter number like ``CHAPTER 3``."""

    trimmed = text.strip()
    return any(pattern.search(trimmed) for pattern in CHAPTER_NUMBER_PATTERNS)


def _matches_any(patterns: Iterable[Pattern[str]], *values: str) -> bool:
    return any(pattern.search(value) for pattern in patterns for value in values)


def is_navigation_item(href: str, title: str = "") -> bool:
    return _matches_any(NAVIGATION_PATTERNS, href, title)


def should_skip_chapter(title: str, href: str) -> bool:
    return _matches_any(SKIP_PATTERNS, title, href)


# Title strategies -----------------------------------------------------------------

TitleStrategy = Callable[[BeautifulSoup], Optional[str]]


def _usable_title(text: str) -> Optional[str]:
    if not text or is_likely_book_title(text):
        return None
    return clean_title_text(text) or None


def title_from_common_patterns(soup: BeautifulSoup) -> Optional[str]:
    for selector in TITLE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        title = _usable_title(element_text(element))
        if title:
            return title
    return None


def _chapter_number_elements(soup: BeautifulSoup) -> Iterator[Tag]:
    for selector in CHAPTER_NUMBER_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            yield element
    headings = soup.find_all("h1")
    for marker in CHAPTER_NUMBER_MARKERS:
        for heading in headings:
            if marker in element_text(heading).lower():
                yield heading
                break


def title_from_chapter_number(soup: BeautifulSoup) -> Optional[str]:
    """Find the real title next to a ``CHAPTER 1`` style number heading."""

    for number_element in _chapter_number_elements(soup):
        sibling = number_element.find_next_sibling()
        if sibling is not None and sibling.name in HEADING_TAGS:
            title = _usable_title(element_text(sibling))
            if title:
                return title
        title_element = soup.select_one("h1.chapter-title")
        if title_element is not None:
            title = _usable_title(element_text(title_element))
            if title:
                return title
        if PROLOGUE.search(element_text(number_element)):
            return "Prologue"
    return None


def title_from_headings(soup: BeautifulSoup) -> Optional[str]:
    for heading in soup.select(HEADING_SELECTOR):
        text = element_text(heading)
        if not text or is_likely_book_title(text) or is_chapter_number(text):
            continue
        if PROLOGUE.search(text):
            return "Prologue"
        title = clean_title_text(text)
        if title:
            return title
    return None


def title_from_title_tag(soup: BeautifulSoup) -> Optional[str]:
    return _usable_title(document_title(soup))


TITLE_STRATEGIES: Tuple[TitleStrategy, ...] = (
    title_from_common_patterns,
    title_from_chapter_number,
    title_from_headings,
    title_from_title_tag,
)


def fallback_title(href: str) -> str:
    stem = PurePosixPath(href.split("#", 1)[0]).stem
    return stem or "Chapter"


def detect_title(soup: BeautifulSoup, href: str) -> str:
    for strategy in TITLE_STRATEGIES:
        title = strategy(soup)
        if title:
            LOGGER.debug("Title %r for %s from %s", title, href, strategy.__name__)
            return title
    return fallback_title(href)


def strip_title(soup: BeautifulSoup, title: str) -> None:
    """Remove the element carrying *title* so the body does not repeat it."""

    for selector in TITLE_SELECTORS:
        element = soup.select_one(selector)
        if element is not None and clean_title_text(element_text(element)) == title:
            element.decompose()
            break
    root = soup.body or soup
    for heading in root.select(TITLE_SWEEP_SELECTOR):
        if clean_title_text(element_text(heading)) == title:
            heading.decompose()
            break


# Classification -------------------------------------------------------------------


class Verdict(enum.Enum):
    SKIP = "skip"
    CONTINUATION = "continuation"
    NEW_CHAPTER = "new_chapter"


@dataclass(frozen=True)
class ClassificationDecision:
    verdict: Verdict
    title: Optional[str] = None
    body: str = ""


SKIP = ClassificationDecision(Verdict.SKIP)


class ChapterClassifier:
    """Decide what a single spine document contributes to the book."""

    def __init__(self, continuation_patterns: Optional[Sequence[str]] = None) -> None:
        if continuation_patterns is None:
            continuation_patterns = DEFAULT_CONTINUATION_PATTERNS
        self.continuation_patterns = [re.compile(p) for p in continuation_patterns]

    def is_continuation(self, title: str, href: str, seen_titles: Set[str]) -> bool:
        if any(pattern.search(href) for pattern in self.continuation_patterns):
            return True
        if title in seen_titles:
            return True
        match = IMAGE_SUFFIX.search(title)
        return match is not None and title[: match.start()] in seen_titles

    def classify(
        self,
        href: str,
        markup: bytes | str,
        seen_titles: Set[str],
        declared_title: str = "",
    ) -> ClassificationDecision:
        if is_navigation_item(href, declared_title):
            LOGGER.debug("Skipping navigation document %s", href)
            return SKIP

        soup = parse_document(markup)
        remove_elements(soup, ("script", "style"))
        title = detect_title(soup, href)
        if should_skip_chapter(title, href):
            LOGGER.debug("Skipping front matter %s (%s)", href, title)
            return SKIP

        strip_title(soup, title)
        body = visible_text(soup).strip()
        if not body:
            LOGGER.debug("Skipping empty document %s", href)
            return SKIP

        if self.is_continuation(title, href, seen_titles):
            LOGGER.debug("Treating %s (%s) as a continuation", href, title)
            return ClassificationDecision(Verdict.CONTINUATION, title=title, body=body)
        return ClassificationDecision(Verdict.NEW_CHAPTER, title=title, body=body)


__all__ = [
    "ChapterClassifier",
    "ClassificationDecision",
    "TITLE_STRATEGIES",
    "Verdict",
    "clean_title_text",
    "detect_title",
    "fallback_title",
    "is_chapter_number",
    "is_likely_book_title",
    "is_navigation_item",
    "should_skip_chapter",
    "strip_title",
]
