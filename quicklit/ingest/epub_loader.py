"""EPUB ingestion utilities."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
import posixpath
from typing import Dict, List, Optional, Sequence
from urllib.parse import unquote
import xml.etree.ElementTree as ET

from . import BadArchive, ExtractionResult
from .classifier import ChapterClassifier, Verdict
from .container import Container, open_container
from ..text.words import WordPositionAccumulator

LOGGER = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
OPF_MEDIA_TYPE = "application/oebps-package+xml"
CONTINUATION_PATTERNS_ENV = "QUICKLIT_CONTINUATION_PATTERNS"


@dataclass(frozen=True)
class SpineEntry:
    item_id: str
    href: str
    path: str
    declared_title: Optional[str] = None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _parse_xml(data: bytes, what: str) -> ET.Element:
    try:
        return ET.fromstring(data)
    except ET.ParseError as exc:
        raise BadArchive(f"Malformed {what}: {exc}") from exc


def find_opf_path(container_xml: bytes) -> str:
    """Return the package document path declared in ``container.xml``."""

    root = _parse_xml(container_xml, CONTAINER_PATH)
    for element in root.iter():
        if _local_name(element.tag) != "rootfile":
            continue
        if element.get("media-type") == OPF_MEDIA_TYPE and element.get("full-path"):
            return element.get("full-path")
    raise BadArchive("container.xml does not declare an OPF package document")


def extract_book_title(opf_xml: bytes | ET.Element) -> Optional[str]:
    """Return the first non-empty ``dc:title`` of the package metadata."""

    if isinstance(opf_xml, ET.Element):
        root = opf_xml
    else:
        root = _parse_xml(opf_xml, "package document")
    for element in root.iter():
        if _local_name(element.tag) == "title":
            title = "".join(element.itertext()).strip()
            if title:
                return title
    return None


def _resolve_href(base_dir: str, href: str) -> str:
    path = unquote(href.split("#", 1)[0])
    if base_dir:
        path = posixpath.join(base_dir, path)
    return posixpath.normpath(path)


def read_spine(opf_xml: bytes | ET.Element, opf_path: str) -> List[SpineEntry]:
    """Resolve the spine ``itemref`` list against the manifest, in order."""

    root = opf_xml if isinstance(opf_xml, ET.Element) else _parse_xml(opf_xml, opf_path)
    manifest: Dict[str, ET.Element] = {}
    idrefs: List[str] = []
    for element in root.iter():
        name = _local_name(element.tag)
        if name == "item" and element.get("id"):
            manifest.setdefault(element.get("id"), element)
        elif name == "spine":
            idrefs.extend(
                itemref.get("idref")
                for itemref in element
                if _local_name(itemref.tag) == "itemref" and itemref.get("idref")
            )

    base_dir = posixpath.dirname(opf_path)
    entries: List[SpineEntry] = []
    for idref in idrefs:
        item = manifest.get(idref)
        if item is None or not item.get("href"):
            LOGGER.debug("Spine references unknown manifest item %s", idref)
            continue
        href = item.get("href")
        declared = item.get("title") or "".join(item.itertext()).strip() or None
        entries.append(
            SpineEntry(
                item_id=idref,
                href=href,
                path=_resolve_href(base_dir, href),
                declared_title=declared,
            )
        )
    return entries


def _patterns_from_env() -> Optional[List[str]]:
    raw = os.getenv(CONTINUATION_PATTERNS_ENV)
    if raw is None:
        return None
    return [pattern for pattern in raw.split(os.pathsep) if pattern]


class EpubLoader:
    """Extract text and a chapter outline from EPUB files in spine order."""

    def __init__(
        self,
        *,
        continuation_patterns: Optional[Sequence[str]] = None,
    ) -> None:
        if continuation_patterns is None:
            continuation_patterns = _patterns_from_env()
        self.classifier = ChapterClassifier(continuation_patterns)

    def load(self, path: str | os.PathLike) -> ExtractionResult:
        """Load the EPUB at *path*."""

        with open_container(path) as container:
            return self.load_container(container)

    def load_container(self, container: Container) -> ExtractionResult:
        opf_path = find_opf_path(container.read(CONTAINER_PATH))
        opf_root = _parse_xml(container.read(opf_path), opf_path)
        spine = read_spine(opf_root, opf_path)
        if not spine:
            LOGGER.warning("EPUB %s has an empty spine", container.path.name)

        accumulator = WordPositionAccumulator()
        for entry in spine:
            self._add_entry(container, entry, accumulator)

        LOGGER.info(
            "Extracted %d chapters (%d words) from %s",
            len(accumulator.chapters),
            accumulator.word_count,
            container.path.name,
        )
        return accumulator.result(book_title=extract_book_title(opf_root))

    def _add_entry(
        self,
        container: Container,
        entry: SpineEntry,
        accumulator: WordPositionAccumulator,
    ) -> None:
        try:
            decision = self.classifier.classify(
                entry.href,
                container.read(entry.path),
                accumulator.seen_titles,
                declared_title=entry.declared_title or "",
            )
        except BadArchive as exc:
            LOGGER.warning("Skipping spine entry %s: %s", entry.href, exc)
            return
        if decision.verdict is Verdict.SKIP:
            return
        if decision.verdict is Verdict.CONTINUATION:
            accumulator.add_continuation(decision.body)
        else:
            accumulator.add_chapter(decision.title, decision.body, entry.href)


__all__ = ["EpubLoader", "SpineEntry", "extract_book_title", "find_opf_path", "read_spine"]
