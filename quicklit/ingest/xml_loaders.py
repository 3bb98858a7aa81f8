"""Streaming extractors for the XML based formats: DOCX, FB2 and ODT.

Each format gets a small parser object whose ``start``/``end`` methods are
driven by :class:`xml.etree.ElementTree.XMLPullParser` events. Paragraph
elements are cleared once consumed so large documents stream in bounded
memory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List
import xml.etree.ElementTree as ET

from . import BadArchive
from .container import open_container

LOGGER = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
PARAGRAPH_SEPARATOR = "\n\n"

WORD_NAMESPACES = (
    "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "http://purl.oclc.org/ooxml/wordprocessingml/main",
)
ODF_TEXT_NAMESPACE = "urn:oasis:names:tc:opendocument:xmlns:text:1.0"

DOCX_DOCUMENT = "word/document.xml"
ODT_CONTENT = "content.xml"


def _split_tag(tag: str) -> tuple[str, str]:
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return "", tag


class _EventParser:
    def start(self, element: ET.Element) -> None:
        pass

    def end(self, element: ET.Element) -> None:
        pass


def stream_parse(data: bytes, handler: _EventParser, *, name: str = "document") -> None:
    """Feed *data* through *handler* as start/end element events."""

    parser = ET.XMLPullParser(events=("start", "end"))
    try:
        for offset in range(0, len(data), CHUNK_SIZE):
            parser.feed(data[offset : offset + CHUNK_SIZE])
            _dispatch(parser, handler)
        parser.close()
        _dispatch(parser, handler)
    except ET.ParseError as exc:
        raise BadArchive(f"Malformed XML in {name}: {exc}") from exc


def _dispatch(parser: ET.XMLPullParser, handler: _EventParser) -> None:
    for event, element in parser.read_events():
        if event == "start":
            handler.start(element)
        else:
            handler.end(element)


class DocxParagraphParser(_EventParser):
    """Collect ``w:p`` paragraphs of ``word/document.xml``."""

    def __init__(self) -> None:
        self.paragraphs: List[str] = []
        self.run_depth = 0

    def start(self, element: ET.Element) -> None:
        namespace, local = _split_tag(element.tag)
        if namespace not in WORD_NAMESPACES:
            return
        if local == "r":
            self.run_depth += 1

    def end(self, element: ET.Element) -> None:
        namespace, local = _split_tag(element.tag)
        if namespace not in WORD_NAMESPACES:
            return
        if local == "r":
            self.run_depth -= 1
        elif local in ("br", "cr") and self.run_depth:
            element.text = "\n"
        elif local == "tab" and self.run_depth:
            element.text = "\t"
        elif local == "p":
            text = "".join(element.itertext())
            if text.strip():
                self.paragraphs.append(text)
            element.clear()

    @property
    def text(self) -> str:
        return PARAGRAPH_SEPARATOR.join(self.paragraphs)


class Fb2SectionParser(_EventParser):
    """Group FictionBook ``<p>`` paragraphs into section sized blocks."""

    def __init__(self) -> None:
        self.sections: List[str] = []
        self.current_section: List[str] = []

    def end(self, element: ET.Element) -> None:
        local = _split_tag(element.tag)[1]
        if local == "p":
            text = "".join(element.itertext()).strip()
            if text:
                self.current_section.append(text)
            element.clear()
        elif local in ("section", "body"):
            self.flush()

    def flush(self) -> None:
        if self.current_section:
            self.sections.append(PARAGRAPH_SEPARATOR.join(self.current_section))
            self.current_section = []


class OdtParagraphParser(_EventParser):
    """Collect trimmed ``text:p`` paragraphs of an ODT ``content.xml``."""

    SPACING = {"tab": "\t", "line-break": "\n"}

    def __init__(self) -> None:
        self.paragraphs: List[str] = []
        self.in_paragraph = False

    def start(self, element: ET.Element) -> None:
        if element.tag == f"{{{ODF_TEXT_NAMESPACE}}}p":
            self.in_paragraph = True

    def end(self, element: ET.Element) -> None:
        namespace, local = _split_tag(element.tag)
        if namespace != ODF_TEXT_NAMESPACE:
            return
        if local == "s" and self.in_paragraph:
            count = element.get(f"{{{ODF_TEXT_NAMESPACE}}}c", "1")
            element.text = " " * (int(count) if count.isdigit() else 1)
        elif local in self.SPACING and self.in_paragraph:
            element.text = self.SPACING[local]
        elif local == "p":
            self.in_paragraph = False
            text = "".join(element.itertext()).strip()
            if text:
                self.paragraphs.append(text)
            element.clear()


def load_docx(path: str | os.PathLike) -> str:
    with open_container(path) as container:
        data = container.read(DOCX_DOCUMENT)
    parser = DocxParagraphParser()
    stream_parse(data, parser, name=DOCX_DOCUMENT)
    LOGGER.debug("Read %d paragraphs from %s", len(parser.paragraphs), path)
    return parser.text


def load_fb2(path: str | os.PathLike) -> str:
    parser = Fb2SectionParser()
    stream_parse(Path(path).read_bytes(), parser, name=Path(path).name)
    parser.flush()
    if not parser.sections:
        raise BadArchive(f"No sections found in {path}")
    LOGGER.debug("Read %d sections from %s", len(parser.sections), path)
    return PARAGRAPH_SEPARATOR.join(parser.sections)


def load_odt(path: str | os.PathLike) -> str:
    with open_container(path) as container:
        data = container.read(ODT_CONTENT)
    parser = OdtParagraphParser()
    stream_parse(data, parser, name=ODT_CONTENT)
    if not parser.paragraphs:
        raise BadArchive(f"No paragraphs found in {path}")
    LOGGER.debug("Read %d paragraphs from %s", len(parser.paragraphs), path)
    return PARAGRAPH_SEPARATOR.join(parser.paragraphs)


__all__ = [
    "DocxParagraphParser",
    "Fb2SectionParser",
    "OdtParagraphParser",
    "load_docx",
    "load_fb2",
    "load_odt",
    "stream_parse",
]
