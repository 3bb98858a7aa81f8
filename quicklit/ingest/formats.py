"""Supported document formats and the extractor registered for each."""

from __future__ import annotations

import enum
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Callable, List, Mapping, NamedTuple, Optional, Tuple

from . import ExtractionResult, UnsupportedFormat
from .epub_loader import EpubLoader
from .pdf_loader import PdfLoader
from .text_loaders import load_html, load_plain_text, load_rtf
from .xml_loaders import load_docx, load_fb2, load_odt

LOGGER = logging.getLogger(__name__)

TextExtractor = Callable[[Path], str]


class DocumentFormat(enum.Enum):
    PLAIN_TEXT = "plain_text"
    RTF = "rtf"
    DOCX = "docx"
    EPUB = "epub"
    PDF = "pdf"
    HTML = "html"
    FB2 = "fb2"
    ODT = "odt"


class FormatInfo(NamedTuple):
    format: DocumentFormat
    extensions: Tuple[str, ...]
    media_type: str


SUPPORTED_FORMATS: Tuple[FormatInfo, ...] = (
    FormatInfo(DocumentFormat.PLAIN_TEXT, ("txt",), "text/plain"),
    FormatInfo(DocumentFormat.RTF, ("rtf",), "application/rtf"),
    FormatInfo(
        DocumentFormat.DOCX,
        ("docx",),
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ),
    FormatInfo(DocumentFormat.EPUB, ("epub",), "application/epub+zip"),
    FormatInfo(DocumentFormat.PDF, ("pdf",), "application/pdf"),
    FormatInfo(DocumentFormat.HTML, ("html", "htm"), "text/html"),
    FormatInfo(DocumentFormat.FB2, ("fb2",), "application/x-fictionbook+xml"),
    FormatInfo(DocumentFormat.ODT, ("odt",), "application/vnd.oasis.opendocument.text"),
)

_EXTENSION_INDEX: Mapping[str, DocumentFormat] = MappingProxyType(
    {ext: info.format for info in SUPPORTED_FORMATS for ext in info.extensions}
)


def _epub_text(path: Path) -> str:
    return EpubLoader().load(path).full_text


EXTRACTORS: Mapping[DocumentFormat, TextExtractor] = MappingProxyType(
    {
        DocumentFormat.PLAIN_TEXT: load_plain_text,
        DocumentFormat.RTF: load_rtf,
        DocumentFormat.DOCX: load_docx,
        DocumentFormat.EPUB: _epub_text,
        DocumentFormat.PDF: PdfLoader().load,
        DocumentFormat.HTML: load_html,
        DocumentFormat.FB2: load_fb2,
        DocumentFormat.ODT: load_odt,
    }
)


def supported_extensions() -> List[str]:
    """All supported extensions, lowercase, in registry order."""

    return [ext for info in SUPPORTED_FORMATS for ext in info.extensions]


def allowed_media_types() -> List[str]:
    return [info.media_type for info in SUPPORTED_FORMATS]


def _natural_list(items: List[str]) -> str:
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} or {items[1]}"
    return ", ".join(items[:-1]) + ", or " + items[-1]


def supported_extensions_display() -> str:
    """Human readable list such as ``"TXT, RTF, ..., or ODT"``."""

    return _natural_list([ext.upper() for ext in supported_extensions()])


def supported_extensions_display_lines() -> List[str]:
    """The uppercase extensions split into two roughly equal lines."""

    extensions = [ext.upper() for ext in supported_extensions()]
    mid = (len(extensions) + 1) // 2
    return [", ".join(extensions[:mid]), ", ".join(extensions[mid:])]


def format_for_path(path: str | os.PathLike) -> Optional[DocumentFormat]:
    """Return the format for *path* by extension, or ``None`` if unsupported."""

    extension = Path(path).suffix.lower().lstrip(".")
    return _EXTENSION_INDEX.get(extension)


def require_format(path: str | os.PathLike) -> DocumentFormat:
    fmt = format_for_path(path)
    if fmt is None:
        raise UnsupportedFormat(f"Unsupported file type: {Path(path).name}")
    return fmt


def extract_plain_text(path: str | os.PathLike, fmt: Optional[DocumentFormat] = None) -> str:
    """Extract the whole text of *path*; EPUB files yield their full text."""

    fmt = fmt or require_format(path)
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    LOGGER.debug("Extracting %s as %s", path, fmt.value)
    return EXTRACTORS[fmt](path)


def extract_epub(
    path: str | os.PathLike,
    fmt: Optional[DocumentFormat] = None,
    *,
    loader: Optional[EpubLoader] = None,
) -> ExtractionResult:
    """Extract text and chapters; only valid for EPUB input."""

    fmt = fmt or require_format(path)
    if fmt is not DocumentFormat.EPUB:
        raise UnsupportedFormat(f"Chapter extraction requires an EPUB, got {fmt.value}")
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    return (loader or EpubLoader()).load(path)


__all__ = [
    "DocumentFormat",
    "EXTRACTORS",
    "FormatInfo",
    "SUPPORTED_FORMATS",
    "allowed_media_types",
    "extract_epub",
    "extract_plain_text",
    "format_for_path",
    "require_format",
    "supported_extensions",
    "supported_extensions_display",
    "supported_extensions_display_lines",
]
