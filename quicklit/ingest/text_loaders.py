"""Loaders for the single-file text formats: plain text, RTF and HTML."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from striprtf.striprtf import rtf_to_text

from . import BadArchive
from .html_text import parse_document, remove_elements, visible_text

LOGGER = logging.getLogger(__name__)

HTML_NOISE_TAGS = ("script", "style", "nav", "header", "footer")


def _read_bytes(path: str | os.PathLike) -> bytes:
    return Path(path).read_bytes()


def load_plain_text(path: str | os.PathLike) -> str:
    """Return the file contents verbatim.

    Bytes are decoded without newline translation so valid UTF-8 round-trips
    exactly.
    """

    raw = _read_bytes(path)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        LOGGER.warning("Failed to decode %s as UTF-8; attempting latin-1", path)
        return raw.decode("latin-1")


def load_rtf(path: str | os.PathLike) -> str:
    """Strip RTF control words and groups, keeping the text runs."""

    raw = _read_bytes(path)
    try:
        source = raw.decode("utf-8")
    except UnicodeDecodeError:
        source = raw.decode("latin-1")
    try:
        return rtf_to_text(source)
    except (UnicodeDecodeError, ValueError) as exc:
        raise BadArchive(f"Cannot decode RTF {path}: {exc}") from exc


def load_html(path: str | os.PathLike) -> str:
    """Return the readable text of an HTML page without scripts or chrome."""

    soup = parse_document(_read_bytes(path))
    remove_elements(soup, HTML_NOISE_TAGS)
    return visible_text(soup)


__all__ = ["load_html", "load_plain_text", "load_rtf"]
