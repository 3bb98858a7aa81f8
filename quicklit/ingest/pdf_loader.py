"""PDF ingestion utilities."""

from __future__ import annotations

import logging
import os
from typing import List

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from . import BadArchive

LOGGER = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


class PdfLoader:
    """Extract page text from PDFs in page order."""

    def load(self, path: str | os.PathLike) -> str:
        try:
            reader = PdfReader(path)
            page_texts = [page.extract_text() or "" for page in reader.pages]
        except (PdfReadError, OSError, ValueError) as exc:
            raise BadArchive(f"Cannot read PDF {path}: {exc}") from exc

        pages: List[str] = []
        for page_index, text in enumerate(page_texts):
            if not text.strip():
                LOGGER.debug("Skipping page %d without extractable text", page_index + 1)
                continue
            pages.append(text)
        LOGGER.debug("Extracted text from %d of %d pages", len(pages), len(page_texts))
        return PAGE_SEPARATOR.join(pages).strip()


__all__ = ["PdfLoader"]
