"""Import pipeline shared by the CLI and library callers.

One call turns a file on disk into a :class:`~quicklit.library.ReadingMaterial`.
EPUB files keep their chapter outline; every other format becomes plain text.
Batch imports process each file independently so a single bad file never
stops the rest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence
import time

from .ingest import ExtractionError, ExtractionResult
from .ingest.epub_loader import EpubLoader
from .ingest.formats import DocumentFormat, extract_epub, extract_plain_text, require_format
from .library import ReadingMaterial
from .text.filenames import sanitize_file_name

__all__ = [
    "DocumentImporter",
    "ImportFailure",
    "ImportOptions",
    "ImportResult",
    "export_material",
]

logger = logging.getLogger(__name__)


@dataclass
class ImportOptions:
    """Options that control how documents are imported."""

    title: Optional[str] = None
    with_chapters: bool = True
    continuation_patterns: Optional[Sequence[str]] = None

    def __post_init__(self) -> None:
        if self.title is not None and not self.title.strip():
            raise ValueError("title must not be blank")


@dataclass
class ImportFailure:
    path: Path
    message: str


@dataclass
class ImportResult:
    """Outcome of importing a batch of files."""

    materials: List[ReadingMaterial] = field(default_factory=list)
    failures: List[ImportFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures


class DocumentImporter:
    """Turn supported documents into reading materials."""

    def __init__(self, options: Optional[ImportOptions] = None) -> None:
        self.options = options or ImportOptions()
        self.epub_loader = EpubLoader(continuation_patterns=self.options.continuation_patterns)

    # Public API -----------------------------------------------------------------
    def extract(self, path: Path) -> ExtractionResult:
        fmt = require_format(path)
        if fmt is DocumentFormat.EPUB:
            result = extract_epub(path, fmt, loader=self.epub_loader)
            if not self.options.with_chapters:
                return ExtractionResult(full_text=result.full_text, book_title=result.book_title)
            return result
        return ExtractionResult(full_text=extract_plain_text(path, fmt))

    def import_file(self, path: Path) -> ReadingMaterial:
        path = Path(path)
        logger.debug("Importing %s", path)
        result = self.extract(path)
        title = self.options.title or path.stem
        chapters = result.chapters if result.chapters else None
        material = ReadingMaterial.create(title, result.full_text, chapters=chapters)
        if chapters:
            logger.info("Imported %s with %d chapters as %r", path.name, len(chapters), title)
        else:
            logger.info("Imported %s as %r", path.name, title)
        return material

    def import_files(self, paths: Iterable[Path]) -> ImportResult:
        start_time = time.perf_counter()
        result = ImportResult()
        for path in paths:
            path = Path(path)
            try:
                result.materials.append(self.import_file(path))
            except ExtractionError as exc:
                logger.error("Failed to import %s: %s", path.name, exc)
                result.failures.append(ImportFailure(path, exc.message))
            except OSError as exc:
                logger.error("Failed to import %s: %s", path.name, exc)
                result.failures.append(ImportFailure(path, f"Error reading file: {exc}"))
        result.elapsed_seconds = time.perf_counter() - start_time
        logger.info(
            "Imported %d of %d files in %.2fs",
            len(result.materials),
            len(result.materials) + len(result.failures),
            result.elapsed_seconds,
        )
        return result


def export_material(material: ReadingMaterial, output_dir: Path) -> List[Path]:
    """Write the material text (and chapter outline, if any) to *output_dir*."""

    output_dir.mkdir(parents=True, exist_ok=True)
    stem = sanitize_file_name(material.title)
    text_path = output_dir / sanitize_file_name(f"{material.title}.txt")
    text_path.write_text(material.content, encoding="utf-8")
    written = [text_path]

    chapters = material.chapters
    if chapters:
        outline_path = output_dir / f"{stem}.chapters.json"
        outline = [chapter.to_dict() for chapter in chapters]
        outline_path.write_text(json.dumps(outline, indent=2), encoding="utf-8")
        written.append(outline_path)
    logger.debug("Exported %s to %s", material.title, ", ".join(str(p) for p in written))
    return written
