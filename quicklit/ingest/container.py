"""Archive access for the ZIP based formats (EPUB, DOCX, ODT)."""

from __future__ import annotations

import logging
import posixpath
import zipfile
import zlib
from pathlib import Path
from typing import Iterator, Optional

from . import BadArchive

LOGGER = logging.getLogger(__name__)


def _normalise_entry_path(path: str) -> str:
    path = path.replace("\\", "/").lstrip("/")
    normalised = posixpath.normpath(path) if path else path
    return "" if normalised == "." else normalised


class Container:
    """Read-only view over the entries of a ZIP container.

    Use as a context manager so the underlying file handle is released on
    every exit path.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        try:
            self._archive = zipfile.ZipFile(self.path, "r")
        except (zipfile.BadZipFile, OSError) as exc:
            raise BadArchive(f"Cannot open archive {self.path}: {exc}") from exc

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._archive.close()

    def entries(self) -> Iterator[str]:
        for info in self._archive.infolist():
            if not info.is_dir():
                yield info.filename

    def find(self, path: str) -> Optional[str]:
        """Return the stored entry name for *path*, or ``None`` if absent."""

        try:
            self._archive.getinfo(path)
            return path
        except KeyError:
            pass
        wanted = _normalise_entry_path(path)
        for name in self.entries():
            if _normalise_entry_path(name) == wanted:
                return name
        return None

    def read(self, path: str) -> bytes:
        """Return the decompressed contents of *path*.

        Raises :class:`BadArchive` when the entry is missing or corrupt.
        """

        name = self.find(path)
        if name is None:
            raise BadArchive(f"Missing entry {path!r} in {self.path.name}")
        try:
            return self._archive.read(name)
        except (zipfile.BadZipFile, zlib.error, OSError, EOFError) as exc:
            raise BadArchive(f"Cannot read entry {path!r}: {exc}") from exc


def open_container(path: Path | str) -> Container:
    LOGGER.debug("Opening container %s", path)
    return Container(path)


__all__ = ["Container", "open_container"]
