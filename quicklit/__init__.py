"""Core package for the QuickLit document importer."""

from __future__ import annotations

from .importer import DocumentImporter, ImportOptions, ImportResult

__all__ = [
    "DocumentImporter",
    "ImportOptions",
    "ImportResult",
]

__version__ = "0.1.0"
