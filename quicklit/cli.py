"""Command line interface for the QuickLit document importer."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .importer import DocumentImporter, ImportOptions, export_material
from .ingest.formats import supported_extensions_display, supported_extensions_display_lines
from . import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quicklit-import",
        description=(
            "Extract the readable text of ebooks and documents, with a word "
            "indexed chapter outline for EPUB files."
        ),
    )
    parser.add_argument(
        "--in",
        dest="input_paths",
        type=Path,
        action="append",
        default=[],
        metavar="PATH",
        help="Document to import (repeatable)",
    )
    parser.add_argument("--title", help="Title for the imported material (single input only)")
    parser.add_argument("--out", dest="output_dir", type=Path, help="Directory to export text and chapters to")
    parser.add_argument(
        "--no-chapters",
        dest="with_chapters",
        action="store_false",
        help="Import EPUB files as plain text without a chapter outline",
    )
    parser.add_argument(
        "--continuation-pattern",
        dest="continuation_patterns",
        action="append",
        metavar="REGEX",
        help="Href pattern marking EPUB documents that continue the previous chapter (repeatable)",
    )
    parser.add_argument("--formats", action="store_true", help="List supported file formats and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")
    parser.add_argument("--version", action="version", version=f"quicklit-import {__version__}")
    return parser


def configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def create_options(namespace: argparse.Namespace) -> ImportOptions:
    if namespace.title and len(namespace.input_paths) > 1:
        raise ValueError("--title can only be used with a single input file")
    return ImportOptions(
        title=namespace.title,
        with_chapters=namespace.with_chapters,
        continuation_patterns=namespace.continuation_patterns,
    )


def print_formats() -> None:
    print("Supported formats:")
    for line in supported_extensions_display_lines():
        print(f"  {line}")
    print(f"Please use {supported_extensions_display()} files.")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.formats:
        print_formats()
        return 0
    if not args.input_paths:
        parser.error("at least one --in PATH is required")

    configure_logging(args.verbose, args.quiet)
    try:
        options = create_options(args)
    except ValueError as exc:
        logging.getLogger(__name__).error(str(exc))
        return 2

    importer = DocumentImporter(options)
    result = importer.import_files(args.input_paths)

    for material in result.materials:
        chapters = material.chapters or []
        print(f"Imported {material.title!r}: {material.word_count} words, {len(chapters)} chapters")
        for chapter in chapters:
            print(f"  [{chapter.start_position:>7}] {chapter.title}")
        if args.output_dir:
            for written in export_material(material, args.output_dir):
                print(f"Wrote {written}")
    for failure in result.failures:
        print(f"Could not import {failure.path.name}: {failure.message}")
    print(f"Elapsed: {result.elapsed_seconds:.2f}s")
    return 0 if result.ok else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
