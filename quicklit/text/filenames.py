"""File name helpers for exported material."""

from __future__ import annotations

import re

INVALID_FILENAME_CHARS = re.compile(r'[/\\?%*|"<>]')


def sanitize_file_name(name: str) -> str:
    """Replace characters that are unsafe in file names with ``_``."""

    return INVALID_FILENAME_CHARS.sub("_", name)


__all__ = ["sanitize_file_name"]
