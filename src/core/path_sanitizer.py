"""Entry path sanitization.

Every entry path passes through here before its content is read or written.
Paths that could resolve outside the output root abort the merge.
"""

from __future__ import annotations

import re

from core.errors import PackMergeSanitizationError

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def sanitize_entry_path(raw_path: str, source_label: str | None = None) -> str:
    """Normalize a raw entry path or reject it.

    Both ``/`` and ``\\`` separate segments. Empty and ``.`` segments are
    dropped; any ``..`` segment is rejected even when it would stay inside
    the root.

    Args:
        raw_path: Path as declared by a directory walk or archive record.
        source_label: Optional source label for error context.

    Returns:
        Forward-slash path with no leading separator or ``./`` prefix.

    Raises:
        PackMergeSanitizationError: If the path is empty, absolute, contains
            a null byte, or traverses upward.
    """
    if not raw_path:
        raise PackMergeSanitizationError(raw_path, "path is empty", source_label)
    if "\x00" in raw_path:
        raise PackMergeSanitizationError(raw_path, "path contains a null byte", source_label)
    if raw_path[0] in "/\\":
        raise PackMergeSanitizationError(raw_path, "path is absolute", source_label)
    if _DRIVE_PREFIX.match(raw_path):
        raise PackMergeSanitizationError(raw_path, "path has a drive prefix", source_label)
    segments: list[str] = []
    for segment in re.split(r"[/\\]", raw_path):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise PackMergeSanitizationError(
                raw_path, "path traverses outside the pack root", source_label
            )
        segments.append(segment)
    if not segments:
        raise PackMergeSanitizationError(raw_path, "path has no file name", source_label)
    return "/".join(segments)
