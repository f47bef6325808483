"""Source resolution from user-supplied strings and folders.

This module maps paths and URIs onto typed pack sources.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import REMOTE_URI_PREFIXES
from core.errors import PackMergeIoError
from core.s3_uri import parse_s3_uri
from core.types import ArchiveFileSource, DirectorySource, RemoteArchiveSource, Source


def source_from_string(value: str, base_dir: Path | None = None) -> Source:
    """Build a pack source from a path or URI string.

    Args:
        value: Directory path, zip path, or ``http(s)://``/``s3://`` URI.
        base_dir: Directory that relative paths resolve against.

    Returns:
        Remote, directory, or archive-file source.

    Raises:
        PackMergeConfigError: If an ``s3://`` URI does not name a single object.
    """
    if value.startswith("s3://"):
        parse_s3_uri(value)
    if value.startswith(REMOTE_URI_PREFIXES):
        return RemoteArchiveSource(uri=value)
    return source_from_path(_resolve_path(value, base_dir))


def source_from_path(path: Path) -> Source:
    """Classify a local path as a directory or archive-file source."""
    if path.is_dir():
        return DirectorySource(path=path)
    return ArchiveFileSource(path=path)


def list_folder_sources(folder: Path) -> list[Source]:
    """Treat each immediate child of a folder as one pack source.

    Children are merged in lexical name order, so later names win.

    Args:
        folder: Folder holding pack directories and zip files.

    Returns:
        Ordered sources.

    Raises:
        PackMergeIoError: If the folder is missing or unreadable.
    """
    if not folder.is_dir():
        raise PackMergeIoError(
            f"Failed to list packs in {folder}: path is not a directory. "
            "Provide a folder containing pack directories or zip files."
        )
    try:
        children = sorted(folder.iterdir(), key=lambda item: item.name)
    except OSError as error:
        raise PackMergeIoError(f"Failed to list packs in {folder}: {error}.") from error
    return [source_from_path(child) for child in children]


def _resolve_path(value: str, base_dir: Path | None) -> Path:
    path = Path(value).expanduser()
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path
