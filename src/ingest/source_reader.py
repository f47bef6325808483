"""Source readers for pack inputs.

This module turns directories, zip files, zip bytes, and fetched remote
packs into lazy, ordered entry sequences for the overwrite resolver.
"""

from __future__ import annotations

import io
import os
import time
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator

from core.constants import DEFAULT_BUFFER_SIZE
from core.errors import PackMergeArchiveError, PackMergeIoError
from core.logging_config import get_logger
from core.path_sanitizer import sanitize_entry_path
from core.types import (
    ArchiveBytesSource,
    ArchiveFileSource,
    DirectorySource,
    Entry,
    RemoteArchiveSource,
    Source,
)
from ingest.remote_fetch import RemoteFetcher

_LOGGER = get_logger(__name__)


def read_entries(
    source: Source,
    source_index: int,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    fetcher: RemoteFetcher | None = None,
) -> Iterator[Entry]:
    """Yield the entries of one pack source.

    Each call returns a fresh iterator. Paths are sanitized before the
    entry content is read.

    Args:
        source: Pack input to read.
        source_index: Zero-based position of the source in the merge order.
        buffer_size: Chunk size for content reads.
        fetcher: Remote fetcher used for ``RemoteArchiveSource`` inputs.

    Returns:
        Iterator of entries in stable source order.

    Raises:
        PackMergeIoError: If a file or directory cannot be read.
        PackMergeArchiveError: If an archive is malformed.
        PackMergeSanitizationError: If an entry path is unsafe.
        PackMergeNetworkError: If a remote pack cannot be fetched.
    """
    if isinstance(source, DirectorySource):
        return _read_directory_entries(source, source_index, buffer_size)
    if isinstance(source, ArchiveFileSource):
        return _read_archive_file_entries(source, source_index, buffer_size)
    if isinstance(source, ArchiveBytesSource):
        return _read_archive_entries(
            io.BytesIO(source.data), source.label, source_index, buffer_size
        )
    if isinstance(source, RemoteArchiveSource):
        return _read_remote_entries(source, source_index, buffer_size, fetcher)
    raise TypeError(f"Unsupported pack source type: {type(source).__name__}")


def _read_directory_entries(
    source: DirectorySource,
    source_index: int,
    buffer_size: int,
) -> Iterator[Entry]:
    root = source.path
    if not root.is_dir():
        raise PackMergeIoError(
            f"Failed to read pack directory {root} (source #{source_index}): "
            "path is not a directory. Provide an existing pack folder."
        )
    entry_count = 0
    for file_path in _list_regular_files(root, source_index):
        relative_path = file_path.relative_to(root).as_posix()
        entry_path = sanitize_entry_path(relative_path, source.label)
        try:
            content = _read_stream_chunked(file_path.open("rb"), buffer_size)
            timestamp = file_path.stat().st_mtime
        except OSError as error:
            raise PackMergeIoError(
                f"Failed to read {entry_path} from pack directory {root} "
                f"(source #{source_index}): {error}. Check file permissions and retry."
            ) from error
        entry_count += 1
        yield Entry(
            path=entry_path,
            content=content,
            timestamp=timestamp,
            source_index=source_index,
        )
    _LOGGER.info("source_read", source=source.label, entry_count=entry_count)


def _list_regular_files(root: Path, source_index: int) -> list[Path]:
    """List regular, non-symlink files under a directory in sorted order."""

    def _raise_walk_error(error: OSError) -> None:
        raise error

    file_paths: list[Path] = []
    try:
        for current_dir, dir_names, file_names in os.walk(
            root, onerror=_raise_walk_error, followlinks=False
        ):
            dir_names.sort()
            for file_name in file_names:
                file_path = Path(current_dir) / file_name
                if file_path.is_file() and not file_path.is_symlink():
                    file_paths.append(file_path)
    except OSError as error:
        raise PackMergeIoError(
            f"Failed to list pack directory {root} (source #{source_index}): {error}. "
            "Check directory permissions and retry."
        ) from error
    return sorted(file_paths, key=lambda item: item.relative_to(root).as_posix())


def _read_archive_file_entries(
    source: ArchiveFileSource,
    source_index: int,
    buffer_size: int,
) -> Iterator[Entry]:
    try:
        handle = source.path.open("rb")
    except OSError as error:
        raise PackMergeIoError(
            f"Failed to open pack archive {source.path} (source #{source_index}): {error}. "
            "Provide an existing zip file."
        ) from error
    with handle:
        yield from _read_archive_entries(handle, source.label, source_index, buffer_size)


def _read_remote_entries(
    source: RemoteArchiveSource,
    source_index: int,
    buffer_size: int,
    fetcher: RemoteFetcher | None,
) -> Iterator[Entry]:
    active_fetcher = fetcher or RemoteFetcher()
    payload = active_fetcher.fetch(source.uri)
    yield from _read_archive_entries(io.BytesIO(payload), source.label, source_index, buffer_size)


def _read_archive_entries(
    handle: BinaryIO,
    label: str,
    source_index: int,
    buffer_size: int,
) -> Iterator[Entry]:
    """Yield file members of a zip archive in central-directory order."""
    try:
        archive = zipfile.ZipFile(handle)
    except zipfile.BadZipFile as error:
        raise PackMergeArchiveError(
            f"Failed to open pack archive {label} (source #{source_index}): {error}. "
            "Provide a valid zip file."
        ) from error
    entry_count = 0
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            entry_path = sanitize_entry_path(info.orig_filename, label)
            content = _read_archive_member(archive, info, label, source_index, buffer_size)
            entry_count += 1
            yield Entry(
                path=entry_path,
                content=content,
                timestamp=_zip_timestamp(info),
                source_index=source_index,
            )
    _LOGGER.info("source_read", source=label, entry_count=entry_count)


def _read_archive_member(
    archive: zipfile.ZipFile,
    info: zipfile.ZipInfo,
    label: str,
    source_index: int,
    buffer_size: int,
) -> bytes:
    try:
        return _read_stream_chunked(archive.open(info), buffer_size)
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as error:
        raise PackMergeArchiveError(
            f"Failed to decompress {info.filename} in pack archive {label} "
            f"(source #{source_index}): {error}. Re-create the archive and retry."
        ) from error
    except OSError as error:
        raise PackMergeIoError(
            f"Failed to read {info.filename} in pack archive {label} "
            f"(source #{source_index}): {error}."
        ) from error


def _read_stream_chunked(stream: BinaryIO, buffer_size: int) -> bytes:
    """Read a binary stream to the end in ``buffer_size`` chunks and close it."""
    payload = bytearray()
    with stream:
        while True:
            chunk = stream.read(buffer_size)
            if not chunk:
                break
            payload.extend(chunk)
    return bytes(payload)


def _zip_timestamp(info: zipfile.ZipInfo) -> float | None:
    """Convert a zip member's local date_time into POSIX seconds."""
    try:
        return time.mktime(info.date_time + (0, 0, -1))
    except (OverflowError, ValueError):
        return None
