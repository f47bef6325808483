"""Zip serialization for merged packs.

This module writes entries in merged-set order with chunked deflate
streaming and fixed metadata so identical inputs give identical bytes.
"""

from __future__ import annotations

import io
import time
import zipfile
from pathlib import Path
from typing import BinaryIO, Iterable

from core.constants import ARCHIVE_EPOCH_DATE_TIME, ARCHIVE_FILE_MODE
from core.errors import PackMergeArchiveError, PackMergeIoError
from core.path_sanitizer import sanitize_entry_path
from core.types import Entry, MergeOptions

_LATEST_ZIP_YEAR = 2107


def build_archive_bytes(entries: Iterable[Entry], options: MergeOptions) -> bytes:
    """Serialize entries into in-memory zip bytes.

    Args:
        entries: Entries in output order.
        options: Merge options for chunking and timestamps.

    Returns:
        Complete zip payload.
    """
    buffer = io.BytesIO()
    write_archive(buffer, entries, options)
    return buffer.getvalue()


def write_archive(handle: BinaryIO, entries: Iterable[Entry], options: MergeOptions) -> int:
    """Write entries as a zip archive to an open binary handle.

    Args:
        handle: Writable, seekable binary handle.
        entries: Entries in output order.
        options: Merge options for chunking and timestamps.

    Returns:
        Number of entries written.
    """
    written = 0
    with zipfile.ZipFile(handle, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
        for entry in entries:
            _write_member(archive, entry, options)
            written += 1
    return written


def read_existing_entries(archive_path: Path, buffer_size: int) -> list[Entry]:
    """Load the file members of an existing output archive.

    Args:
        archive_path: Existing zip destination.
        buffer_size: Chunk size for member reads.

    Returns:
        Entries in the existing archive's order, without source index.

    Raises:
        PackMergeArchiveError: If the archive is malformed.
        PackMergeIoError: If the archive cannot be read.
        PackMergeSanitizationError: If a member name is unsafe.
    """
    entries: list[Entry] = []
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                entries.append(
                    Entry(
                        path=sanitize_entry_path(info.orig_filename, str(archive_path)),
                        content=_read_member(archive, info, buffer_size),
                        timestamp=time.mktime(info.date_time + (0, 0, -1)),
                    )
                )
    except zipfile.BadZipFile as error:
        raise PackMergeArchiveError(
            f"Existing output {archive_path} is not a valid zip: {error}."
        ) from error
    except OSError as error:
        raise PackMergeIoError(
            f"Failed to read existing output {archive_path}: {error}."
        ) from error
    return entries


def _write_member(archive: zipfile.ZipFile, entry: Entry, options: MergeOptions) -> None:
    info = zipfile.ZipInfo(entry.path, date_time=_member_date_time(entry, options))
    info.compress_type = zipfile.ZIP_DEFLATED
    info.create_system = 3
    info.external_attr = ARCHIVE_FILE_MODE << 16
    content = memoryview(entry.content)
    with archive.open(info, mode="w") as stream:
        for offset in range(0, len(content), options.buffer_size):
            stream.write(content[offset : offset + options.buffer_size])


def _member_date_time(entry: Entry, options: MergeOptions) -> tuple[int, int, int, int, int, int]:
    """Return the member timestamp, fixed unless timestamps are preserved."""
    if not options.preserve_timestamps or entry.timestamp is None:
        return ARCHIVE_EPOCH_DATE_TIME
    local_time = time.localtime(entry.timestamp)
    if local_time.tm_year < ARCHIVE_EPOCH_DATE_TIME[0] or local_time.tm_year > _LATEST_ZIP_YEAR:
        return ARCHIVE_EPOCH_DATE_TIME
    return (
        local_time.tm_year,
        local_time.tm_mon,
        local_time.tm_mday,
        local_time.tm_hour,
        local_time.tm_min,
        local_time.tm_sec,
    )


def _read_member(archive: zipfile.ZipFile, info: zipfile.ZipInfo, buffer_size: int) -> bytes:
    payload = bytearray()
    with archive.open(info) as stream:
        while True:
            chunk = stream.read(buffer_size)
            if not chunk:
                break
            payload.extend(chunk)
    return bytes(payload)
