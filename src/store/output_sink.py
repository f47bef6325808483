"""Merged pack output sink.

This module serializes a finalized merged set to an archive file or a
directory tree, honoring the atomic and skip-if-exists options.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from core.errors import PackMergeIoError
from core.logging_config import get_logger
from core.types import Entry, MergeOptions
from store.archive_writer import read_existing_entries, write_archive
from store.atomic_output import open_output_directory, open_output_file
from store.destination_state import DestinationState
from store.directory_writer import write_directory

_LOGGER = get_logger(__name__)


def write_archive_file(
    destination: Path,
    entries: Iterable[Entry],
    options: MergeOptions,
    state: DestinationState,
) -> int:
    """Write merged entries to a zip file.

    Under ``skip_if_exists`` the members of an existing archive are kept
    first and unchanged; every other policy replaces the file.

    Args:
        destination: Output zip path.
        entries: Merged entries in output order.
        options: Merge options.
        state: Existing destination state.

    Returns:
        Number of archive members written.

    Raises:
        PackMergeIoError: If the archive cannot be written.
    """
    output_entries = list(entries)
    if options.overwrite == "skip_if_exists" and destination.is_file():
        base_entries = read_existing_entries(destination, options.buffer_size)
        output_entries = base_entries + [
            entry for entry in output_entries if not state.contains(entry.path)
        ]
    try:
        with open_output_file(destination, options.atomic) as handle:
            written = write_archive(handle, output_entries, options)
    except OSError as error:
        raise PackMergeIoError(
            f"Failed to write merged archive {destination}: {error}. "
            "Check the output location and free space."
        ) from error
    _LOGGER.info(
        "merge_written", destination=str(destination), kind="archive", entry_count=written
    )
    return written


def write_directory_tree(
    destination: Path,
    entries: Iterable[Entry],
    options: MergeOptions,
    state: DestinationState,
) -> int:
    """Write merged entries into a directory tree.

    Args:
        destination: Output directory.
        entries: Merged entries in output order.
        options: Merge options.
        state: Existing destination state.

    Returns:
        Number of files written.

    Raises:
        PackMergeIoError: If the tree cannot be written.
    """
    if destination.exists() and not destination.is_dir():
        raise PackMergeIoError(
            f"Output directory {destination} exists and is not a directory. "
            "Choose another --out path."
        )
    try:
        with open_output_directory(destination, options.atomic) as work_dir:
            written = write_directory(work_dir, entries, options, state)
    except OSError as error:
        raise PackMergeIoError(
            f"Failed to write merged directory {destination}: {error}. "
            "Check the output location and free space."
        ) from error
    _LOGGER.info(
        "merge_written", destination=str(destination), kind="directory", entry_count=written
    )
    return written
