"""Directory tree serialization for merged packs."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from core.errors import PackMergeSanitizationError
from core.types import Entry, MergeOptions
from store.destination_state import DestinationState


def write_directory(
    root: Path,
    entries: Iterable[Entry],
    options: MergeOptions,
    destination: DestinationState,
) -> int:
    """Write entries as regular files under ``root``.

    Args:
        root: Directory that receives the tree.
        entries: Entries in output order.
        options: Merge options for chunking, timestamps, and skip policy.
        destination: Existing destination state checked by ``skip_if_exists``.

    Returns:
        Number of files written.

    Raises:
        PackMergeSanitizationError: If a target resolves outside ``root``.
        OSError: If a file cannot be written.
    """
    resolved_root = root.resolve()
    written = 0
    for entry in entries:
        if options.overwrite == "skip_if_exists" and destination.contains(entry.path):
            continue
        target = root.joinpath(*entry.path.split("/"))
        if not target.resolve().is_relative_to(resolved_root):
            raise PackMergeSanitizationError(entry.path, "target resolves outside the output root")
        target.parent.mkdir(parents=True, exist_ok=True)
        _write_file(target, entry.content, options.buffer_size)
        if options.preserve_timestamps and entry.timestamp is not None:
            os.utime(target, (entry.timestamp, entry.timestamp))
        written += 1
    return written


def _write_file(target: Path, content: bytes, buffer_size: int) -> None:
    view = memoryview(content)
    with target.open("wb") as handle:
        for offset in range(0, len(view), buffer_size):
            handle.write(view[offset : offset + buffer_size])
