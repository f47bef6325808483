"""Unit tests for archive and directory output sinks."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import PackMergeIoError, PackMergeSanitizationError
from core.types import Entry, MergeOptions
from store.destination_state import DestinationState
from store.directory_writer import write_directory
from store.output_sink import write_archive_file, write_directory_tree
from tests.archive_builders import read_zip, write_zip


def test_write_archive_file_replaces_destination(tmp_path: Path) -> None:
    """Archive output should contain exactly the merged entries."""
    destination = write_zip(tmp_path / "out.zip", {"old.txt": b"old"})

    written = write_archive_file(
        destination, [Entry("new.txt", b"new")], MergeOptions(), DestinationState.empty()
    )

    assert written == 1 and read_zip(destination) == {"new.txt": b"new"}


def test_write_archive_file_skip_policy_keeps_base_members(tmp_path: Path) -> None:
    """Skip policy should keep existing members first and append new paths."""
    destination = write_zip(tmp_path / "out.zip", {"p.txt": b"original"})
    state = DestinationState.from_archive_file(destination)
    entries = [Entry("p.txt", b"incoming"), Entry("q.txt", b"added")]

    write_archive_file(
        destination, entries, MergeOptions(overwrite="skip_if_exists", atomic=False), state
    )

    assert read_zip(destination) == {"p.txt": b"original", "q.txt": b"added"}


def test_write_directory_tree_merges_into_existing(make_pack_dir) -> None:
    """Directory output should keep unrelated files and overwrite merged ones."""
    destination = make_pack_dir("dest", {"keep.txt": b"kept", "p.txt": b"old"})

    write_directory_tree(
        destination, [Entry("p.txt", b"new")], MergeOptions(), DestinationState.empty()
    )

    assert (destination / "keep.txt").read_bytes() == b"kept"
    assert (destination / "p.txt").read_bytes() == b"new"


def test_write_directory_tree_rejects_file_destination(tmp_path: Path) -> None:
    """A regular file at the destination should raise an IO error."""
    destination = tmp_path / "out"
    destination.write_bytes(b"x")

    with pytest.raises(PackMergeIoError, match="not a directory"):
        write_directory_tree(
            destination, [Entry("p.txt", b"x")], MergeOptions(), DestinationState.empty()
        )


def test_write_directory_skips_existing_paths(make_pack_dir) -> None:
    """Skip policy should leave files the destination already holds."""
    root = make_pack_dir("dest", {"p.txt": b"original"})
    state = DestinationState.from_directory(root)
    entries = [Entry("p.txt", b"incoming"), Entry("nested/q.txt", b"added")]

    written = write_directory(root, entries, MergeOptions(overwrite="skip_if_exists"), state)

    assert written == 1
    assert (root / "p.txt").read_bytes() == b"original"
    assert (root / "nested" / "q.txt").read_bytes() == b"added"


def test_write_directory_rejects_symlink_escape(tmp_path: Path) -> None:
    """A target reached through a symlink outside the root should be rejected."""
    root = tmp_path / "dest"
    outside = tmp_path / "outside"
    root.mkdir()
    outside.mkdir()
    (root / "link").symlink_to(outside, target_is_directory=True)

    with pytest.raises(PackMergeSanitizationError):
        write_directory(
            root, [Entry("link/escape.txt", b"x")], MergeOptions(), DestinationState.empty()
        )

    assert not (outside / "escape.txt").exists()
