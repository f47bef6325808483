"""Unit tests for pack source readers."""

from __future__ import annotations

import os
import zipfile
from pathlib import Path

import pytest

from core.errors import PackMergeArchiveError, PackMergeIoError, PackMergeSanitizationError
from core.types import ArchiveBytesSource, ArchiveFileSource, DirectorySource
from ingest.source_reader import read_entries
from tests.archive_builders import (
    build_zip_bytes,
    build_zip_bytes_with_nul_name,
    write_zip,
)
from tests.fixture_paths import fixture_path


def test_read_entries_walks_directory_in_sorted_order() -> None:
    """Directory sources should yield every regular file with relative paths."""
    source = DirectorySource(fixture_path("packs/base"))

    paths = [entry.path for entry in read_entries(source, 0)]

    assert paths == [
        "assets/minecraft/lang/en_us.json",
        "assets/minecraft/texts/splashes.txt",
        "pack.mcmeta",
    ]


def test_read_entries_tags_source_index_and_timestamp(make_pack_dir) -> None:
    """Directory entries should carry the source index and file mtime."""
    pack_dir = make_pack_dir("pack", {"a.txt": b"alpha"})
    os.utime(pack_dir / "a.txt", (1_600_000_000, 1_600_000_000))

    entry = next(read_entries(DirectorySource(pack_dir), 3))

    assert (entry.source_index, entry.timestamp, entry.content) == (3, 1_600_000_000, b"alpha")


def test_read_entries_skips_symlinks(make_pack_dir, tmp_path: Path) -> None:
    """Symlinked files should not be read out of the pack directory."""
    outside = tmp_path / "outside.txt"
    outside.write_bytes(b"secret")
    pack_dir = make_pack_dir("pack", {"inside.txt": b"ok"})
    (pack_dir / "link.txt").symlink_to(outside)

    paths = [entry.path for entry in read_entries(DirectorySource(pack_dir), 0)]

    assert paths == ["inside.txt"]


def test_read_entries_reads_archive_bytes_with_small_buffer() -> None:
    """Archive members should be fully read even with a tiny buffer size."""
    payload = b"x" * 1000
    source = ArchiveBytesSource(build_zip_bytes({"assets/big.bin": payload}), name="mem")

    entries = list(read_entries(source, 0, buffer_size=7))

    assert entries[0].content == payload


def test_read_entries_skips_directory_records_in_archive(tmp_path: Path) -> None:
    """Directory records in an archive should not become entries."""
    archive_path = tmp_path / "pack.zip"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("assets/", b"")
        archive.writestr("assets/file.txt", b"data")

    paths = [entry.path for entry in read_entries(ArchiveFileSource(archive_path), 0)]

    assert paths == ["assets/file.txt"]


def test_read_entries_normalizes_backslash_member_names() -> None:
    """Windows-style member names should be normalized to forward slashes."""
    source = ArchiveBytesSource(build_zip_bytes({"assets\\lang\\en.json": b"{}"}))

    entry = next(read_entries(source, 0))

    assert entry.path == "assets/lang/en.json"


def test_read_entries_rejects_zip_slip_member() -> None:
    """A traversal member should raise before any entry is produced."""
    source = ArchiveBytesSource(build_zip_bytes({"../../etc/passwd": b"root"}))

    with pytest.raises(PackMergeSanitizationError):
        list(read_entries(source, 0))


def test_read_entries_rejects_member_name_with_nul_byte() -> None:
    """A member name with an embedded NUL should abort instead of being truncated."""
    source = ArchiveBytesSource(build_zip_bytes_with_nul_name("pack.png", "evil.txt", b"evil"))

    with pytest.raises(PackMergeSanitizationError, match="null byte"):
        list(read_entries(source, 0))


def test_read_entries_raises_for_malformed_archive() -> None:
    """Non-zip bytes should raise an archive format error."""
    with pytest.raises(PackMergeArchiveError):
        list(read_entries(ArchiveBytesSource(b"not a zip at all"), 0))


def test_read_entries_raises_for_corrupt_member(tmp_path: Path) -> None:
    """A member whose compressed data is damaged should raise an archive error."""
    content = b"resource pack payload " * 200
    archive_path = write_zip(tmp_path / "pack.zip", {"data.txt": content})
    raw = bytearray(archive_path.read_bytes())
    with zipfile.ZipFile(archive_path) as archive:
        info = archive.getinfo("data.txt")
    data_start = info.header_offset + 30 + len(info.filename)
    for offset in range(data_start, data_start + 16):
        raw[offset] ^= 0xFF
    archive_path.write_bytes(bytes(raw))

    with pytest.raises(PackMergeArchiveError):
        list(read_entries(ArchiveFileSource(archive_path), 0))


def test_read_entries_raises_for_missing_archive_file(tmp_path: Path) -> None:
    """A missing archive path should raise an io error."""
    with pytest.raises(PackMergeIoError):
        list(read_entries(ArchiveFileSource(tmp_path / "missing.zip"), 0))


def test_read_entries_raises_for_missing_directory(tmp_path: Path) -> None:
    """A missing directory should raise an io error."""
    with pytest.raises(PackMergeIoError):
        list(read_entries(DirectorySource(tmp_path / "missing"), 0))


def test_read_entries_is_restartable() -> None:
    """Each call should produce a fresh, identical entry sequence."""
    source = ArchiveBytesSource(build_zip_bytes({"a.txt": b"1", "b.txt": b"2"}))

    first = list(read_entries(source, 0))
    second = list(read_entries(source, 0))

    assert first == second
