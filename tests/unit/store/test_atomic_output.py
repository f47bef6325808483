"""Unit tests for atomic output helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.constants import TEMP_NAME_PREFIX
from store.atomic_output import open_output_directory, open_output_file


def _leftover_temp_names(directory: Path) -> list[str]:
    return [child.name for child in directory.iterdir() if child.name.startswith(TEMP_NAME_PREFIX)]


def test_open_output_file_atomic_writes_destination(tmp_path: Path) -> None:
    """Atomic writes should land at the destination with no temp files left."""
    destination = tmp_path / "out.zip"

    with open_output_file(destination, atomic=True) as handle:
        handle.write(b"payload")

    assert destination.read_bytes() == b"payload"
    assert _leftover_temp_names(tmp_path) == []


def test_open_output_file_atomic_failure_leaves_nothing(tmp_path: Path) -> None:
    """An aborted atomic write should leave no destination or temp file."""
    destination = tmp_path / "out.zip"

    with pytest.raises(RuntimeError):
        with open_output_file(destination, atomic=True) as handle:
            handle.write(b"partial")
            raise RuntimeError("boom")

    assert not destination.exists()
    assert _leftover_temp_names(tmp_path) == []


def test_open_output_file_atomic_failure_keeps_previous_file(tmp_path: Path) -> None:
    """An aborted atomic write should not touch an existing destination."""
    destination = tmp_path / "out.zip"
    destination.write_bytes(b"previous")

    with pytest.raises(RuntimeError):
        with open_output_file(destination, atomic=True) as handle:
            handle.write(b"partial")
            raise RuntimeError("boom")

    assert destination.read_bytes() == b"previous"


def test_open_output_file_creates_parent_directories(tmp_path: Path) -> None:
    """Missing parent directories should be created."""
    destination = tmp_path / "nested" / "deeper" / "out.zip"

    with open_output_file(destination, atomic=False) as handle:
        handle.write(b"x")

    assert destination.read_bytes() == b"x"


def test_open_output_directory_atomic_keeps_existing_files(tmp_path: Path) -> None:
    """Atomic directory output should start from the existing tree."""
    destination = tmp_path / "out"
    destination.mkdir()
    (destination / "keep.txt").write_bytes(b"kept")

    with open_output_directory(destination, atomic=True) as work_dir:
        (work_dir / "new.txt").write_bytes(b"new")

    assert (destination / "keep.txt").read_bytes() == b"kept"
    assert (destination / "new.txt").read_bytes() == b"new"
    assert _leftover_temp_names(tmp_path) == []


def test_open_output_directory_atomic_failure_leaves_nothing(tmp_path: Path) -> None:
    """An aborted atomic directory write should leave no destination."""
    destination = tmp_path / "out"

    with pytest.raises(RuntimeError):
        with open_output_directory(destination, atomic=True) as work_dir:
            (work_dir / "partial.txt").write_bytes(b"x")
            raise RuntimeError("boom")

    assert not destination.exists()
    assert _leftover_temp_names(tmp_path) == []


def test_open_output_directory_non_atomic_writes_in_place(tmp_path: Path) -> None:
    """Non-atomic directory output should hand back the destination itself."""
    destination = tmp_path / "out"

    with open_output_directory(destination, atomic=False) as work_dir:
        assert work_dir == destination


def test_open_output_directory_atomic_into_current_directory(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A relative ``.`` destination should be swapped as a sibling, not nested."""
    destination = tmp_path / "out"
    destination.mkdir()
    (destination / "keep.txt").write_bytes(b"kept")
    monkeypatch.chdir(destination)

    with open_output_directory(Path("."), atomic=True) as work_dir:
        assert work_dir.parent.resolve() == tmp_path.resolve()
        (work_dir / "new.txt").write_bytes(b"new")

    assert sorted(child.name for child in destination.iterdir()) == ["keep.txt", "new.txt"]
    assert _leftover_temp_names(tmp_path) == []


def test_open_output_directory_atomic_replaces_symlink_without_leftovers(
    tmp_path: Path,
) -> None:
    """A symlinked destination should not leave a backup link behind."""
    target = tmp_path / "target"
    target.mkdir()
    (target / "keep.txt").write_bytes(b"kept")
    destination = tmp_path / "out"
    destination.symlink_to(target, target_is_directory=True)

    with open_output_directory(destination, atomic=True) as work_dir:
        (work_dir / "new.txt").write_bytes(b"new")

    assert (destination / "keep.txt").read_bytes() == b"kept"
    assert (destination / "new.txt").read_bytes() == b"new"
    assert _leftover_temp_names(tmp_path) == []
