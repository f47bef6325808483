"""Atomic output helpers.

Outputs are built at a temporary sibling location and moved into place
as the final step, so an aborted merge leaves no partial destination.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from core.constants import TEMP_NAME_PREFIX

_OUTPUT_FILE_MODE = 0o644
_OUTPUT_DIR_MODE = 0o755


@contextmanager
def open_output_file(destination: Path, atomic: bool) -> Iterator[BinaryIO]:
    """Open a writable handle whose content lands at ``destination``.

    Args:
        destination: Final output file path.
        atomic: Write to a temporary file and rename it on success.

    Yields:
        Binary file handle.
    """
    destination = _absolute_path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    if not atomic:
        with destination.open("wb") as handle:
            yield handle
        return
    descriptor, temp_name = tempfile.mkstemp(
        prefix=TEMP_NAME_PREFIX, suffix=".tmp", dir=destination.parent
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(descriptor, "wb") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_path, _OUTPUT_FILE_MODE)
        os.replace(temp_path, destination)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


@contextmanager
def open_output_directory(destination: Path, atomic: bool) -> Iterator[Path]:
    """Provide a working directory whose tree lands at ``destination``.

    In atomic mode the working directory starts as a copy of any existing
    destination and replaces it in one rename once the body succeeds.

    Args:
        destination: Final output directory.
        atomic: Build in a temporary sibling directory and swap it in.

    Yields:
        Directory that entries should be written under.
    """
    destination = _absolute_path(destination)
    if not atomic:
        destination.mkdir(parents=True, exist_ok=True)
        yield destination
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    work_dir = Path(tempfile.mkdtemp(prefix=TEMP_NAME_PREFIX, dir=destination.parent))
    try:
        if destination.is_dir():
            shutil.copytree(destination, work_dir, symlinks=True, dirs_exist_ok=True)
            shutil.copystat(destination, work_dir)
        else:
            os.chmod(work_dir, _OUTPUT_DIR_MODE)
        yield work_dir
        _swap_directory(work_dir, destination)
    except BaseException:
        shutil.rmtree(work_dir, ignore_errors=True)
        raise


def _swap_directory(work_dir: Path, destination: Path) -> None:
    """Move ``work_dir`` to ``destination``, restoring the old tree on failure."""
    if not os.path.lexists(destination):
        os.replace(work_dir, destination)
        return
    backup_dir = destination.with_name(f"{TEMP_NAME_PREFIX}{destination.name}-{uuid.uuid4().hex}")
    os.replace(destination, backup_dir)
    try:
        os.replace(work_dir, destination)
    except OSError:
        os.replace(backup_dir, destination)
        raise
    if backup_dir.is_symlink():
        backup_dir.unlink()
    else:
        shutil.rmtree(backup_dir, ignore_errors=True)


def _absolute_path(path: Path) -> Path:
    """Return ``path`` made absolute with ``.`` and ``..`` collapsed, symlinks kept."""
    return Path(os.path.abspath(path))
