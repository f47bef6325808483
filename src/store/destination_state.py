"""Existing output destination state.

The ``skip_if_exists`` policy compares incoming entries against what the
output destination already holds, so that state is captured here.
"""

from __future__ import annotations

import zipfile
from pathlib import Path

from core.errors import PackMergeArchiveError, PackMergeIoError
from core.path_sanitizer import sanitize_entry_path


class DestinationState:
    """Read-only view of paths already present at the output destination."""

    def __init__(
        self,
        root: Path | None = None,
        archive_paths: frozenset[str] = frozenset(),
    ) -> None:
        self._root = root
        self._archive_paths = archive_paths

    @classmethod
    def empty(cls) -> "DestinationState":
        """Return a state with no existing paths, used for in-memory output."""
        return cls()

    @classmethod
    def from_directory(cls, root: Path) -> "DestinationState":
        """Build state for a directory destination.

        Args:
            root: Destination directory, which may not exist yet.

        Returns:
            State that checks for regular files under ``root``.

        Raises:
            PackMergeIoError: If ``root`` exists but is not a directory.
        """
        if root.exists() and not root.is_dir():
            raise PackMergeIoError(
                f"Output directory {root} exists and is not a directory. "
                "Choose another --out path."
            )
        return cls(root=root)

    @classmethod
    def from_archive_file(cls, archive_path: Path) -> "DestinationState":
        """Build state for an archive file destination.

        Args:
            archive_path: Destination zip path, which may not exist yet.

        Returns:
            State listing the file members of the existing archive.

        Raises:
            PackMergeArchiveError: If an existing file is not a valid zip.
            PackMergeIoError: If the existing file cannot be read.
            PackMergeSanitizationError: If a member name is unsafe.
        """
        if not archive_path.exists():
            return cls()
        try:
            with zipfile.ZipFile(archive_path) as archive:
                names = frozenset(
                    sanitize_entry_path(info.orig_filename, str(archive_path))
                    for info in archive.infolist()
                    if not info.is_dir()
                )
        except zipfile.BadZipFile as error:
            raise PackMergeArchiveError(
                f"Existing output {archive_path} is not a valid zip: {error}. "
                "Remove it or choose another --overwrite policy."
            ) from error
        except OSError as error:
            raise PackMergeIoError(
                f"Failed to read existing output {archive_path}: {error}."
            ) from error
        return cls(archive_paths=names)

    def contains(self, path: str) -> bool:
        """Return whether the destination already holds ``path``."""
        if path in self._archive_paths:
            return True
        if self._root is None:
            return False
        return self._root.joinpath(*path.split("/")).is_file()
