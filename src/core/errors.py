"""packmerge exception hierarchy.

This module defines traceable merge errors with clear boundaries.
Each stage raises a specific error type so callers can locate bad input.
"""

from __future__ import annotations


class PackMergeError(Exception):
    """Base exception for all packmerge failures."""


class PackMergeConfigError(PackMergeError):
    """Raised for invalid runtime configuration or merge config files."""


class PackMergeIoError(PackMergeError):
    """Raised for filesystem read and write failures."""


class PackMergeArchiveError(PackMergeError):
    """Raised for malformed source archives or pack manifests."""


class PackMergeNetworkError(PackMergeError):
    """Raised when a remote pack cannot be fetched."""


class PackMergeDependencyError(PackMergeError):
    """Raised when an optional runtime dependency is missing."""


class PackMergeSanitizationError(PackMergeError):
    """Raised when an entry path could escape the output root."""

    def __init__(self, path: str, reason: str, source_label: str | None = None) -> None:
        self.path = path
        self.reason = reason
        self.source_label = source_label
        origin = f" in {source_label}" if source_label else ""
        super().__init__(
            f"Unsafe entry path {path!r}{origin}: {reason}. "
            "Remove or rename the entry in that pack and retry the merge."
        )


class PackMergeConflictError(PackMergeError):
    """Raised when two packs supply different content for one path."""

    def __init__(self, path: str, source_a: int | None, source_b: int | None) -> None:
        self.path = path
        self.source_a = source_a
        self.source_b = source_b
        super().__init__(
            f"Conflicting entry {path!r} in source #{source_a} and source #{source_b}. "
            "Choose another --overwrite policy or remove the entry from one pack."
        )
