"""Shared typed models.

This module defines the entry, source, and option models used by the
reader, resolver, synthesizer, and output layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Union

from core.constants import DEFAULT_BUFFER_SIZE

OverwritePolicy = Literal["last_wins", "first_wins", "error_if_conflict", "skip_if_exists"]
SUPPORTED_OVERWRITE_POLICIES: tuple[OverwritePolicy, ...] = (
    "last_wins",
    "first_wins",
    "error_if_conflict",
    "skip_if_exists",
)

SupportedFormatsPolicy = Literal["one_to_highest", "lowest_to_highest", "one_to_latest"]
SUPPORTED_FORMATS_POLICIES: tuple[SupportedFormatsPolicy, ...] = (
    "one_to_highest",
    "lowest_to_highest",
    "one_to_latest",
)

CollisionOutcome = Literal["replaced", "kept_existing", "identical", "skipped_destination"]


@dataclass(frozen=True)
class Entry:
    """Canonical pack entry.

    Attributes:
        path: Sanitized forward-slash path relative to the pack root.
        content: Raw file bytes.
        timestamp: Optional POSIX modification time in seconds.
        source_index: Zero-based input position, ``None`` for synthesized entries.
    """

    path: str
    content: bytes
    timestamp: float | None = None
    source_index: int | None = None


@dataclass(frozen=True)
class DirectorySource:
    """Unpacked pack directory on disk."""

    path: Path

    @property
    def label(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class ArchiveFileSource:
    """Zip pack file on disk."""

    path: Path

    @property
    def label(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class ArchiveBytesSource:
    """Zip pack payload already loaded into memory."""

    data: bytes = field(repr=False)
    name: str = "<archive bytes>"

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class RemoteArchiveSource:
    """Zip pack fetched from an ``http(s)://`` or ``s3://`` URI."""

    uri: str

    @property
    def label(self) -> str:
        return self.uri


Source = Union[DirectorySource, ArchiveFileSource, ArchiveBytesSource, RemoteArchiveSource]


@dataclass(frozen=True)
class MergeOptions:
    """Validated merge options.

    Attributes:
        buffer_size: Chunk size for streaming reads and compression writes.
        atomic: Build output at a temporary location and move it into place.
        preserve_timestamps: Carry entry modification times into the output.
        pack_format_override: Forced manifest ``pack_format`` value.
        supported_formats_policy: Rule used to compute ``supported_formats``.
        description: Forced manifest description.
        overwrite: Collision policy between entries sharing a path.
        dry_run: Run every stage except the output write.
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE
    atomic: bool = True
    preserve_timestamps: bool = False
    pack_format_override: int | None = None
    supported_formats_policy: SupportedFormatsPolicy = "one_to_highest"
    description: str | None = None
    overwrite: OverwritePolicy = "last_wins"
    dry_run: bool = False


@dataclass(frozen=True)
class MergeSettings:
    """Partially specified merge options from one configuration layer.

    Every field is optional so config-file values and CLI flags can be
    layered before resolving into ``MergeOptions``.
    """

    buffer_size: int | None = None
    atomic: bool | None = None
    preserve_timestamps: bool | None = None
    pack_format_override: int | None = None
    supported_formats_policy: SupportedFormatsPolicy | None = None
    description: str | None = None
    overwrite: OverwritePolicy | None = None
    dry_run: bool | None = None


@dataclass(frozen=True)
class Collision:
    """One path collision observed while merging.

    Attributes:
        path: Colliding entry path.
        kept_source: Source index of the surviving entry.
        other_source: Source index of the displaced or discarded entry.
        outcome: How the collision was resolved.
    """

    path: str
    kept_source: int | None
    other_source: int | None
    outcome: CollisionOutcome


@dataclass(frozen=True)
class FormatHint:
    """Manifest ``pack_format`` value declared by one input."""

    source_index: int
    pack_format: int


@dataclass(frozen=True)
class MergeReport:
    """Summary of a completed or dry-run merge.

    Attributes:
        destination: Output path, ``None`` for in-memory output.
        dry_run: Whether the output write was skipped.
        source_labels: Input labels in merge order.
        paths: Final entry paths in output order.
        collisions: Collisions recorded by the resolver.
    """

    destination: Path | None
    dry_run: bool
    source_labels: tuple[str, ...]
    paths: tuple[str, ...]
    collisions: tuple[Collision, ...]

    @property
    def entry_count(self) -> int:
        return len(self.paths)
