"""Public merge operations.

This module runs the full pipeline: read each source in order, sanitize
and resolve every entry, synthesize metadata once, then hand the merged
set to the output sink (or stop there for dry runs).
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

from core.constants import MANIFEST_PATH
from core.logging_config import get_logger
from core.merge_settings import validate_merge_options
from core.types import MergeOptions, MergeReport, Source
from ingest.remote_fetch import RemoteFetcher
from ingest.source_reader import read_entries
from ingest.source_resolver import list_folder_sources
from merge.merged_set import MergedSet
from merge.metadata_synthesis import read_format_hint, synthesize_metadata
from merge.overwrite_resolver import resolve_entry
from store.archive_writer import build_archive_bytes
from store.destination_state import DestinationState
from store.output_sink import write_archive_file, write_directory_tree

_LOGGER = get_logger(__name__)


def merge_plan(
    sources: Sequence[Source],
    options: MergeOptions | None = None,
    destination: DestinationState | None = None,
    fetcher: RemoteFetcher | None = None,
) -> MergedSet:
    """Build the finalized merged set without writing anything.

    Args:
        sources: Pack inputs; later inputs have higher priority.
        options: Merge options; defaults when omitted.
        destination: Existing output state for ``skip_if_exists``.
        fetcher: Remote fetcher for ``RemoteArchiveSource`` inputs.

    Returns:
        Merged set with synthesized metadata.

    Raises:
        PackMergeError: Any read, sanitization, conflict, or fetch failure.
    """
    active_options = options or MergeOptions()
    validate_merge_options(active_options)
    merged = MergedSet()
    for source_index, source in enumerate(sources):
        merged.source_labels.append(source.label)
        for entry in read_entries(source, source_index, active_options.buffer_size, fetcher):
            if entry.path == MANIFEST_PATH:
                hint = read_format_hint(entry)
                if hint is not None:
                    merged.format_hints.append(hint)
            resolve_entry(merged, entry, active_options.overwrite, destination)
    synthesize_metadata(merged, active_options)
    return merged


def merge_to_bytes(
    sources: Sequence[Source],
    options: MergeOptions | None = None,
    fetcher: RemoteFetcher | None = None,
) -> bytes:
    """Merge packs into in-memory zip bytes.

    There is no destination, so ``skip_if_exists`` only skips paths
    already merged and ``dry_run`` has no effect.

    Args:
        sources: Pack inputs; later inputs have higher priority.
        options: Merge options; defaults when omitted.
        fetcher: Remote fetcher for ``RemoteArchiveSource`` inputs.

    Returns:
        Merged zip payload.
    """
    active_options = options or MergeOptions()
    merged = merge_plan(sources, active_options, DestinationState.empty(), fetcher)
    return build_archive_bytes(merged, active_options)


def merge_to_file(
    sources: Sequence[Source],
    destination: Path,
    options: MergeOptions | None = None,
    fetcher: RemoteFetcher | None = None,
) -> MergeReport:
    """Merge packs into a zip file.

    Args:
        sources: Pack inputs; later inputs have higher priority.
        destination: Output zip path.
        options: Merge options; defaults when omitted.
        fetcher: Remote fetcher for ``RemoteArchiveSource`` inputs.

    Returns:
        Merge report.
    """
    active_options = options or MergeOptions()
    state = _destination_state(active_options, DestinationState.from_archive_file, destination)
    merged = merge_plan(sources, active_options, state, fetcher)
    if not active_options.dry_run:
        write_archive_file(destination, merged, active_options, state)
    return _build_report(merged, destination, active_options)


def merge_to_directory(
    sources: Sequence[Source],
    destination: Path,
    options: MergeOptions | None = None,
    fetcher: RemoteFetcher | None = None,
) -> MergeReport:
    """Merge packs into a directory tree.

    Files already in the destination that are not part of the merge stay.

    Args:
        sources: Pack inputs; later inputs have higher priority.
        destination: Output directory.
        options: Merge options; defaults when omitted.
        fetcher: Remote fetcher for ``RemoteArchiveSource`` inputs.

    Returns:
        Merge report.
    """
    active_options = options or MergeOptions()
    state = _destination_state(active_options, DestinationState.from_directory, destination)
    merged = merge_plan(sources, active_options, state, fetcher)
    if not active_options.dry_run:
        write_directory_tree(destination, merged, active_options, state)
    return _build_report(merged, destination, active_options)


def merge_all_in_folder(folder: Path, options: MergeOptions | None = None) -> bytes:
    """Merge every immediate child of a folder, in lexical name order.

    Args:
        folder: Folder holding pack directories and zip files.
        options: Merge options; defaults when omitted.

    Returns:
        Merged zip payload.
    """
    return merge_to_bytes(list_folder_sources(folder), options)


def _destination_state(
    options: MergeOptions,
    factory: Callable[[Path], DestinationState],
    destination: Path,
) -> DestinationState:
    """Capture destination state only when the skip policy needs it."""
    if options.overwrite != "skip_if_exists":
        return DestinationState.empty()
    return factory(destination)


def _build_report(merged: MergedSet, destination: Path, options: MergeOptions) -> MergeReport:
    report = MergeReport(
        destination=destination,
        dry_run=options.dry_run,
        source_labels=tuple(merged.source_labels),
        paths=merged.paths(),
        collisions=tuple(merged.collisions),
    )
    if options.dry_run:
        _LOGGER.info(
            "merge_dry_run",
            destination=str(destination),
            entry_count=report.entry_count,
            collision_count=len(report.collisions),
        )
    return report
