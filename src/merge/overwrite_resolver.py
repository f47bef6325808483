"""Overwrite policy resolution.

This module decides, per incoming entry, whether it joins the merged set,
replaces an earlier entry, is discarded, or aborts the merge.
"""

from __future__ import annotations

from core.errors import PackMergeConfigError, PackMergeConflictError
from core.logging_config import get_logger
from core.types import Collision, CollisionOutcome, Entry, OverwritePolicy
from merge.merged_set import MergedSet
from store.destination_state import DestinationState

_LOGGER = get_logger(__name__)


def resolve_entry(
    merged: MergedSet,
    entry: Entry,
    policy: OverwritePolicy,
    destination: DestinationState | None = None,
) -> None:
    """Merge one incoming entry into the running set.

    Args:
        merged: Running merged set, mutated in place.
        entry: Sanitized incoming entry.
        policy: Active overwrite policy.
        destination: Existing output state consulted by ``skip_if_exists``.

    Raises:
        PackMergeConflictError: If ``error_if_conflict`` sees differing content.
        PackMergeConfigError: If the policy is unknown.
    """
    existing = merged.get(entry.path)
    if policy == "skip_if_exists" and destination is not None and destination.contains(entry.path):
        _record(merged, entry.path, None, entry.source_index, "skipped_destination")
        return
    if existing is None:
        merged.put(entry)
        return
    if policy == "last_wins":
        merged.put(entry)
        _record(merged, entry.path, entry.source_index, existing.source_index, "replaced")
        return
    if policy in ("first_wins", "skip_if_exists"):
        _record(merged, entry.path, existing.source_index, entry.source_index, "kept_existing")
        return
    if policy == "error_if_conflict":
        if existing.content != entry.content:
            raise PackMergeConflictError(entry.path, existing.source_index, entry.source_index)
        _record(merged, entry.path, existing.source_index, entry.source_index, "identical")
        return
    raise PackMergeConfigError(f"Unknown overwrite policy '{policy}'.")


def _record(
    merged: MergedSet,
    path: str,
    kept_source: int | None,
    other_source: int | None,
    outcome: CollisionOutcome,
) -> None:
    merged.collisions.append(
        Collision(path=path, kept_source=kept_source, other_source=other_source, outcome=outcome)
    )
    _LOGGER.debug(
        "entry_collision",
        path=path,
        kept_source=kept_source,
        other_source=other_source,
        outcome=outcome,
    )
