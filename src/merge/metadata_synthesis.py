"""Pack metadata synthesis.

This module guarantees the merged pack carries a consistent manifest,
an icon, and a listing of the merged inputs. It runs once per merge,
after every source is exhausted, and is idempotent.
"""

from __future__ import annotations

import json
from typing import Any, Sequence

from core.constants import (
    DEFAULT_PACK_FORMAT,
    ICON_PATH,
    LISTING_PATH,
    MANIFEST_PATH,
    TOOL_NAME,
    TOOL_VERSION,
)
from core.errors import PackMergeArchiveError
from core.logging_config import get_logger
from core.types import Entry, FormatHint, MergeOptions, SupportedFormatsPolicy
from merge.default_icon import DEFAULT_ICON_PNG
from merge.merged_set import MergedSet

_LOGGER = get_logger(__name__)


def read_format_hint(entry: Entry) -> FormatHint | None:
    """Extract the declared ``pack_format`` from a manifest entry.

    Args:
        entry: Entry found at the manifest path of one input.

    Returns:
        Format hint, or ``None`` when the manifest declares no format.

    Raises:
        PackMergeArchiveError: If the manifest is malformed.
    """
    payload = _parse_manifest(entry)
    pack_section = payload.get("pack")
    if not isinstance(pack_section, dict) or "pack_format" not in pack_section:
        return None
    pack_format = pack_section["pack_format"]
    if isinstance(pack_format, bool) or not isinstance(pack_format, int):
        raise PackMergeArchiveError(
            f"Invalid {MANIFEST_PATH} in source #{entry.source_index}: "
            f"'pack_format' must be an integer, got {pack_format!r}."
        )
    if entry.source_index is None:
        return None
    return FormatHint(source_index=entry.source_index, pack_format=pack_format)


def synthesize_metadata(merged: MergedSet, options: MergeOptions) -> None:
    """Inject or rewrite the manifest, icon, and listing entries.

    Args:
        merged: Finalized merged set, mutated in place.
        options: Merge options carrying overrides and the formats policy.

    Raises:
        PackMergeArchiveError: If the surviving manifest is malformed.
    """
    discovered = [hint.pack_format for hint in merged.format_hints]
    pack_format = resolve_pack_format(discovered, options.pack_format_override)
    supported_formats = compute_supported_formats(
        discovered, pack_format, options.supported_formats_policy
    )
    description = options.description if options.description is not None else default_description()
    existing_manifest = merged.get(MANIFEST_PATH)
    base_payload = _parse_manifest(existing_manifest) if existing_manifest else {}
    merged.put(
        Entry(
            path=MANIFEST_PATH,
            content=_render_manifest(base_payload, pack_format, supported_formats, description),
        )
    )
    if ICON_PATH not in merged:
        merged.put(Entry(path=ICON_PATH, content=DEFAULT_ICON_PNG))
    merged.put(Entry(path=LISTING_PATH, content=render_listing(merged.source_labels)))
    _LOGGER.info(
        "metadata_synthesized",
        pack_format=pack_format,
        supported_formats=supported_formats,
        hint_count=len(discovered),
    )


def resolve_pack_format(discovered: Sequence[int], override: int | None) -> int:
    """Pick the manifest ``pack_format``: override, else highest hint, else 1."""
    if override is not None:
        return override
    if discovered:
        return max(discovered)
    return DEFAULT_PACK_FORMAT


def compute_supported_formats(
    discovered: Sequence[int],
    pack_format: int,
    policy: SupportedFormatsPolicy,
) -> list[int]:
    """Compute the ``supported_formats`` range.

    The range always includes the effective ``pack_format``. The
    ``one_to_latest`` policy has no catalogue of released formats to
    consult yet, so it falls back to ``one_to_highest``.

    Args:
        discovered: Format hints declared by the inputs.
        pack_format: Effective manifest ``pack_format``.
        policy: Range policy.

    Returns:
        Two-element ``[low, high]`` list.
    """
    candidates = [*discovered, pack_format]
    highest = max(candidates)
    if policy == "lowest_to_highest":
        return [min(candidates), highest]
    return [DEFAULT_PACK_FORMAT, highest]


def default_description() -> str:
    return f"Merged with {TOOL_NAME} {TOOL_VERSION}"


def render_listing(source_labels: Sequence[str]) -> bytes:
    """Render the human-readable list of merged inputs.

    Args:
        source_labels: Input labels in merge order.

    Returns:
        UTF-8 listing text.
    """
    lines = [
        f"{TOOL_NAME} {TOOL_VERSION}",
        "Merged packs (later entries win):",
    ]
    if not source_labels:
        lines.append("(none)")
    for position, label in enumerate(source_labels, 1):
        lines.append(f"{position}. {label}")
    return ("\n".join(lines) + "\n").encode("utf-8")


def _render_manifest(
    base_payload: dict[str, Any],
    pack_format: int,
    supported_formats: list[int],
    description: str,
) -> bytes:
    payload = dict(base_payload)
    pack_section = payload.get("pack")
    pack_payload = dict(pack_section) if isinstance(pack_section, dict) else {}
    pack_payload["pack_format"] = pack_format
    pack_payload["supported_formats"] = supported_formats
    pack_payload["description"] = description
    payload["pack"] = pack_payload
    return (json.dumps(payload, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def _parse_manifest(entry: Entry) -> dict[str, Any]:
    try:
        payload = json.loads(entry.content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise PackMergeArchiveError(
            f"Failed to parse {entry.path} in source #{entry.source_index}: {error}. "
            "Fix the manifest JSON and retry."
        ) from error
    if not isinstance(payload, dict):
        raise PackMergeArchiveError(
            f"Invalid {entry.path} in source #{entry.source_index}: "
            "expected a JSON object at top level."
        )
    return payload
