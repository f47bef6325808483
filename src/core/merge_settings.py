"""Merge option parsing and layering.

This module is the single place where policy names and option values
from config files and CLI flags are validated and combined.
"""

from __future__ import annotations

from dataclasses import fields, replace

from core.errors import PackMergeConfigError
from core.types import (
    SUPPORTED_FORMATS_POLICIES,
    MergeOptions,
    MergeSettings,
    OverwritePolicy,
    SupportedFormatsPolicy,
)

_OVERWRITE_ALIASES: dict[str, OverwritePolicy] = {
    "last": "last_wins",
    "lastwins": "last_wins",
    "last_wins": "last_wins",
    "first": "first_wins",
    "firstwins": "first_wins",
    "first_wins": "first_wins",
    "error": "error_if_conflict",
    "errorifconflict": "error_if_conflict",
    "error_if_conflict": "error_if_conflict",
    "skip": "skip_if_exists",
    "skipifexists": "skip_if_exists",
    "skip_if_exists": "skip_if_exists",
}


def parse_overwrite_policy(raw_value: str) -> OverwritePolicy:
    """Parse an overwrite policy name.

    Args:
        raw_value: Policy name such as ``last`` or ``error_if_conflict``.

    Returns:
        Canonical policy value.

    Raises:
        PackMergeConfigError: If the name is unknown.
    """
    key = raw_value.strip().lower().replace("-", "_")
    policy = _OVERWRITE_ALIASES.get(key)
    if policy is None:
        raise PackMergeConfigError(
            f"Unknown overwrite policy '{raw_value}'. Use one of: last, first, error, skip."
        )
    return policy


def parse_supported_formats_policy(raw_value: str) -> SupportedFormatsPolicy:
    """Parse a supported-formats policy name.

    Args:
        raw_value: Policy name such as ``one-to-highest``.

    Returns:
        Canonical policy value.

    Raises:
        PackMergeConfigError: If the name is unknown.
    """
    key = raw_value.strip().lower().replace("-", "_")
    for policy in SUPPORTED_FORMATS_POLICIES:
        if key == policy:
            return policy
    supported_rows = ", ".join(name.replace("_", "-") for name in SUPPORTED_FORMATS_POLICIES)
    raise PackMergeConfigError(
        f"Unknown supported-formats policy '{raw_value}'. Use one of: {supported_rows}."
    )


def layer_settings(base: MergeSettings, override: MergeSettings) -> MergeSettings:
    """Overlay explicitly set fields of ``override`` onto ``base``.

    Args:
        base: Lower-priority settings, usually from a config file.
        override: Higher-priority settings, usually from CLI flags.

    Returns:
        Combined settings.
    """
    changes = {
        item.name: getattr(override, item.name)
        for item in fields(override)
        if getattr(override, item.name) is not None
    }
    return replace(base, **changes)


def resolve_merge_options(*layers: MergeSettings) -> MergeOptions:
    """Resolve layered settings into validated merge options.

    Args:
        layers: Settings ordered from lowest to highest priority.

    Returns:
        Complete merge options with defaults for unset fields.

    Raises:
        PackMergeConfigError: If a resolved value is out of range.
    """
    combined = MergeSettings()
    for layer in layers:
        combined = layer_settings(combined, layer)
    explicit = {
        item.name: getattr(combined, item.name)
        for item in fields(combined)
        if getattr(combined, item.name) is not None
    }
    options = MergeOptions(**explicit)
    validate_merge_options(options)
    return options


def validate_merge_options(options: MergeOptions) -> None:
    """Validate numeric option ranges.

    Args:
        options: Options to check.

    Raises:
        PackMergeConfigError: If a value is out of range.
    """
    if options.buffer_size < 1:
        raise PackMergeConfigError(
            f"Invalid buffer size {options.buffer_size}: expected value >= 1. "
            "Use --buffer-size with a positive integer."
        )
    if options.pack_format_override is not None and options.pack_format_override < 1:
        raise PackMergeConfigError(
            f"Invalid pack format {options.pack_format_override}: expected value >= 1."
        )
