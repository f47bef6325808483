"""Merge config file parsing.

This module loads line-based, JSON, and YAML merge config files.
Option fields are named like the CLI flags so both layers share one schema.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence, cast

import yaml

from core.constants import JSON_CONFIG_SUFFIXES, YAML_CONFIG_SUFFIXES
from core.errors import PackMergeConfigError
from core.merge_settings import parse_overwrite_policy, parse_supported_formats_policy
from core.types import MergeSettings, Source
from ingest.source_resolver import source_from_string

SUPPORTED_CONFIG_KEYS = (
    "inputs",
    "out",
    "dir",
    "overwrite",
    "dry_run",
    "buffer_size",
    "atomic",
    "preserve_timestamps",
    "pack_format",
    "supported_formats",
    "description",
)


@dataclass(frozen=True)
class MergeConfigFile:
    """Validated merge config file.

    Attributes:
        sources: Pack inputs in merge order.
        settings: Merge option values set by the file.
        out: Optional output path.
        output_dir: Optional flag selecting directory output.
    """

    sources: tuple[Source, ...]
    settings: MergeSettings
    out: Path | None = None
    output_dir: bool | None = None


def read_config(config_path: Path) -> list[Source]:
    """Read the ordered pack inputs listed by a config file.

    Args:
        config_path: Line-based, JSON, or YAML config file.

    Returns:
        Sources in merge order.

    Raises:
        PackMergeConfigError: If the file is missing or malformed.
    """
    return list(load_merge_config(config_path).sources)


def load_merge_config(config_path: Path) -> MergeConfigFile:
    """Load a merge config file with inputs and option fields.

    Line-based files list one input per line and treat ``#`` lines as
    comments. JSON and YAML files hold either a list of inputs or a mapping
    with ``inputs`` plus option fields.

    Args:
        config_path: Config file path.

    Returns:
        Parsed config.

    Raises:
        PackMergeConfigError: If the file is missing or malformed.
    """
    config_file = config_path.expanduser().resolve()
    text = _read_config_text(config_file)
    base_dir = config_file.parent
    suffix = config_file.suffix.lower()
    if suffix in JSON_CONFIG_SUFFIXES:
        return _parse_structured_payload(_load_json(config_file, text), config_file, base_dir)
    if suffix in YAML_CONFIG_SUFFIXES:
        return _parse_structured_payload(_load_yaml(config_file, text), config_file, base_dir)
    return _parse_line_config(text, base_dir)


def _read_config_text(config_file: Path) -> str:
    if not config_file.is_file():
        raise PackMergeConfigError(
            f"Config file does not exist at {config_file}. Provide a valid config path."
        )
    try:
        return config_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise PackMergeConfigError(
            f"Failed to read config at {config_file}: {error}. "
            "Check file permissions and encoding."
        ) from error


def _parse_line_config(text: str, base_dir: Path) -> MergeConfigFile:
    sources: list[Source] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        sources.append(source_from_string(stripped, base_dir))
    return MergeConfigFile(sources=tuple(sources), settings=MergeSettings())


def _load_json(config_file: Path, text: str) -> object:
    try:
        return cast(object, json.loads(text))
    except json.JSONDecodeError as error:
        raise PackMergeConfigError(
            f"Failed to parse JSON config at {config_file}:{error.lineno}: {error.msg}. "
            "Fix the JSON syntax and retry."
        ) from error


def _load_yaml(config_file: Path, text: str) -> object:
    try:
        return cast(object, yaml.safe_load(text))
    except yaml.YAMLError as error:
        raise PackMergeConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error


def _parse_structured_payload(
    payload: object,
    config_file: Path,
    base_dir: Path,
) -> MergeConfigFile:
    if payload is None:
        return MergeConfigFile(sources=(), settings=MergeSettings())
    if _is_sequence(payload):
        sources = _parse_inputs(cast(Sequence[object], payload), base_dir)
        return MergeConfigFile(sources=sources, settings=MergeSettings())
    if not isinstance(payload, Mapping):
        raise PackMergeConfigError(
            f"Invalid config at {config_file}: expected list or mapping, "
            f"got {type(payload).__name__}."
        )
    fields = _normalize_keys(cast(Mapping[object, object], payload), config_file)
    raw_inputs = fields.get("inputs", [])
    if not _is_sequence(raw_inputs):
        raise PackMergeConfigError(
            f"Invalid config at {config_file}: field 'inputs' must be a list of paths or URLs."
        )
    return MergeConfigFile(
        sources=_parse_inputs(cast(Sequence[object], raw_inputs), base_dir),
        settings=_parse_settings(fields),
        out=_resolve_out(_optional_string(fields, "out"), base_dir),
        output_dir=_optional_bool(fields, "dir"),
    )


def _normalize_keys(payload: Mapping[object, object], config_file: Path) -> dict[str, object]:
    fields: dict[str, object] = {}
    for key, value in payload.items():
        if not isinstance(key, str):
            raise PackMergeConfigError(
                f"Invalid config at {config_file}: expected string keys, "
                f"got {type(key).__name__}."
            )
        normalized_key = key.replace("-", "_")
        if normalized_key not in SUPPORTED_CONFIG_KEYS:
            supported_rows = ", ".join(SUPPORTED_CONFIG_KEYS)
            raise PackMergeConfigError(
                f"Unsupported config field '{key}' in {config_file}. "
                f"Use one of: {supported_rows}."
            )
        fields[normalized_key] = value
    return fields


def _parse_inputs(raw_inputs: Sequence[object], base_dir: Path) -> tuple[Source, ...]:
    sources: list[Source] = []
    for index, raw_input in enumerate(raw_inputs):
        if not isinstance(raw_input, str) or not raw_input.strip():
            raise PackMergeConfigError(
                f"Invalid config input #{index + 1}: expected a non-empty path or URL string."
            )
        sources.append(source_from_string(raw_input.strip(), base_dir))
    return tuple(sources)


def _parse_settings(fields: Mapping[str, object]) -> MergeSettings:
    overwrite = _optional_string(fields, "overwrite")
    formats_policy = _optional_string(fields, "supported_formats")
    return MergeSettings(
        buffer_size=_optional_int(fields, "buffer_size"),
        atomic=_optional_bool(fields, "atomic"),
        preserve_timestamps=_optional_bool(fields, "preserve_timestamps"),
        pack_format_override=_optional_int(fields, "pack_format"),
        supported_formats_policy=(
            parse_supported_formats_policy(formats_policy) if formats_policy else None
        ),
        description=_optional_string(fields, "description"),
        overwrite=parse_overwrite_policy(overwrite) if overwrite else None,
        dry_run=_optional_bool(fields, "dry_run"),
    )


def _optional_string(fields: Mapping[str, object], key: str) -> str | None:
    value = fields.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PackMergeConfigError(f"Config field '{key}' must be a string.")
    return value


def _optional_int(fields: Mapping[str, object], key: str) -> int | None:
    value = fields.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise PackMergeConfigError(f"Config field '{key}' must be an integer.")
    return value


def _optional_bool(fields: Mapping[str, object], key: str) -> bool | None:
    value = fields.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise PackMergeConfigError(f"Config field '{key}' must be true or false.")
    return value


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _resolve_out(raw_out: str | None, base_dir: Path) -> Path | None:
    if raw_out is None:
        return None
    out_path = Path(raw_out).expanduser()
    return out_path if out_path.is_absolute() else base_dir / out_path
