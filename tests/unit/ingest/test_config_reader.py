"""Unit tests for merge config file parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import PackMergeConfigError
from core.types import ArchiveFileSource, DirectorySource, RemoteArchiveSource
from ingest.config_reader import load_merge_config, read_config
from tests.fixture_paths import fixture_path


def test_read_config_line_format_skips_comments_and_blank_lines() -> None:
    """Line configs should yield one source per non-comment line."""
    sources = read_config(fixture_path("configs/packs.txt"))

    assert [source.path.name for source in sources] == ["base", "overlay"]


def test_read_config_resolves_paths_against_config_directory() -> None:
    """Relative inputs should resolve next to the config file."""
    sources = read_config(fixture_path("configs/packs.txt"))

    assert isinstance(sources[0], DirectorySource) and sources[0].path.is_dir()


def test_read_config_line_format_classifies_urls_and_archives(tmp_path: Path) -> None:
    """URLs become remote sources and non-directories become archive files."""
    config_path = tmp_path / "packs.list"
    config_path.write_text(
        "https://example.com/pack.zip\ns3://bucket/packs/extra.zip\nlocal.zip\n",
        encoding="utf-8",
    )

    sources = read_config(config_path)

    assert [type(source) for source in sources] == [
        RemoteArchiveSource,
        RemoteArchiveSource,
        ArchiveFileSource,
    ]


def test_load_merge_config_json_reads_option_fields() -> None:
    """JSON configs should map flag-named fields onto merge settings."""
    config = load_merge_config(fixture_path("configs/packs.json"))

    assert (
        config.settings.overwrite,
        config.settings.buffer_size,
        config.settings.supported_formats_policy,
        config.settings.description,
        len(config.sources),
    ) == ("first_wins", 1024, "lowest_to_highest", "From JSON", 2)


def test_load_merge_config_yaml_reads_output_fields() -> None:
    """YAML configs should carry out, dir, atomic, and pack format values."""
    config = load_merge_config(fixture_path("configs/packs.yaml"))

    assert (
        config.out,
        config.output_dir,
        config.settings.atomic,
        config.settings.pack_format_override,
    ) == (fixture_path("configs/merged.zip"), False, False, 12)


def test_load_merge_config_accepts_plain_json_list(tmp_path: Path) -> None:
    """A JSON list should be read as inputs with no option overrides."""
    config_path = tmp_path / "packs.json"
    config_path.write_text('["a.zip", "b.zip"]', encoding="utf-8")

    config = load_merge_config(config_path)

    assert len(config.sources) == 2 and config.settings.overwrite is None


def test_load_merge_config_rejects_unknown_field() -> None:
    """Unknown config fields should raise a config error."""
    with pytest.raises(PackMergeConfigError):
        load_merge_config(fixture_path("configs/bad_field.json"))


def test_load_merge_config_rejects_wrong_field_type(tmp_path: Path) -> None:
    """Typed fields should reject mismatched values."""
    config_path = tmp_path / "packs.yaml"
    config_path.write_text("inputs: []\nbuffer_size: big\n", encoding="utf-8")

    with pytest.raises(PackMergeConfigError):
        load_merge_config(config_path)


def test_load_merge_config_rejects_malformed_json(tmp_path: Path) -> None:
    """Malformed JSON should raise a config error."""
    config_path = tmp_path / "packs.json"
    config_path.write_text('{"inputs": [', encoding="utf-8")

    with pytest.raises(PackMergeConfigError):
        load_merge_config(config_path)


def test_load_merge_config_raises_for_missing_file(tmp_path: Path) -> None:
    """A missing config file should raise a config error."""
    with pytest.raises(PackMergeConfigError):
        load_merge_config(tmp_path / "absent.txt")
