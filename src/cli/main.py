"""packmerge CLI entry points.

This module maps argparse flags and an optional merge config file onto
the merge SDK. Flags override same-named config fields.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from core.config import PackMergeConfig
from core.constants import REMOTE_URI_PREFIXES
from core.errors import PackMergeConfigError, PackMergeError
from core.logging_config import configure_logging
from core.merge_settings import (
    parse_overwrite_policy,
    parse_supported_formats_policy,
    resolve_merge_options,
)
from core.types import MergeOptions, MergeReport, MergeSettings, Source
from ingest.config_reader import MergeConfigFile, load_merge_config
from ingest.remote_fetch import RemoteFetcher
from ingest.source_resolver import source_from_string
from merge.merge_api import merge_to_directory, merge_to_file

OVERWRITE_CHOICES = ("last", "first", "error", "skip")
SUPPORTED_FORMATS_CHOICES = ("one-to-highest", "lowest-to-highest", "one-to-latest")


@dataclass(frozen=True)
class MergeInvocation:
    """Fully resolved CLI request."""

    sources: tuple[Source, ...]
    out: Path
    output_dir: bool
    options: MergeOptions


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="packmerge",
        description="Merge resource packs into one zip. Later inputs overwrite earlier ones.",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        help="Pack directories, zip files, or http(s)/s3 URLs; the last has highest priority",
    )
    parser.add_argument("-o", "--out", help="Output zip path, or directory with --dir")
    parser.add_argument(
        "--dir",
        action="store_true",
        default=None,
        help="Write output as a directory instead of a zip file",
    )
    parser.add_argument(
        "--config",
        help="Config file (lines, .json, or .yaml); its inputs are merged first",
    )
    parser.add_argument("--overwrite", choices=OVERWRITE_CHOICES, help="Overwrite policy")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Validate and report without writing output",
    )
    parser.add_argument("--buffer-size", type=int, help="Streaming chunk size in bytes")
    parser.add_argument(
        "--atomic",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write to a temporary location and rename into place",
    )
    parser.add_argument(
        "--preserve-timestamps",
        action="store_true",
        default=None,
        help="Keep entry modification times in the output",
    )
    parser.add_argument("--pack-format", type=int, help="Force the manifest pack_format")
    parser.add_argument(
        "--supported-formats",
        choices=SUPPORTED_FORMATS_CHOICES,
        help="How supported_formats is computed",
    )
    parser.add_argument("--description", help="Manifest description")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the packmerge CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        runtime_config = PackMergeConfig.from_env()
        configure_logging(runtime_config.log_level)
        invocation = build_invocation(args)
    except PackMergeError as error:
        print(f"error={error}", file=sys.stderr)
        return 2
    fetcher = RemoteFetcher(runtime_config)
    try:
        if invocation.output_dir:
            report = merge_to_directory(
                invocation.sources, invocation.out, invocation.options, fetcher
            )
        else:
            report = merge_to_file(invocation.sources, invocation.out, invocation.options, fetcher)
    except PackMergeError as error:
        print(f"error={error}", file=sys.stderr)
        return 1
    _print_report(report, invocation.output_dir)
    return 0


def build_invocation(args: argparse.Namespace) -> MergeInvocation:
    """Combine config file values and CLI flags into one request.

    Args:
        args: Parsed CLI args.

    Returns:
        Resolved invocation.

    Raises:
        PackMergeConfigError: If inputs, output, or option values are invalid.
    """
    config_file = (
        load_merge_config(Path(args.config))
        if args.config
        else MergeConfigFile(sources=(), settings=MergeSettings())
    )
    sources = config_file.sources + tuple(_parse_input(value) for value in args.inputs)
    out_value = Path(args.out).expanduser() if args.out else config_file.out
    if out_value is None:
        raise PackMergeConfigError(
            "No output path given. Pass --out or set 'out' in the config file."
        )
    output_dir = args.dir if args.dir is not None else bool(config_file.output_dir)
    options = resolve_merge_options(config_file.settings, _cli_settings(args))
    return MergeInvocation(sources=sources, out=out_value, output_dir=output_dir, options=options)


def _parse_input(value: str) -> Source:
    if not value.startswith(REMOTE_URI_PREFIXES) and not Path(value).expanduser().exists():
        raise PackMergeConfigError(
            f"Input path does not exist: {value}. Provide a pack directory or zip file."
        )
    return source_from_string(value)


def _cli_settings(args: argparse.Namespace) -> MergeSettings:
    return MergeSettings(
        buffer_size=args.buffer_size,
        atomic=args.atomic,
        preserve_timestamps=args.preserve_timestamps,
        pack_format_override=args.pack_format,
        supported_formats_policy=(
            parse_supported_formats_policy(args.supported_formats)
            if args.supported_formats
            else None
        ),
        description=args.description,
        overwrite=parse_overwrite_policy(args.overwrite) if args.overwrite else None,
        dry_run=args.dry_run,
    )


def _print_report(report: MergeReport, output_dir: bool) -> None:
    print(f"destination={report.destination}")
    print(f"kind={'directory' if output_dir else 'archive'}")
    print(f"sources={len(report.source_labels)}")
    print(f"entries={report.entry_count}")
    print(f"dry_run={'true' if report.dry_run else 'false'}")
    for collision in report.collisions:
        print(
            f"collision={collision.path}\t"
            f"kept={_format_source(collision.kept_source)}\t"
            f"other={_format_source(collision.other_source)}\t"
            f"outcome={collision.outcome}"
        )


def _format_source(source_index: int | None) -> str:
    return "-" if source_index is None else f"#{source_index}"
