"""Public SDK surface for packmerge.

This module provides a stable import path for library users.
It re-exports the merge operations, source types, and option models.
"""

from __future__ import annotations

from core.config import PackMergeConfig
from core.errors import (
    PackMergeArchiveError,
    PackMergeConfigError,
    PackMergeConflictError,
    PackMergeDependencyError,
    PackMergeError,
    PackMergeIoError,
    PackMergeNetworkError,
    PackMergeSanitizationError,
)
from core.merge_settings import resolve_merge_options
from core.types import (
    ArchiveBytesSource,
    ArchiveFileSource,
    DirectorySource,
    Entry,
    MergeOptions,
    MergeReport,
    MergeSettings,
    RemoteArchiveSource,
    Source,
)
from ingest.config_reader import load_merge_config, read_config
from ingest.remote_fetch import RemoteFetcher
from ingest.source_resolver import source_from_string
from merge.merge_api import (
    merge_all_in_folder,
    merge_plan,
    merge_to_bytes,
    merge_to_directory,
    merge_to_file,
)

__all__ = [
    "ArchiveBytesSource",
    "ArchiveFileSource",
    "DirectorySource",
    "Entry",
    "MergeOptions",
    "MergeReport",
    "MergeSettings",
    "PackMergeArchiveError",
    "PackMergeConfig",
    "PackMergeConfigError",
    "PackMergeConflictError",
    "PackMergeDependencyError",
    "PackMergeError",
    "PackMergeIoError",
    "PackMergeNetworkError",
    "PackMergeSanitizationError",
    "RemoteArchiveSource",
    "RemoteFetcher",
    "Source",
    "load_merge_config",
    "merge_all_in_folder",
    "merge_plan",
    "merge_to_bytes",
    "merge_to_directory",
    "merge_to_file",
    "read_config",
    "resolve_merge_options",
    "source_from_string",
]
