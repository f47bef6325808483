"""Core constants used across packmerge modules.

This module centralizes pack layout names and merge defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

TOOL_NAME = "packmerge"
TOOL_VERSION = "0.1.0"
MANIFEST_PATH = "pack.mcmeta"
ICON_PATH = "pack.png"
LISTING_PATH = "merged_packs.txt"
DEFAULT_BUFFER_SIZE = 32 * 1024
DEFAULT_PACK_FORMAT = 1
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "warning"
REMOTE_URI_PREFIXES = ("http://", "https://", "s3://")
ARCHIVE_FILE_MODE = 0o644
ARCHIVE_EPOCH_DATE_TIME = (1980, 1, 1, 0, 0, 0)
TEMP_NAME_PREFIX = ".packmerge-"
JSON_CONFIG_SUFFIXES = (".json",)
YAML_CONFIG_SUFFIXES = (".yaml", ".yml")
