"""Runtime configuration model for packmerge.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_LOG_LEVEL
from core.errors import PackMergeConfigError

SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True)
class PackMergeConfig:
    """Validated runtime configuration.

    Attributes:
        http_timeout_seconds: Timeout applied to remote pack downloads.
        s3_region: Optional default AWS region for s3:// packs.
        s3_profile: Optional AWS profile for boto3 session initialization.
        log_level: Minimum structured log level.
    """

    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    s3_region: str | None = None
    s3_profile: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "PackMergeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            PackMergeConfigError: If environment values are invalid.
        """
        timeout_value = os.getenv("PACKMERGE_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT_SECONDS))
        log_level_value = os.getenv("PACKMERGE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            http_timeout_seconds=_parse_timeout(timeout_value),
            s3_region=os.getenv("PACKMERGE_S3_REGION"),
            s3_profile=os.getenv("PACKMERGE_S3_PROFILE"),
            log_level=_parse_log_level(log_level_value),
        )


def _parse_timeout(raw_value: str) -> float:
    """Parse the HTTP timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive timeout in seconds.

    Raises:
        PackMergeConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise PackMergeConfigError(
            "Invalid PACKMERGE_HTTP_TIMEOUT value: "
            f"expected number of seconds, got '{raw_value}'. "
            "Set PACKMERGE_HTTP_TIMEOUT to a numeric value."
        ) from error
    if timeout <= 0:
        raise PackMergeConfigError(
            f"Invalid PACKMERGE_HTTP_TIMEOUT value {raw_value}: expected value > 0."
        )
    return timeout


def _parse_log_level(raw_value: str) -> str:
    level = raw_value.strip().lower()
    if level not in SUPPORTED_LOG_LEVELS:
        raise PackMergeConfigError(
            f"Invalid PACKMERGE_LOG_LEVEL value '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return level
