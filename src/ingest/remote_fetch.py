"""Remote pack download helpers.

This module fetches whole zip payloads from HTTP(S) URLs or S3 objects.
A fetch either returns complete bytes or raises; nothing is retried here.
"""

from __future__ import annotations

from typing import Any

import httpx

from core.config import PackMergeConfig
from core.errors import PackMergeDependencyError, PackMergeNetworkError
from core.logging_config import get_logger
from core.s3_uri import parse_s3_uri

_LOGGER = get_logger(__name__)


class RemoteFetcher:
    """Download remote pack archives into memory."""

    def __init__(
        self,
        config: PackMergeConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Create a fetcher.

        Args:
            config: Runtime configuration for timeouts and S3 sessions.
            http_client: Optional preconfigured HTTP client.
        """
        self._config = config or PackMergeConfig.from_env()
        self._http_client = http_client

    def fetch(self, uri: str) -> bytes:
        """Fetch a remote pack payload.

        Args:
            uri: ``http://``, ``https://``, or ``s3://`` URI.

        Returns:
            Complete archive bytes.

        Raises:
            PackMergeNetworkError: If the download fails.
            PackMergeDependencyError: If boto3 is needed but missing.
        """
        if uri.startswith("s3://"):
            payload = self._fetch_s3(uri)
        elif uri.startswith(("http://", "https://")):
            payload = self._fetch_http(uri)
        else:
            raise PackMergeNetworkError(
                f"Unsupported remote pack URI '{uri}'. Use http://, https://, or s3://."
            )
        _LOGGER.info("remote_fetched", uri=uri, byte_count=len(payload))
        return payload

    def _fetch_http(self, url: str) -> bytes:
        client = self._http_client or httpx.Client(
            timeout=self._config.http_timeout_seconds,
            follow_redirects=True,
        )
        try:
            response = client.get(url)
        except httpx.HTTPError as error:
            raise PackMergeNetworkError(
                f"Failed to GET {url}: {error}. Check the URL and network access."
            ) from error
        finally:
            if self._http_client is None:
                client.close()
        if not response.is_success:
            raise PackMergeNetworkError(
                f"GET {url} returned HTTP {response.status_code}. "
                "Check that the pack URL points at a downloadable zip."
            )
        return response.content

    def _fetch_s3(self, uri: str) -> bytes:
        location = parse_s3_uri(uri)
        s3_client = _create_s3_client(self._config)
        try:
            response = s3_client.get_object(Bucket=location.bucket, Key=location.key)
            return bytes(response["Body"].read())
        except Exception as error:
            raise PackMergeNetworkError(
                f"Failed to download {uri}: {error}. Check bucket access and object key."
            ) from error


def _create_s3_client(config: PackMergeConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        PackMergeDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise PackMergeDependencyError(
            "s3:// packs require boto3, but it is not installed. "
            "Install packmerge[s3] to merge packs from S3."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")
