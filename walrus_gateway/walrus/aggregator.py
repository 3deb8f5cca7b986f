"""Walrus aggregator access.

Fetches blob bytes over plain HTTP with a fixed-delay retry and an optional
integrity check against the resource's blob hash.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import httpx
from loguru import logger

from walrus_gateway.resources.models import Range, ResourcePath
from walrus_gateway.shared.encoding import base64_url_safe_encode, normalize_blob_id, sha256_digest
from walrus_gateway.shared.exceptions import (
    BlobNotFoundError,
    IntegrityMismatchError,
    UpstreamUnavailableError,
)

OBJECT_VERSION_HEADER = "x-resource-sui-object-version"
OBJECT_ID_HEADER = "x-resource-sui-object-id"
CACHED_AT_HEADER = "x-unix-time-cached"

Verifier = Callable[[bytes], None]


class ServerError(UpstreamUnavailableError):
    """The aggregator answered with a 5xx status."""

    def __init__(self, status: int):
        super().__init__(f"Server responded with status {status}")
        self.status = status


@dataclass(frozen=True)
class RetrievedBlob:
    """Bytes fetched for one resource.

    Attributes:
        content: Body returned by the aggregator
        headers: Resource headers plus object version, object id and fetch time
        blob_id: Blob id in aggregator form
        fetched_at: When the bytes were received
    """

    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    blob_id: str = ""
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def aggregator_endpoint(blob_id: str, aggregator_url: str) -> str:
    """Return the URL serving ``blob_id``.

    Raises:
        ValueError: aggregator_url ends with a slash
    """
    if aggregator_url.endswith("/"):
        raise ValueError("Aggregator URL must not end with a slash.")
    return f"{aggregator_url}/v1/blobs/{quote(blob_id, safe='')}"


def range_to_headers(range_: Optional[Range]) -> Dict[str, str]:
    if range_ is None:
        return {}
    start = "" if range_.start is None else str(range_.start)
    end = "" if range_.end is None else str(range_.end)
    return {"range": f"bytes={start}-{end}"}


async def fetch_with_retry(
    http_client: httpx.AsyncClient,
    url: str,
    headers: Optional[Dict[str, str]] = None,
    max_retries: int = 2,
    delay_ms: int = 1000,
    verify: Optional[Verifier] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """
    Fetch ``url``, retrying on 5xx statuses and transport errors.

    The delay between attempts is fixed, it does not grow. ``verify`` runs on
    each successful body; an IntegrityMismatchError it raises consumes an
    attempt like any other failure.

    Args:
        http_client: Shared async HTTP client
        url: Aggregator URL
        headers: Request headers (byte range)
        max_retries: Retries after the first attempt; 0 means a single attempt
        delay_ms: Delay between attempts in milliseconds
        verify: Optional integrity check on the response body
        sleep: Coroutine used for the delay

    Returns:
        The successful response

    Raises:
        BlobNotFoundError: The aggregator answered with a non-5xx error status
        UpstreamUnavailableError: All attempts failed on 5xx or transport errors
        IntegrityMismatchError: All attempts returned bytes failing ``verify``
    """
    if max_retries < 0:
        logger.warning(f"Invalid retries value ({max_retries}). Falling back to a single fetch call.")
        return await _fetch_once(http_client, url, headers, verify)

    last_error: Optional[Exception] = None
    for attempt in range(max_retries + 1):
        try:
            return await _fetch_once(http_client, url, headers, verify)
        except (IntegrityMismatchError, UpstreamUnavailableError) as e:
            last_error = e
        logger.error(f"Fetch attempt failed: attempt={attempt + 1}, total_attempts={max_retries + 1}, error={last_error}")

        if attempt < max_retries:
            await sleep(delay_ms / 1000)

    raise last_error


async def _fetch_once(
    http_client: httpx.AsyncClient,
    url: str,
    headers: Optional[Dict[str, str]],
    verify: Optional[Verifier],
) -> httpx.Response:
    try:
        response = await http_client.get(url, headers=headers or {})
    except httpx.HTTPError as e:
        raise UpstreamUnavailableError(f"Unable to reach the aggregator: {type(e).__name__}", cause=e) from e

    if response.status_code >= 500:
        raise ServerError(response.status_code)
    if response.status_code >= 400:
        raise BlobNotFoundError(
            f"Aggregator responded with status {response.status_code}", status=response.status_code
        )
    if verify is not None:
        verify(response.content)
    return response


class BlobRetriever:
    """Fetches resource bytes from the aggregator."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        aggregator_url: str,
        max_retries: int = 2,
        delay_ms: int = 1000,
        verify_hash: bool = False,
    ):
        if aggregator_url.endswith("/"):
            raise ValueError("Aggregator URL must not end with a slash.")
        self._http = http_client
        self.aggregator_url = aggregator_url
        self.max_retries = max_retries
        self.delay_ms = delay_ms
        self.verify_hash = verify_hash

    @staticmethod
    def verify(resource: ResourcePath, body: bytes) -> None:
        """
        Check ``body`` against the resource's blob hash.

        Resources without a recorded hash pass.

        Raises:
            IntegrityMismatchError: The SHA-256 of body differs from the blob hash
        """
        if not resource.blob_hash:
            return
        digest = sha256_digest(body)
        if digest != resource.blob_hash:
            logger.error(
                "Checksum mismatch! The hash of the fetched resource does not match the hash "
                f"of the aggregator response. path={resource.path}, "
                f"blob_hash={base64_url_safe_encode(resource.blob_hash)}, aggr_hash={base64_url_safe_encode(digest)}"
            )
            raise IntegrityMismatchError(
                f"Checksum mismatch for {resource.path}", expected=resource.blob_hash, actual=digest
            )

    async def retrieve(self, resource: ResourcePath) -> RetrievedBlob:
        """Fetch the bytes of ``resource`` and attach the object metadata headers."""
        blob_id = normalize_blob_id(resource.blob_id)
        url = aggregator_endpoint(blob_id, self.aggregator_url)
        logger.info(f"Fetching blob from aggregator: aggregator_url={self.aggregator_url}, blob_id={blob_id}")

        verifier = (lambda body: self.verify(resource, body)) if self.verify_hash else None
        response = await fetch_with_retry(
            self._http,
            url,
            headers=range_to_headers(resource.range),
            max_retries=self.max_retries,
            delay_ms=self.delay_ms,
            verify=verifier,
        )

        fetched_at = datetime.now(timezone.utc)
        headers = dict(resource.headers)
        headers[OBJECT_VERSION_HEADER] = str(resource.version)
        headers[OBJECT_ID_HEADER] = resource.object_id
        headers[CACHED_AT_HEADER] = str(int(fetched_at.timestamp() * 1000))
        return RetrievedBlob(content=response.content, headers=headers, blob_id=blob_id, fetched_at=fetched_at)


__all__ = [
    "RetrievedBlob",
    "BlobRetriever",
    "ServerError",
    "aggregator_endpoint",
    "range_to_headers",
    "fetch_with_retry",
]
