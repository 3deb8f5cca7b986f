"""Walrus aggregator client."""
from .aggregator import (
    BlobRetriever,
    RetrievedBlob,
    ServerError,
    aggregator_endpoint,
    fetch_with_retry,
    range_to_headers,
)

__all__ = [
    "BlobRetriever",
    "RetrievedBlob",
    "ServerError",
    "aggregator_endpoint",
    "fetch_with_retry",
    "range_to_headers",
]
