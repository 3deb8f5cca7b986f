"""Shared utilities: error taxonomy and identifier encodings."""

from .encoding import (
    base64_url_safe_encode,
    is_valid_object_id,
    normalize_blob_id,
    object_id_to_subdomain,
    sha256_digest,
    subdomain_to_object_id,
    u256_to_bytes,
)
from .exceptions import (
    BadInputError,
    BlobNotFoundError,
    ConfigurationError,
    EmptySiteError,
    GatewayError,
    IntegrityMismatchError,
    MalformedObjectError,
    NotFoundError,
    RegistryError,
    UpstreamUnavailableError,
)

__all__ = [
    "base64_url_safe_encode",
    "is_valid_object_id",
    "normalize_blob_id",
    "object_id_to_subdomain",
    "sha256_digest",
    "subdomain_to_object_id",
    "u256_to_bytes",
    "BadInputError",
    "BlobNotFoundError",
    "ConfigurationError",
    "EmptySiteError",
    "GatewayError",
    "IntegrityMismatchError",
    "MalformedObjectError",
    "NotFoundError",
    "RegistryError",
    "UpstreamUnavailableError",
]
