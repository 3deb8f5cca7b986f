"""Request URL parsing relative to the portal domain."""
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import SplitResult, urlsplit

from loguru import logger

from walrus_gateway.shared.exceptions import BadInputError

LOCALHOST = "localhost"

UrlLike = Union[str, SplitResult]


@dataclass(frozen=True)
class DomainDetails:
    """Parsed request target.

    Attributes:
        subdomain: Labels before the portal domain, lower-cased
        path: URL path, always starting with ``/``
    """

    subdomain: str
    path: str


def validate_url(value: str) -> SplitResult:
    """Parse a caller supplied URL.

    Raises:
        BadInputError: The value is not an absolute http(s) URL
    """
    try:
        parsed = urlsplit(value.strip())
        hostname = parsed.hostname
    except ValueError as e:
        logger.error(f"Error validating URL: {e}")
        raise BadInputError("Invalid URL format.") from e

    if parsed.scheme not in ("http", "https"):
        if not parsed.scheme or not hostname:
            raise BadInputError("Invalid URL format.")
        raise BadInputError("URL must use http or https protocol.")
    if not hostname:
        raise BadInputError("Invalid URL format.")
    return parsed


def _hostname(url: UrlLike) -> str:
    parsed = urlsplit(url) if isinstance(url, str) else url
    return (parsed.hostname or "").lower()


def _path(url: UrlLike) -> str:
    parsed = urlsplit(url) if isinstance(url, str) else url
    path = parsed.path or "/"
    return path if path.startswith("/") else "/" + path


def get_domain(url: UrlLike, portal_name_length: int) -> str:
    """Return the bare portal domain of ``url``.

    The portal domain is the last ``portal_name_length`` characters of the
    host, except for local development hosts under ``localhost``.
    """
    hostname = _hostname(url)
    if hostname == LOCALHOST or hostname.endswith("." + LOCALHOST):
        return LOCALHOST
    return hostname[-portal_name_length:]


def get_subdomain_and_path(url: UrlLike, portal_name_length: int) -> Optional[DomainDetails]:
    """Split ``url`` into the subdomain and path relative to the portal domain.

    Returns None when no label precedes the portal domain. A trailing ``/`` in
    the path is kept as-is; mapping it to an index file is up to the caller.
    """
    hostname = _hostname(url)
    domain = get_domain(url, portal_name_length)

    if len(hostname) <= len(domain) + 1:
        return None
    if not hostname.endswith("." + domain):
        return None

    subdomain = hostname[: -(len(domain) + 1)]
    return DomainDetails(subdomain=subdomain, path=_path(url))


__all__ = ["DomainDetails", "validate_url", "get_domain", "get_subdomain_and_path"]
