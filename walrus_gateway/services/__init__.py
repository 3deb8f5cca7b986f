from .factory import create_http_client, create_resolver, create_url_fetcher
from .url_fetcher import INDEX_FILE, FileResult, SitePayload, UrlFetcher

__all__ = [
    "UrlFetcher",
    "SitePayload",
    "FileResult",
    "INDEX_FILE",
    "create_http_client",
    "create_resolver",
    "create_url_fetcher",
]
