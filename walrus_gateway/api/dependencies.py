from fastapi import HTTPException, Request, status

from walrus_gateway.config import Config, get_config
from walrus_gateway.services.url_fetcher import UrlFetcher


def get_url_fetcher(request: Request) -> UrlFetcher:
    """
    Dependency to get the UrlFetcher built during startup.
    """
    if not hasattr(request.app.state, "url_fetcher"):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="UrlFetcher not initialized"
        )
    return request.app.state.url_fetcher


def get_app_config(request: Request) -> Config:
    """Configuration the app was created with, falling back to the process config."""
    return getattr(request.app.state, "config", None) or get_config()
