from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from loguru import logger

from walrus_gateway.config import get_config
from walrus_gateway.services.factory import create_http_client, create_url_fetcher
from walrus_gateway.shared.log import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    FastAPI Lifespan Context Manager

    Creates the shared HTTP client and the UrlFetcher on startup and closes the
    client on shutdown.
    """
    config = getattr(app.state, "config", None) or get_config()
    app.state.config = config
    configure_logging(config.log_level)

    http_client = create_http_client(config)
    try:
        app.state.url_fetcher = create_url_fetcher(config, http_client)
        logger.info(
            f"Gateway ready: sui_network={config.sui_network}, walrus_network={config.walrus_network}, "
            f"rpc_url={config.rpc_url}, aggregator_url={config.aggregator_url}, "
            f"environment={config.environment}"
        )
        yield
    finally:
        logger.info("Closing HTTP client...")
        await http_client.aclose()
