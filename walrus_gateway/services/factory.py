"""UrlFetcher factory.

Wires configuration and shared clients into the pipeline components.
"""
import httpx

from walrus_gateway.config import Config
from walrus_gateway.resolvers import Base36Strategy, ObjectResolver, StaticOverrideStrategy, SuiNSStrategy
from walrus_gateway.resources.index import ResourceIndexBuilder
from walrus_gateway.sui.client import SuiRpcClient
from walrus_gateway.walrus.aggregator import BlobRetriever

from .url_fetcher import UrlFetcher


def create_http_client(config: Config) -> httpx.AsyncClient:
    """Shared HTTP client for the registry and the aggregator."""
    return httpx.AsyncClient(timeout=config.request_timeout, follow_redirects=True)


def create_resolver(config: Config, name_service) -> ObjectResolver:
    """Strategies in precedence order: static overrides, base36 ids, SuiNS."""
    return ObjectResolver([
        StaticOverrideStrategy(site_names=config.site_names),
        Base36Strategy(enabled=config.b36_domain_resolution_support),
        SuiNSStrategy(name_service=name_service),
    ])


def create_url_fetcher(config: Config, http_client: httpx.AsyncClient) -> UrlFetcher:
    """Standard UrlFetcher talking to the configured full node and aggregator."""
    sui_client = SuiRpcClient(http_client, config.rpc_url)
    return UrlFetcher(
        resolver=create_resolver(config, sui_client),
        index_builder=ResourceIndexBuilder(sui_client, config.allowed_file_types),
        retriever=BlobRetriever(
            http_client,
            config.aggregator_url,
            max_retries=config.fetch_max_retries,
            delay_ms=config.fetch_retry_delay_ms,
            verify_hash=config.verify_blob_hash,
        ),
        portal_name_length=config.portal_domain_name_length,
        portal_domain=config.portal_domain,
    )
