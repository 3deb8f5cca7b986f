"""Ordered subdomain -> object id resolution."""
from typing import Sequence

from loguru import logger

from walrus_gateway.shared.exceptions import NotFoundError, UpstreamUnavailableError

from .strategies import ResolutionStrategy


class ObjectResolver:
    """Tries each strategy in order and stops at the first answer.

    Strategies never run concurrently: the base-36 strategy shadows SuiNS names
    only because it runs first.
    """

    def __init__(self, strategies: Sequence[ResolutionStrategy]):
        self.strategies = tuple(strategies)

    async def resolve(self, subdomain: str) -> str:
        """
        Resolve ``subdomain`` to an object id.

        Raises:
            NotFoundError: No strategy produced an object id
            UpstreamUnavailableError: The naming service could not be reached
        """
        logger.info(f"Resolving the subdomain to an object ID: subdomain={subdomain}")
        for strategy in self.strategies:
            try:
                object_id = await strategy.try_resolve(subdomain)
            except UpstreamUnavailableError:
                logger.error(
                    f"Unable to reach the full node during {strategy.name} resolution: subdomain={subdomain}"
                )
                raise
            if object_id:
                logger.info(f"Resolved {subdomain} via {strategy.name}: {object_id}")
                return object_id
        raise NotFoundError(f"Could not resolve an object ID for '{subdomain}'.")


__all__ = ["ObjectResolver"]
