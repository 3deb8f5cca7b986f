"""Subdomain resolution strategies.

Each strategy is plain data plus one coroutine, ``try_resolve``, returning the
object id or None when the strategy has no answer.
"""
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from loguru import logger

from walrus_gateway.shared.encoding import subdomain_to_object_id
from walrus_gateway.sui.protocols import NameServiceProtocol


class ResolutionStrategy(Protocol):
    """Maps a subdomain to an object id."""

    name: str

    async def try_resolve(self, subdomain: str) -> Optional[str]:
        ...


@dataclass(frozen=True)
class StaticOverrideStrategy:
    """Operator configured subdomain -> object id overrides."""

    site_names: Mapping[str, str]
    name: str = "static"

    async def try_resolve(self, subdomain: str) -> Optional[str]:
        return self.site_names.get(subdomain)


@dataclass(frozen=True)
class Base36Strategy:
    """Decodes subdomains that are base-36 encoded object ids.

    Any SuiNS name that is the base-36 encoding of a 32-byte id is shadowed by
    this strategy, so such names can never hijack a site reachable by its id.
    """

    enabled: bool = True
    name: str = "base36"

    async def try_resolve(self, subdomain: str) -> Optional[str]:
        if not self.enabled:
            logger.debug("Base36 resolution disabled, skipping")
            return None
        if "." in subdomain:
            # Dotted names are SuiNS subnames
            return None
        return subdomain_to_object_id(subdomain)


@dataclass(frozen=True)
class SuiNSStrategy:
    """Resolves the subdomain through the SuiNS name service.

    Transport failures surface as UpstreamUnavailableError from the name service.
    """

    name_service: NameServiceProtocol
    name: str = "suins"

    async def try_resolve(self, subdomain: str) -> Optional[str]:
        object_id = await self.name_service.resolve_name(subdomain)
        if object_id:
            return object_id
        logger.warning(f"Unable to resolve the SuiNS domain. Is the domain valid? subdomain={subdomain}")
        return None


__all__ = ["ResolutionStrategy", "StaticOverrideStrategy", "Base36Strategy", "SuiNSStrategy"]
