"""Protocols for the registry layer.

The resolver and the resource index builder only talk to the registry through
these interfaces, so tests can hand in fakes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence


@dataclass
class DynamicFieldPage:
    """One page of dynamic field entries.

    Attributes:
        entries: Raw dynamic field infos (``name``, ``objectId``, ``objectType``...)
        next_cursor: Opaque cursor for the following page
        has_next_page: Whether another page exists
    """

    entries: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_next_page: bool = False


class RegistryClientProtocol(Protocol):
    """Registry RPC operations used by the pipeline."""

    async def get_object(self, object_id: str) -> Dict[str, Any]:
        """Fetch one object with its content."""
        ...

    async def get_dynamic_fields(self, parent_id: str, cursor: Optional[str] = None) -> DynamicFieldPage:
        """Fetch one page of dynamic fields of ``parent_id`` starting at ``cursor``."""
        ...

    async def multi_get_objects(self, object_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Fetch several objects with their content in a single call."""
        ...


class NameServiceProtocol(Protocol):
    """Resolves a human readable name to an object id."""

    async def resolve_name(self, name: str) -> Optional[str]:
        """Return the object id ``name`` points to, or None when unknown.

        Raises:
            UpstreamUnavailableError: The naming service could not be reached
        """
        ...


__all__ = ["DynamicFieldPage", "RegistryClientProtocol", "NameServiceProtocol"]
