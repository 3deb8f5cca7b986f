"""Sui full node JSON-RPC client.

Only the handful of read methods the gateway needs. The caller owns the
``httpx.AsyncClient`` so one connection pool is shared per process.
"""
import itertools
from typing import Any, Dict, List, Optional, Sequence

import httpx
from loguru import logger

from walrus_gateway.shared.exceptions import RegistryError, UpstreamUnavailableError

from .protocols import DynamicFieldPage

OBJECT_OPTIONS = {"showContent": True, "showType": True}
SUINS_TLD = ".sui"
# Full nodes reject larger sui_multiGetObjects batches
MULTI_GET_BATCH_SIZE = 50
# JSON-RPC "Invalid params", returned for names SuiNS refuses to parse
INVALID_PARAMS = -32602


class SuiRpcClient:
    """Registry client implementing both the registry and name service protocols."""

    def __init__(self, http_client: httpx.AsyncClient, rpc_url: str):
        self._http = http_client
        self.rpc_url = rpc_url
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: List[Any]) -> Any:
        """
        Perform a JSON-RPC call and return its ``result`` member.

        Raises:
            UpstreamUnavailableError: The full node could not be reached
            RegistryError: The full node answered with a JSON-RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._http.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Sui RPC {method} failed: {type(e).__name__}")
            raise UpstreamUnavailableError(
                f"Unable to reach the full node during {method}", cause=e
            ) from e
        except ValueError as e:
            raise RegistryError(f"Invalid JSON-RPC response for {method}", cause=e) from e

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            logger.error(f"Sui RPC {method} returned error: {error}")
            raise RegistryError(
                error.get("message", f"{method} failed"), code=error.get("code")
            )
        return body.get("result") if isinstance(body, dict) else None

    async def get_object(self, object_id: str) -> Dict[str, Any]:
        result = await self._call("sui_getObject", [object_id, OBJECT_OPTIONS])
        return result or {}

    async def get_dynamic_fields(self, parent_id: str, cursor: Optional[str] = None) -> DynamicFieldPage:
        result = await self._call("suix_getDynamicFields", [parent_id, cursor, None]) or {}
        return DynamicFieldPage(
            entries=result.get("data") or [],
            next_cursor=result.get("nextCursor"),
            has_next_page=bool(result.get("hasNextPage")),
        )

    async def multi_get_objects(self, object_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Fetch many objects, split into batches the full node accepts."""
        ids = list(object_ids)
        records: List[Dict[str, Any]] = []
        for start in range(0, len(ids), MULTI_GET_BATCH_SIZE):
            batch = ids[start:start + MULTI_GET_BATCH_SIZE]
            result = await self._call("sui_multiGetObjects", [batch, OBJECT_OPTIONS])
            records.extend(result or [])
        return records

    async def resolve_name(self, name: str) -> Optional[str]:
        """Resolve a SuiNS name; the ``.sui`` suffix is appended when missing."""
        suins_name = name if name.endswith(SUINS_TLD) else name + SUINS_TLD
        try:
            result = await self._call("suix_resolveNameServiceAddress", [suins_name])
        except RegistryError as e:
            if e.code != INVALID_PARAMS:
                raise
            logger.info(f"Name service rejected {suins_name}: {e.message}")
            return None
        return result or None


__all__ = ["SuiRpcClient"]
