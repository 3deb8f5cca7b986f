"""Resource index builder.

Walks the dynamic fields of a site object page by page, fetches every child
record in one batch and turns the records into ``ResourcePath`` entries.
"""
from typing import Any, Dict, Iterable, Optional

from loguru import logger

from walrus_gateway.shared.encoding import u256_to_bytes
from walrus_gateway.shared.exceptions import MalformedObjectError, NotFoundError
from walrus_gateway.sui.protocols import RegistryClientProtocol

from .models import Range, ResourceIndex, ResourcePath, path_basename

MISSING_TABLE_MESSAGE = "Could not find the blob table in the Portal object."


def _fields(node: Any) -> Dict[str, Any]:
    """Return the ``fields`` of a Move struct node, or the node itself if already flat."""
    if not isinstance(node, dict):
        return {}
    inner = node.get("fields")
    return inner if isinstance(inner, dict) else node


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def parse_range(node: Any) -> Optional[Range]:
    """Parse an ``Option<Range>`` value."""
    if not node:
        return None
    fields = _fields(node)
    # Option<T> may also arrive as {"vec": [T]}
    if "vec" in fields:
        items = fields["vec"]
        return parse_range(items[0]) if items else None
    start = _optional_int(fields.get("start"))
    end = _optional_int(fields.get("end"))
    if start is None and end is None:
        return None
    return Range(start=start, end=end)


def parse_headers(node: Any) -> Dict[str, str]:
    """Parse a ``VecMap<String, String>`` into an insertion ordered dict."""
    if not node:
        return {}
    fields = _fields(node)
    contents = fields.get("contents")
    if contents is None:
        return {str(k): str(v) for k, v in fields.items()}
    headers: Dict[str, str] = {}
    for entry in contents:
        entry_fields = _fields(entry)
        headers[str(entry_fields["key"])] = str(entry_fields["value"])
    return headers


def parse_blob_hash(value: Any) -> bytes:
    if value is None or value == "":
        return b""
    return u256_to_bytes(value)


def parse_resource(record: Dict[str, Any]) -> Optional[ResourcePath]:
    """
    Turn a dynamic field record into a ResourcePath.

    Returns:
        The resource, or None when the record has no blob id or path

    Raises:
        ValueError, KeyError, TypeError: The record is malformed
    """
    data = record.get("data") or {}
    content_fields = _fields(data.get("content"))
    name_fields = _fields(content_fields.get("name"))
    value_fields = _fields(content_fields.get("value"))

    blob_id = value_fields.get("blob_id")
    path = name_fields.get("path") or value_fields.get("path")
    if not blob_id or not path:
        return None

    return ResourcePath(
        path=str(path),
        blob_id=str(blob_id),
        blob_hash=parse_blob_hash(value_fields.get("blob_hash")),
        range=parse_range(value_fields.get("range")),
        version=int(data.get("version") or 0),
        headers=parse_headers(value_fields.get("headers")),
        object_id=str(data.get("objectId", "")),
    )


def _entry_file_name(entry: Dict[str, Any]) -> str:
    value = (entry.get("name") or {}).get("value")
    if isinstance(value, dict):
        value = value.get("path")
    return str(value) if value is not None else "unknown"


class ResourceIndexBuilder:
    """Builds the basename -> resource index of a site object."""

    def __init__(self, registry: RegistryClientProtocol, allowed_file_types: Iterable[str]):
        self.registry = registry
        self.allowed_file_types = tuple(ext.lower() for ext in allowed_file_types)

    def is_allowed(self, path: str) -> bool:
        lowered = path.lower()
        return any(lowered.endswith(ext) for ext in self.allowed_file_types)

    async def resource_table_id(self, object_id: str) -> str:
        """
        Read the id of the table holding the site's resources.

        Raises:
            NotFoundError: The object does not exist
            MalformedObjectError: The object exists but holds no resource table
        """
        record = await self.registry.get_object(object_id)
        if record.get("error") and not record.get("data"):
            logger.warning(f"Object {object_id} not found: {record['error']}")
            raise NotFoundError(f"Object {object_id} not found.")

        content = (record.get("data") or {}).get("content")
        table_id = _fields(_fields(content).get("id")).get("id")
        if not table_id:
            logger.error(f"Object {object_id} has no resource table, not a site object")
            raise MalformedObjectError(MISSING_TABLE_MESSAGE)
        return str(table_id)

    async def collect_children(self, table_id: str) -> Dict[str, str]:
        """Page through the table and map child object ids to best-effort file names."""
        children: Dict[str, str] = {}
        cursor: Optional[str] = None
        while True:
            logger.debug(f"Fetching dynamic fields of {table_id} with cursor: {cursor}")
            page = await self.registry.get_dynamic_fields(table_id, cursor)
            for entry in page.entries:
                child_id = entry.get("objectId")
                if child_id:
                    children[child_id] = _entry_file_name(entry)
            if not page.has_next_page or not page.next_cursor:
                break
            cursor = page.next_cursor
        logger.info(f"Total resources found in {table_id}: {len(children)}")
        return children

    async def build(self, object_id: str) -> ResourceIndex:
        """
        Build the resource index of ``object_id``.

        Malformed child records are recorded in ``ResourceIndex.errors`` rather
        than failing the whole build.
        """
        index = ResourceIndex(object_id=object_id)
        table_id = await self.resource_table_id(object_id)
        children = await self.collect_children(table_id)
        if not children:
            return index

        records = await self.registry.multi_get_objects(list(children))
        logger.info(f"Fetched {len(records)} resource objects for {object_id}")

        for record in records:
            child_id = (record.get("data") or {}).get("objectId")
            file_name = children.get(child_id, "unknown")
            if not (record.get("data") or {}).get("content"):
                logger.info(f"No content found in resource object for {file_name}")
                continue

            try:
                resource = parse_resource(record)
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.error(f"Error parsing resource for {file_name}: {e}")
                index.errors[path_basename(file_name)] = str(e)
                continue

            if resource is None:
                logger.debug(f"Missing blob_id or path for {file_name}")
                continue
            if not self.is_allowed(resource.path):
                logger.debug(f"Skipping file {resource.path} - not an allowed file type")
                continue

            key = resource.basename
            if key in index.resources:
                logger.warning(
                    f"Duplicate basename {key}: keeping {index.resources[key].path}, dropping {resource.path}"
                )
                continue
            index.resources[key] = resource

        return index


__all__ = [
    "ResourceIndexBuilder",
    "parse_resource",
    "parse_range",
    "parse_headers",
    "MISSING_TABLE_MESSAGE",
]
