import hashlib
import sys
from pathlib import Path
from typing import Dict, List, Optional

import httpx
import pytest

# Add the repository root to sys.path so we can import walrus_gateway without installing
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from walrus_gateway.config import DEFAULT_ALLOWED_FILE_TYPES  # noqa: E402
from walrus_gateway.resolvers import (  # noqa: E402
    Base36Strategy,
    ObjectResolver,
    StaticOverrideStrategy,
    SuiNSStrategy,
)
from walrus_gateway.resources.index import ResourceIndexBuilder  # noqa: E402
from walrus_gateway.services.url_fetcher import UrlFetcher  # noqa: E402
from walrus_gateway.shared.encoding import normalize_blob_id  # noqa: E402
from walrus_gateway.shared.exceptions import UpstreamUnavailableError  # noqa: E402
from walrus_gateway.sui.protocols import DynamicFieldPage  # noqa: E402
from walrus_gateway.walrus.aggregator import BlobRetriever  # noqa: E402

SITE_ID = "0x" + "ab" * 32
AGGREGATOR_URL = "https://aggregator.test"
SITE_PACKAGE = "0x" + "11" * 32


def u256_of(data: bytes) -> str:
    """Decimal u256 whose BCS bytes are ``data`` (padded to 32 bytes)."""
    return str(int.from_bytes(data.ljust(32, b"\x00"), "little"))


def blob_hash_of(content: bytes) -> str:
    return u256_of(hashlib.sha256(content).digest())


def make_site_object(object_id: str = SITE_ID) -> dict:
    return {
        "data": {
            "objectId": object_id,
            "version": "12",
            "content": {
                "dataType": "moveObject",
                "type": f"{SITE_PACKAGE}::site::Site",
                "fields": {"id": {"id": object_id}, "name": "demo"},
            },
        }
    }


def make_field_entry(child_id: str, path: str) -> dict:
    return {
        "name": {"type": f"{SITE_PACKAGE}::site::ResourcePath", "value": {"path": path}},
        "objectId": child_id,
        "objectType": f"{SITE_PACKAGE}::site::Resource",
    }


def make_resource_record(
    child_id: str,
    path: str,
    blob_id: str,
    blob_hash: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    range_: Optional[dict] = None,
    version: str = "7",
) -> dict:
    header_entries = [
        {"type": "0x2::vec_map::Entry", "fields": {"key": key, "value": value}}
        for key, value in (headers or {}).items()
    ]
    return {
        "data": {
            "objectId": child_id,
            "version": version,
            "content": {
                "dataType": "moveObject",
                "type": "0x2::dynamic_field::Field",
                "fields": {
                    "id": {"id": child_id},
                    "name": {"type": f"{SITE_PACKAGE}::site::ResourcePath", "fields": {"path": path}},
                    "value": {
                        "type": f"{SITE_PACKAGE}::site::Resource",
                        "fields": {
                            "path": path,
                            "headers": {"type": "0x2::vec_map::VecMap", "fields": {"contents": header_entries}},
                            "blob_id": blob_id,
                            "blob_hash": blob_hash,
                            "range": range_,
                        },
                    },
                },
            },
        }
    }


class FakeRegistry:
    """In-memory registry and name service."""

    def __init__(self, page_size: int = 2):
        self.objects: Dict[str, dict] = {}
        self.children: Dict[str, List[dict]] = {}
        self.names: Dict[str, str] = {}
        self.unreachable = False
        self.page_size = page_size
        self.calls: List[tuple] = []

    async def get_object(self, object_id: str) -> dict:
        self.calls.append(("get_object", object_id))
        return self.objects.get(object_id, {"error": {"code": "notExists", "object_id": object_id}})

    async def get_dynamic_fields(self, parent_id: str, cursor: Optional[str] = None) -> DynamicFieldPage:
        self.calls.append(("get_dynamic_fields", parent_id, cursor))
        entries = self.children.get(parent_id, [])
        start = int(cursor) if cursor else 0
        end = start + self.page_size
        has_next = end < len(entries)
        return DynamicFieldPage(
            entries=entries[start:end],
            next_cursor=str(end) if has_next else None,
            has_next_page=has_next,
        )

    async def multi_get_objects(self, object_ids) -> List[dict]:
        self.calls.append(("multi_get_objects", list(object_ids)))
        return [self.objects[object_id] for object_id in object_ids if object_id in self.objects]

    async def resolve_name(self, name: str) -> Optional[str]:
        self.calls.append(("resolve_name", name))
        if self.unreachable:
            raise UpstreamUnavailableError("Unable to reach the full node")
        return self.names.get(name)

    def add_site(self, object_id: str = SITE_ID) -> None:
        self.objects[object_id] = make_site_object(object_id)
        self.children.setdefault(object_id, [])

    def add_resource(self, path: str, content: bytes, site_id: str = SITE_ID, **kwargs) -> str:
        """Register a resource and return its aggregator blob id."""
        index = len(self.children.setdefault(site_id, []))
        child_id = "0x" + format(index + 1, "064x")
        blob_id = u256_of(path.encode())
        kwargs.setdefault("blob_hash", blob_hash_of(content))
        self.objects[child_id] = make_resource_record(child_id, path, blob_id, **kwargs)
        self.children[site_id].append(make_field_entry(child_id, path))
        return normalize_blob_id(blob_id)


class FakeAggregator:
    """httpx.MockTransport handler serving blobs by id."""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.failures: List[int] = []
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failures:
            return httpx.Response(self.failures.pop(0), text="failure", request=request)
        blob_id = request.url.path.rsplit("/", 1)[-1]
        if blob_id not in self.blobs:
            return httpx.Response(404, text="blob not found", request=request)
        return httpx.Response(200, content=self.blobs[blob_id], request=request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def registry():
    registry = FakeRegistry()
    registry.add_site()
    return registry


@pytest.fixture
def aggregator():
    return FakeAggregator()


def build_fetcher(
    registry: FakeRegistry,
    aggregator: FakeAggregator,
    *,
    site_names: Optional[Dict[str, str]] = None,
    b36_support: bool = True,
    portal_name_length: int = 13,
    portal_domain: Optional[str] = None,
    max_retries: int = 2,
    verify_hash: bool = False,
) -> UrlFetcher:
    http_client = httpx.AsyncClient(transport=aggregator.transport())
    resolver = ObjectResolver([
        StaticOverrideStrategy(site_names=site_names or {}),
        Base36Strategy(enabled=b36_support),
        SuiNSStrategy(name_service=registry),
    ])
    return UrlFetcher(
        resolver=resolver,
        index_builder=ResourceIndexBuilder(registry, DEFAULT_ALLOWED_FILE_TYPES),
        retriever=BlobRetriever(
            http_client, AGGREGATOR_URL, max_retries=max_retries, delay_ms=0, verify_hash=verify_hash
        ),
        portal_name_length=portal_name_length,
        portal_domain=portal_domain,
    )
