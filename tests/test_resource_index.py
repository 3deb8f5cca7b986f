"""Resource index builder tests"""
import hashlib

import pytest

from walrus_gateway.config import DEFAULT_ALLOWED_FILE_TYPES
from walrus_gateway.resources.index import (
    MISSING_TABLE_MESSAGE,
    ResourceIndexBuilder,
    parse_headers,
    parse_range,
)
from walrus_gateway.resources.models import Range
from walrus_gateway.shared.exceptions import MalformedObjectError, NotFoundError

from conftest import SITE_ID, make_resource_record


@pytest.fixture
def builder(registry):
    return ResourceIndexBuilder(registry, DEFAULT_ALLOWED_FILE_TYPES)


@pytest.mark.asyncio
async def test_builds_index_keyed_by_basename(registry, builder):
    registry.add_resource("/index.html", b"<html></html>", headers={"content-type": "text/html"})
    registry.add_resource("/css/site.css", b"body {}")

    index = await builder.build(SITE_ID)

    assert set(index.resources) == {"index.html", "site.css"}
    resource = index.get("site.css")
    assert resource.path == "/css/site.css"
    assert resource.version == 7
    assert resource.blob_hash == hashlib.sha256(b"body {}").digest()
    assert index.get("index.html").headers == {"content-type": "text/html"}
    assert index.errors == {}


@pytest.mark.asyncio
async def test_paginates_until_last_page(registry, builder):
    for i in range(5):
        registry.add_resource(f"/page{i}.html", b"x")

    index = await builder.build(SITE_ID)

    assert len(index) == 5
    cursors = [call[2] for call in registry.calls if call[0] == "get_dynamic_fields"]
    assert cursors == [None, "2", "4"]


@pytest.mark.asyncio
async def test_children_are_fetched_in_one_batch(registry, builder):
    for i in range(3):
        registry.add_resource(f"/f{i}.js", b"x")

    await builder.build(SITE_ID)

    batches = [call for call in registry.calls if call[0] == "multi_get_objects"]
    assert len(batches) == 1
    assert len(batches[0][1]) == 3


@pytest.mark.asyncio
async def test_allow_list_excludes_other_extensions(registry, builder):
    registry.add_resource("/logo.png", b"\x89PNG")
    registry.add_resource("/index.html", b"<html/>")
    registry.add_resource("/app.js", b"1")
    registry.add_resource("/style.CSS", b"a{}")

    index = await builder.build(SITE_ID)

    assert set(index.resources) == {"index.html", "app.js", "style.CSS"}
    assert "logo.png" not in index.errors


@pytest.mark.asyncio
async def test_zero_children_yields_empty_index(builder):
    index = await builder.build(SITE_ID)

    assert index.is_empty
    assert len(index) == 0


@pytest.mark.asyncio
async def test_records_without_blob_id_are_dropped(registry, builder):
    registry.add_resource("/index.html", b"x")
    child_id = registry.children[SITE_ID][0]["objectId"]
    registry.objects[child_id] = make_resource_record(child_id, "/index.html", blob_id="")

    index = await builder.build(SITE_ID)

    assert index.is_empty


@pytest.mark.asyncio
async def test_malformed_entry_is_isolated(registry, builder):
    registry.add_resource("/index.html", b"x")
    registry.add_resource("/broken.js", b"y", blob_hash="not-a-number")

    index = await builder.build(SITE_ID)

    assert set(index.resources) == {"index.html"}
    assert "broken.js" in index.errors
    assert not index.is_empty


@pytest.mark.asyncio
async def test_object_without_resource_table_is_malformed(registry, builder):
    registry.objects[SITE_ID] = {"data": {"objectId": SITE_ID, "version": "1", "content": None}}

    with pytest.raises(MalformedObjectError, match=MISSING_TABLE_MESSAGE):
        await builder.build(SITE_ID)


@pytest.mark.asyncio
async def test_missing_object_is_not_found(builder):
    with pytest.raises(NotFoundError):
        await builder.build("0x" + "ff" * 32)


@pytest.mark.asyncio
async def test_duplicate_basename_keeps_first(registry, builder):
    registry.add_resource("/index.html", b"root")
    registry.add_resource("/docs/index.html", b"docs")

    index = await builder.build(SITE_ID)

    assert index.get("index.html").path == "/index.html"


class TestParsers:
    def test_parse_range(self):
        assert parse_range(None) is None
        assert parse_range({"type": "Range", "fields": {"start": "10", "end": None}}) == Range(start=10)
        assert parse_range({"fields": {"vec": [{"fields": {"start": "0", "end": "9"}}]}}) == Range(0, 9)
        assert parse_range({"fields": {"vec": []}}) is None

    def test_parse_headers_keeps_order(self):
        node = {"fields": {"contents": [
            {"fields": {"key": "content-type", "value": "text/html"}},
            {"fields": {"key": "content-encoding", "value": "gzip"}},
        ]}}
        assert list(parse_headers(node).items()) == [
            ("content-type", "text/html"),
            ("content-encoding", "gzip"),
        ]

    def test_parse_flat_headers(self):
        assert parse_headers({"cache-control": "no-cache"}) == {"cache-control": "no-cache"}
