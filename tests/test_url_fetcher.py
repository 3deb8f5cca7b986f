"""UrlFetcher pipeline tests"""
import pytest

from walrus_gateway.shared.exceptions import (
    BadInputError,
    EmptySiteError,
    MalformedObjectError,
    NotFoundError,
    UpstreamUnavailableError,
)
from walrus_gateway.walrus.aggregator import OBJECT_ID_HEADER

from conftest import SITE_ID, build_fetcher

SITE_URL = "https://demo.portal-suffix/"


@pytest.fixture
def site(registry, aggregator):
    """Site with an index page and a stylesheet reachable as demo.portal-suffix"""
    registry.names["demo"] = SITE_ID
    blob_id = registry.add_resource("/index.html", b"<h1>demo</h1>", headers={"content-type": "text/html"})
    aggregator.blobs[blob_id] = b"<h1>demo</h1>"
    blob_id = registry.add_resource("/css/site.css", b"h1 {}")
    aggregator.blobs[blob_id] = b"h1 {}"
    return registry


class TestResolveAndFetch:
    @pytest.mark.asyncio
    async def test_root_path_serves_index(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator)

        blob = await fetcher.resolve_and_fetch(SITE_URL)

        assert blob.content == b"<h1>demo</h1>"
        assert blob.headers["content-type"] == "text/html"
        assert blob.headers[OBJECT_ID_HEADER].startswith("0x")

    @pytest.mark.asyncio
    async def test_nested_path_is_looked_up_by_basename(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator)

        blob = await fetcher.resolve_and_fetch("https://demo.portal-suffix/css/site.css")

        assert blob.content == b"h1 {}"

    @pytest.mark.asyncio
    async def test_static_override(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator, site_names={"landing": SITE_ID})

        blob = await fetcher.resolve_and_fetch("https://landing.portal-suffix/index.html")

        assert blob.content == b"<h1>demo</h1>"
        assert ("resolve_name", "landing") not in site.calls

    @pytest.mark.asyncio
    async def test_missing_file_is_not_found(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator)

        with pytest.raises(NotFoundError):
            await fetcher.resolve_and_fetch("https://demo.portal-suffix/missing.html")

    @pytest.mark.asyncio
    async def test_empty_site_is_distinct_from_not_found(self, registry, aggregator):
        registry.names["demo"] = SITE_ID
        fetcher = build_fetcher(registry, aggregator)

        with pytest.raises(EmptySiteError):
            await fetcher.resolve_and_fetch(SITE_URL)

    @pytest.mark.asyncio
    async def test_no_subdomain_is_not_found(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator)

        with pytest.raises(NotFoundError):
            await fetcher.resolve_and_fetch("https://portal-suffix/")
        assert site.calls == []

    @pytest.mark.asyncio
    async def test_foreign_domain_is_not_found(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator, portal_name_length=7, portal_domain="wal.app")

        with pytest.raises(NotFoundError):
            await fetcher.resolve_and_fetch("https://demo.evil.app/")
        assert site.calls == []

    @pytest.mark.asyncio
    async def test_malformed_url(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator)

        with pytest.raises(BadInputError):
            await fetcher.resolve_and_fetch("invalid-url")

    @pytest.mark.asyncio
    async def test_object_without_table(self, site, aggregator):
        site.objects[SITE_ID] = {"data": {"objectId": SITE_ID, "content": {"fields": {}}}}
        fetcher = build_fetcher(site, aggregator)

        with pytest.raises(MalformedObjectError):
            await fetcher.resolve_and_fetch(SITE_URL)

    @pytest.mark.asyncio
    async def test_unreachable_name_service(self, site, aggregator):
        site.unreachable = True
        fetcher = build_fetcher(site, aggregator)

        with pytest.raises(UpstreamUnavailableError):
            await fetcher.resolve_and_fetch(SITE_URL)

    @pytest.mark.asyncio
    async def test_aggregator_failure_propagates(self, site, aggregator):
        aggregator.failures = [500, 500, 500]
        fetcher = build_fetcher(site, aggregator)

        with pytest.raises(UpstreamUnavailableError):
            await fetcher.resolve_and_fetch(SITE_URL)
        assert len(aggregator.requests) == 3


class TestFetchSite:
    @pytest.mark.asyncio
    async def test_returns_every_file_as_text(self, site, aggregator):
        fetcher = build_fetcher(site, aggregator)

        payload = await fetcher.fetch_site(SITE_URL)

        assert payload.object_id == SITE_ID
        assert set(payload.results) == {"index.html", "site.css"}
        index = payload.results["index.html"]
        assert index.content == "<h1>demo</h1>"
        assert index.size == len("<h1>demo</h1>")
        assert index.error is None

    @pytest.mark.asyncio
    async def test_per_file_failure_is_isolated(self, site, aggregator):
        blob_id = site.add_resource("/gone.js", b"x")
        assert blob_id not in aggregator.blobs
        fetcher = build_fetcher(site, aggregator)

        payload = await fetcher.fetch_site(SITE_URL)

        assert payload.results["index.html"].content == "<h1>demo</h1>"
        gone = payload.results["gone.js"]
        assert gone.content is None
        assert gone.error
        assert gone.to_dict() == {"blob_id": None, "content": None, "error": gone.error}

    @pytest.mark.asyncio
    async def test_empty_site(self, registry, aggregator):
        registry.names["demo"] = SITE_ID
        fetcher = build_fetcher(registry, aggregator)

        payload = await fetcher.fetch_site(SITE_URL)

        assert payload.is_empty
