"""Tests for the content service client and catalog refresher."""

import httpx
import pytest

from price_catalog.ingest.catalog_loader import CatalogLoader
from price_catalog.ingest.content_client import PAGES_ENDPOINT, ContentClient
from price_catalog.ingest.table_extractor import TableExtractor
from price_catalog.worker.tasks import CatalogRefresher

BASE_URL = "https://benhvien.test"


def _page(page_id, title, content):
    return {
        "id": page_id,
        "title": {"rendered": title},
        "content": {"rendered": content, "protected": False},
    }


def _client(handler):
    return ContentClient(
        base_url=BASE_URL,
        parent_id=7224,
        per_page=1,
        transport=httpx.MockTransport(handler),
    )


class TestContentClient:
    """Test fetching price pages over the WordPress REST API."""

    @pytest.mark.asyncio
    async def test_follows_total_pages_header(self, wordpress_pages):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            page = int(request.url.params["page"])
            return httpx.Response(
                200,
                json=[wordpress_pages[page - 1]],
                headers={"X-WP-TotalPages": "2"},
            )

        client = _client(handler)
        records = await client.fetch_price_pages()
        await client.close()

        assert [r.title for r in records] == ["Xét nghiệm", "Chẩn đoán hình ảnh"]
        assert len(requests) == 2
        assert requests[0].url.path == PAGES_ENDPOINT
        assert requests[0].url.params["parent"] == "7224"
        assert requests[0].url.params["per_page"] == "1"

    @pytest.mark.asyncio
    async def test_server_error_yields_empty_list(self):
        client = _client(lambda request: httpx.Response(500, json={"code": "internal_error"}))

        assert await client.fetch_price_pages() == []
        await client.close()

    @pytest.mark.asyncio
    async def test_non_list_payload_yields_empty_list(self):
        client = _client(lambda request: httpx.Response(200, json={"code": "rest_no_route"}))

        assert await client.fetch_price_pages() == []
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_pages_skipped(self):
        payload = [
            _page(5, "Nội soi", "<table><tr><td>1</td><td>Nội soi dạ dày</td><td></td><td>500.000</td></tr></table>"),
            {"title": {"rendered": "Không có id"}},
        ]
        client = _client(lambda request: httpx.Response(200, json=payload))

        records = await client.fetch_price_pages()
        await client.close()

        assert [r.id for r in records] == [5]


class _StaticClient:
    def __init__(self, records):
        self.records = records
        self.closed = False

    async def fetch_price_pages(self):
        return self.records

    async def close(self):
        self.closed = True


class TestCatalogRefresher:
    """Test catalog refresh."""

    @pytest.mark.asyncio
    async def test_refresh_builds_catalog(self, category_records):
        refresher = CatalogRefresher(
            client=_StaticClient(category_records),
            loader=CatalogLoader(TableExtractor(cache_enabled=False)),
        )

        catalog = await refresher.refresh()

        assert len(catalog.items) == 5
        assert refresher.catalog is catalog
        assert refresher.last_refresh is not None
        assert refresher.last_refresh.tzinfo is not None

    @pytest.mark.asyncio
    async def test_empty_fetch_serves_empty_catalog(self):
        refresher = CatalogRefresher(
            client=_StaticClient([]),
            loader=CatalogLoader(TableExtractor(cache_enabled=False)),
        )

        catalog = await refresher.refresh()

        assert catalog.is_empty
        await refresher.close()
        assert refresher.client.closed
