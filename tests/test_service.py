"""Tests for the integration builder request handlers."""

import asyncio

import pytest

from listing_scraper.exceptions import FetchError
from listing_scraper.scraping.models import FetchedPage
from listing_scraper.service import IntegrationBuilderService

PAGE_HTML = """
<html><head><title>Anunț</title></head><body>
  <div class="price">75.000 €</div>
  <ul><li class="tag">nou</li><li class="tag">centrală</li></ul>
</body></html>
"""

MAPPINGS = [
    {"field": "price", "selector": ".price", "transforms": [{"type": "extractNumber"}]},
    {"field": "tags", "selector": "li.tag", "multiple": True},
    {"field": "rooms", "selector": ".rooms"},
]


class StubFetcher:
    """Serves one page and fails for everything else."""

    def __init__(self):
        self.requested: list[str] = []

    async def fetch_page(self, url: str) -> FetchedPage:
        self.requested.append(url)
        if url != "https://example.com/anunt":
            raise FetchError("Failed to fetch page: timed out", url=url)
        return FetchedPage(url=url, html=PAGE_HTML, status=200)


@pytest.fixture
def fetcher():
    return StubFetcher()


@pytest.fixture
def service(fetcher):
    return IntegrationBuilderService(fetcher)


class TestTestSelectorHandler:
    """Tests for the selector test handler."""

    def test_on_pasted_html(self, service, fetcher):
        response = asyncio.run(service.test_selector({"selector": "li.tag", "html": PAGE_HTML}))

        assert response == {
            "success": True,
            "data": {"found": True, "count": 2, "samples": ["nou", "centrală"]},
        }
        assert fetcher.requested == []

    def test_on_url(self, service):
        response = asyncio.run(service.test_selector({"selector": ".price", "url": "https://example.com/anunt"}))
        assert response["data"]["count"] == 1

    def test_invalid_selector_is_data(self, service):
        response = asyncio.run(service.test_selector({"selector": "li[[", "html": PAGE_HTML}))

        assert response["success"] is True
        assert response["data"]["found"] is False
        assert response["data"]["error"].startswith("Invalid selector")

    def test_requires_selector(self, service):
        response = asyncio.run(service.test_selector({"html": PAGE_HTML}))
        assert response == {"success": False, "error": {"message": "Selector is required"}}

    @pytest.mark.parametrize("selector", [123, [".price"], {"css": ".price"}])
    def test_rejects_non_string_selector(self, service, selector):
        response = asyncio.run(service.test_selector({"selector": selector, "html": PAGE_HTML}))
        assert response == {"success": False, "error": {"message": "Selector is required"}}

    def test_rejects_non_string_url(self, service, fetcher):
        response = asyncio.run(service.test_selector({"selector": ".price", "url": 123}))

        assert response == {"success": False, "error": {"message": "url must be a string"}}
        assert fetcher.requested == []

    def test_rejects_non_string_html(self, service):
        response = asyncio.run(service.test_selector({"selector": ".price", "html": ["<p></p>"]}))
        assert response == {"success": False, "error": {"message": "html must be a string"}}

    def test_requires_html_or_url(self, service):
        response = asyncio.run(service.test_selector({"selector": ".price"}))
        assert response["error"]["message"] == "Either url or html is required"

    def test_fetch_failure(self, service):
        response = asyncio.run(service.test_selector({"selector": ".price", "url": "https://example.com/down"}))

        assert response["success"] is False
        assert response["error"]["message"] == "Failed to fetch page: timed out"


class TestPreviewHandler:
    """Tests for the preview handler."""

    def test_preview(self, service):
        response = asyncio.run(service.preview({"url": "https://example.com/anunt", "fieldMappings": MAPPINGS}))

        assert response["success"] is True
        data = response["data"]
        assert data["title"] == "Anunț"
        assert data["success"] is True
        assert data["extractions"] == [
            {"field": "price", "selector": ".price", "value": "75000"},
            {"field": "tags", "selector": "li.tag", "value": ["nou", "centrală"]},
            {"field": "rooms", "selector": ".rooms", "value": None, "error": "No elements found"},
        ]

    def test_fetch_failure_is_successful_envelope(self, service):
        response = asyncio.run(service.preview({"url": "https://example.com/down", "fieldMappings": MAPPINGS}))

        assert response["success"] is True
        assert response["data"]["success"] is False
        assert response["data"]["extractions"] == []

    def test_requires_url(self, service, fetcher):
        response = asyncio.run(service.preview({"fieldMappings": MAPPINGS}))

        assert response["error"]["message"] == "URL is required"
        assert fetcher.requested == []

    @pytest.mark.parametrize("mappings", [None, "title", {"field": "x"}])
    def test_requires_mapping_array(self, service, mappings):
        response = asyncio.run(service.preview({"url": "https://example.com/anunt", "fieldMappings": mappings}))
        assert response["error"]["message"] == "fieldMappings array is required"

    def test_accepts_null_transform_options(self, service):
        mappings = [{"field": "price", "selector": ".price", "transforms": [{"type": "extractNumber", "options": None}]}]

        response = asyncio.run(service.preview({"url": "https://example.com/anunt", "fieldMappings": mappings}))

        assert response["success"] is True
        assert response["data"]["extractions"][0]["value"] == "75000"

    def test_rejects_non_string_url(self, service, fetcher):
        response = asyncio.run(service.preview({"url": ["https://example.com/anunt"], "fieldMappings": MAPPINGS}))

        assert response == {"success": False, "error": {"message": "URL is required"}}
        assert fetcher.requested == []

    def test_rejects_malformed_mapping(self, service, fetcher):
        response = asyncio.run(service.preview({
            "url": "https://example.com/anunt",
            "fieldMappings": [{"field": "price"}],
        }))

        assert response["success"] is False
        assert response["error"]["message"].startswith("Invalid fieldMappings: 0.selector")
        assert fetcher.requested == []


class TestFetchPageHandler:
    """Tests for the raw fetch handler."""

    def test_fetch(self, service):
        response = asyncio.run(service.fetch_page({"url": "https://example.com/anunt"}))

        assert response["success"] is True
        assert response["data"]["status"] == 200
        assert response["data"]["length"] == len(PAGE_HTML)
        assert response["data"]["html"] == PAGE_HTML

    def test_requires_url(self, service):
        response = asyncio.run(service.fetch_page({}))
        assert response["error"]["message"] == "URL is required"

    def test_fetch_failure(self, service):
        response = asyncio.run(service.fetch_page({"url": "https://example.com/down"}))
        assert response["success"] is False

    @pytest.mark.parametrize("url", [123, ["https://example.com/anunt"], True])
    def test_rejects_non_string_url(self, service, fetcher, url):
        response = asyncio.run(service.fetch_page({"url": url}))

        assert response == {"success": False, "error": {"message": "URL is required"}}
        assert fetcher.requested == []


class TestBatchTestHandler:
    """Tests for the batch test handler."""

    def test_batch(self, service):
        urls = ["https://example.com/anunt", "https://example.com/down", "https://example.com/anunt"]

        response = asyncio.run(service.batch_test({"urls": urls, "fieldMappings": MAPPINGS}))

        assert response["success"] is True
        assert response["data"]["tested"] == 3
        assert [r["success"] for r in response["data"]["results"]] == [True, False, True]
        assert response["data"]["results"][1]["error"] == "Failed to fetch page: timed out"

    def test_truncates(self, service, fetcher):
        urls = ["https://example.com/anunt"] * 15

        response = asyncio.run(service.batch_test({"urls": urls, "fieldMappings": MAPPINGS}))

        assert response["data"]["tested"] == 10
        assert len(response["data"]["results"]) == 10
        assert len(fetcher.requested) == 10

    @pytest.mark.parametrize("urls", [
        None,
        [],
        "https://example.com/anunt",
        [123, "https://example.com/anunt"],
        ["https://example.com/anunt", None],
    ])
    def test_requires_urls(self, service, fetcher, urls):
        response = asyncio.run(service.batch_test({"urls": urls, "fieldMappings": MAPPINGS}))

        assert response == {"success": False, "error": {"message": "urls array is required"}}
        assert fetcher.requested == []

    def test_requires_mappings(self, service, fetcher):
        response = asyncio.run(service.batch_test({"urls": ["https://example.com/anunt"]}))

        assert response["error"]["message"] == "fieldMappings array is required"
        assert fetcher.requested == []
