"""Listing sync: walk paginated list pages and extract every detail page."""

import asyncio
import time
from typing import Any
from urllib.parse import urljoin

import httpx
from pydantic import BaseModel, Field
from soupsieve import match as css_match

from .models import IntegrationConfig, ListPageConfig, PaginationConfig, SyncType
from .scraping.extractor import parse_markup
from .scraping.logging_config import get_logger, save_debug_artifact
from .scraping.models import FieldExtraction
from .scraping.page_loader import PageLoader
from .scraping.preview import ExtractionPreviewer

logger = get_logger(__name__)

INCREMENTAL_MAX_PAGES = 2


class SyncResult(BaseModel):
    """Outcome of a sync run for one integration."""

    integration: str
    sync_type: SyncType
    success: bool = False
    items_processed: int = 0
    records: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    duration_ms: float = 0.0


def build_listing_record(extractions: list[FieldExtraction]) -> dict[str, Any]:
    """Assemble extracted values into a nested record.

    Dotted field paths become nested dicts ("location.city" ->
    {"location": {"city": ...}}). Fields without a value are left out.
    """
    record: dict[str, Any] = {}
    for extraction in extractions:
        if extraction.value is None:
            continue

        *parents, leaf = extraction.field.split(".")
        target = record
        for part in parents:
            node = target.get(part)
            if not isinstance(node, dict):
                node = {}
                target[part] = node
            target = node
        target[leaf] = extraction.value

    return record


def build_page_url(list_url: str, pagination: PaginationConfig, index: int) -> str:
    """Build the URL of the list page at a 0-based index.

    Every pagination type is walked through the ``param_name`` query
    parameter; ``cursor`` and ``loadMore`` sources have no server-side
    cursor support and page the same way as ``page`` and ``offset``.
    """
    value = pagination.start_value + index * pagination.increment
    url = httpx.URL(list_url)
    return str(url.copy_set_param(pagination.param_name, str(value)))


def has_next_page(html: str, pagination: PaginationConfig) -> bool:
    """Check a list page for a next-page marker.

    Without a ``has_next_selector`` every page is assumed to have a successor
    until ``max_pages`` is reached.
    """
    if not pagination.has_next_selector:
        return True
    return parse_markup(html).select_one(pagination.has_next_selector) is not None


def extract_detail_links(
    html: str,
    list_page_config: ListPageConfig,
    base_url: str,
) -> tuple[int, list[str]]:
    """Find listing items on a list page and their detail links.

    Args:
        html: List page markup.
        list_page_config: Item and link selectors.
        base_url: URL of the list page, used to resolve relative links.

    Returns:
        Tuple of (number of items found, absolute detail URLs without duplicates).
    """
    soup = parse_markup(html)

    containers = [soup]
    if list_page_config.list_selector:
        containers = soup.select(list_page_config.list_selector)

    items = []
    for container in containers:
        items.extend(container.select(list_page_config.item_selector))

    links: list[str] = []
    for item in items:
        if css_match(list_page_config.detail_link_selector, item):
            link = item
        else:
            link = item.select_one(list_page_config.detail_link_selector)
        href = link.get("href") if link is not None else None
        if not href:
            continue

        detail_url = href if href.startswith("http") else urljoin(base_url, href)
        if detail_url not in links:
            links.append(detail_url)

    return len(items), links


class ListingSyncRunner:
    """Runs sync jobs for an integration.

    Detail pages are fetched one at a time, pausing for the integration's
    rate-limit delay between requests.
    """

    def __init__(self, loader: PageLoader | None = None):
        """Initialize the runner.

        Args:
            loader: Page loader; integration headers are added per run.
        """
        self.loader = loader or PageLoader()

    async def run(
        self,
        integration: IntegrationConfig,
        sync_type: SyncType = SyncType.FULL_SYNC,
        url: str | None = None,
    ) -> SyncResult:
        """Run a sync for an integration.

        Args:
            integration: Integration configuration snapshot.
            sync_type: Full sync, incremental (first pages only) or single URL.
            url: Detail page URL, required for single_url syncs.

        Returns:
            SyncResult with the extracted records and per-item errors.
        """
        log = logger.bind(integration=integration.name, sync_type=sync_type.value)
        log.info("sync_started")

        start_time = time.time()
        result = SyncResult(integration=integration.name, sync_type=sync_type)

        loader = self.loader.with_headers(integration.source_config.headers)
        previewer = ExtractionPreviewer(loader)

        if sync_type == SyncType.SINGLE_URL:
            if url:
                await self._scrape_detail(previewer, integration, url, result)
            else:
                result.errors.append("URL required for single_url sync")
        else:
            await self._scrape_listings(loader, previewer, integration, sync_type, result)

        result.success = not result.errors
        result.duration_ms = (time.time() - start_time) * 1000

        log.info(
            "sync_complete",
            items_processed=result.items_processed,
            records=len(result.records),
            errors=len(result.errors),
            duration_ms=round(result.duration_ms),
        )
        save_debug_artifact("sync_result", result, integration=integration.name, phase="sync")

        return result

    async def _pause(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def _scrape_detail(
        self,
        previewer: ExtractionPreviewer,
        integration: IntegrationConfig,
        url: str,
        result: SyncResult,
    ) -> None:
        preview = await previewer.preview_extraction(url, integration.field_mappings)
        result.items_processed += 1

        if preview.success:
            result.records.append(build_listing_record(preview.extractions))
        else:
            result.errors.append(f"{url}: {preview.error}")

    async def _scrape_listings(
        self,
        loader: PageLoader,
        previewer: ExtractionPreviewer,
        integration: IntegrationConfig,
        sync_type: SyncType,
        result: SyncResult,
    ) -> None:
        source = integration.source_config
        list_page_config = integration.list_page_config
        pagination = list_page_config.pagination

        list_url = urljoin(integration.base_url, source.list_url) if source.list_url else integration.base_url
        max_pages = pagination.max_pages
        if sync_type == SyncType.INCREMENTAL:
            max_pages = min(INCREMENTAL_MAX_PAGES, max_pages)
        delay_seconds = source.rate_limit.delay_ms / 1000

        log = logger.bind(integration=integration.name, phase="list_pages")

        for index in range(max_pages):
            page_number = index + 1
            page_url = build_page_url(list_url, pagination, index)

            try:
                page = await loader.fetch_page(page_url)
                item_count, detail_urls = extract_detail_links(page.html, list_page_config, page_url)
                next_page = has_next_page(page.html, pagination)
            except Exception as e:
                log.warning("list_page_failed", page=page_number, url=page_url, error=str(e))
                result.errors.append(f"Page {page_number}: {e}")
                continue

            log.info("list_page_scraped", page=page_number, items=item_count, links=len(detail_urls))
            if item_count == 0:
                log.info("no_more_items", page=page_number)
                break

            for detail_url in detail_urls:
                await self._scrape_detail(previewer, integration, detail_url, result)
                await self._pause(delay_seconds)

            if not next_page:
                log.info("no_next_page", page=page_number)
                break


async def run_sync(
    integration: IntegrationConfig,
    sync_type: SyncType = SyncType.FULL_SYNC,
    url: str | None = None,
) -> SyncResult:
    """Convenience function to run a sync with a default page loader."""
    return await ListingSyncRunner().run(integration, sync_type, url)
