"""Page preview and batch orchestration over field mappings."""

import asyncio
import time
from typing import Any

from ..exceptions import RequestValidationError
from .extractor import extract_field, extract_title, parse_markup, test_selector
from .logging_config import get_logger, save_debug_artifact
from .models import (
    BatchTestResult,
    FieldMapping,
    PagePreview,
    SelectorTestResult,
)
from .page_loader import PageFetcher, PageLoader

logger = get_logger(__name__)

# Hard cap on concurrent fetches per batch
MAX_BATCH_URLS = 10


def failed_preview(url: str, error: str) -> PagePreview:
    """Build the preview reported for a page-level failure."""
    return PagePreview(url=url, title="", success=False, extractions=[], error=error)


def is_url_list(urls: Any) -> bool:
    """Check that a batch request names at least one URL, all of them strings."""
    return isinstance(urls, list) and bool(urls) and all(isinstance(url, str) for url in urls)


def preview_html(
    html: str,
    field_mappings: list[FieldMapping],
    base_url: str,
) -> PagePreview:
    """Run every field mapping against already-fetched markup.

    Field-level failures stay inside their extraction; only a parse failure
    marks the whole preview as failed.
    """
    try:
        soup = parse_markup(html)
        title = extract_title(soup)
        extractions = [extract_field(soup, mapping, base_url) for mapping in field_mappings]
    except Exception as e:
        logger.warning("preview_parse_failed", url=base_url, error=str(e))
        return failed_preview(base_url, str(e))

    return PagePreview(url=base_url, title=title, success=True, extractions=extractions)


class ExtractionPreviewer:
    """Previews field mappings on live pages."""

    def __init__(self, fetcher: PageFetcher | None = None):
        """Initialize the previewer.

        Args:
            fetcher: Page fetch collaborator. Defaults to a PageLoader.
        """
        self.fetcher = fetcher or PageLoader()

    async def preview_extraction(
        self,
        url: str,
        field_mappings: list[FieldMapping],
    ) -> PagePreview:
        """Fetch a page and extract every field mapping from it.

        Args:
            url: Page URL.
            field_mappings: Mappings to evaluate, in order.

        Returns:
            PagePreview. A fetch failure yields ``success=False``; field
            failures are carried by the individual extractions.
        """
        log = logger.bind(url=url, phase="preview")

        try:
            page = await self.fetcher.fetch_page(url)
        except Exception as e:
            log.warning("preview_failed", error=str(e))
            return failed_preview(url, str(e))

        preview = preview_html(page.html, field_mappings, url)

        failed_fields = [e.field for e in preview.extractions if e.error]
        log.info(
            "preview_complete",
            success=preview.success,
            fields=len(preview.extractions),
            failed_fields=failed_fields,
        )
        return preview

    async def test_selector_on_page(
        self,
        selector: str,
        html: str | None = None,
        url: str | None = None,
    ) -> SelectorTestResult:
        """Probe a selector on pasted markup, or on a fetched page.

        Raises:
            RequestValidationError: If neither markup nor a URL is given.
            FetchError: If the page has to be fetched and cannot be.
        """
        if not html and url:
            page = await self.fetcher.fetch_page(url)
            html = page.html

        if not html:
            raise RequestValidationError("Either url or html is required")

        return test_selector(html, selector)

    async def fetch_raw_page(self, url: str) -> dict[str, Any]:
        """Fetch a page for client-side experimentation.

        Returns:
            Dict with the raw ``html``, HTTP ``status`` and ``length``.
        """
        page = await self.fetcher.fetch_page(url)
        return {"html": page.html, "status": page.status, "length": page.length}

    async def batch_test(
        self,
        urls: list[str],
        field_mappings: list[FieldMapping],
    ) -> BatchTestResult:
        """Preview the same mappings on up to ten URLs concurrently.

        A preview that raises becomes a failed preview at its own position;
        it never cancels or fails the other previews.

        Args:
            urls: Page URLs; only the first ten are tested.
            field_mappings: Mappings to evaluate on every page.

        Returns:
            BatchTestResult with one preview per tested URL, in input order.

        Raises:
            RequestValidationError: If ``urls`` is not a non-empty list of
                strings or ``field_mappings`` is not a list.
        """
        if not is_url_list(urls):
            raise RequestValidationError("urls array is required")
        if not isinstance(field_mappings, list):
            raise RequestValidationError("fieldMappings array is required")

        limited_urls = urls[:MAX_BATCH_URLS]
        log = logger.bind(phase="batch_test")
        if len(urls) > MAX_BATCH_URLS:
            log.info("batch_truncated", requested=len(urls), tested=MAX_BATCH_URLS)

        start_time = time.time()
        outcomes = await asyncio.gather(
            *(self.preview_extraction(url, field_mappings) for url in limited_urls),
            return_exceptions=True,
        )

        results: list[PagePreview] = []
        for url, outcome in zip(limited_urls, outcomes):
            if isinstance(outcome, BaseException):
                log.warning("batch_preview_raised", url=url, error=str(outcome))
                results.append(failed_preview(url, str(outcome) or "Unknown error"))
            else:
                results.append(outcome)

        batch = BatchTestResult(tested=len(limited_urls), results=results)

        log.info(
            "batch_complete",
            tested=batch.tested,
            succeeded=sum(1 for r in results if r.success),
            elapsed_ms=round((time.time() - start_time) * 1000),
        )
        save_debug_artifact("batch_test", batch.to_dict(), phase="batch_test")

        return batch


async def preview_extraction(url: str, field_mappings: list[FieldMapping]) -> PagePreview:
    """Convenience function to preview mappings on a single page."""
    return await ExtractionPreviewer().preview_extraction(url, field_mappings)


async def batch_test(urls: list[str], field_mappings: list[FieldMapping]) -> BatchTestResult:
    """Convenience function to preview mappings on a batch of pages."""
    return await ExtractionPreviewer().batch_test(urls, field_mappings)
