"""Page loader fetching raw HTML over plain HTTP."""

from typing import Protocol

import httpx

from ..config import DEFAULT_ACCEPT, Settings, get_settings
from ..exceptions import FetchError
from .logging_config import get_logger
from .models import FetchedPage

logger = get_logger(__name__)


class PageFetcher(Protocol):
    """Anything able to fetch the markup of a page."""

    async def fetch_page(self, url: str) -> FetchedPage: ...


class PageLoader:
    """Fetches pages with a single HTTP GET.

    No browser rendering and no retries: a timeout, too many redirects or a
    non-2xx status is reported as a FetchError.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the page loader.

        Args:
            settings: Fetch settings, read from the environment when omitted.
            headers: Extra headers sent with every request (e.g. integration headers).
            transport: Optional httpx transport, mainly for tests.
        """
        self.settings = settings or get_settings()
        self.headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": DEFAULT_ACCEPT,
            "Accept-Language": self.settings.accept_language,
            **(headers or {}),
        }
        self.transport = transport

    def with_headers(self, headers: dict[str, str]) -> "PageLoader":
        """Return a loader sending additional headers."""
        return PageLoader(
            settings=self.settings,
            headers={**self.headers, **headers},
            transport=self.transport,
        )

    async def fetch_page(self, url: str) -> FetchedPage:
        """Fetch a page and return its markup and status.

        Args:
            url: Absolute URL to fetch.

        Returns:
            FetchedPage with the final URL, HTML and HTTP status.

        Raises:
            FetchError: On network errors, timeouts, redirect overflow or
                non-2xx responses.
        """
        log = logger.bind(url=url, phase="page_fetch")
        log.debug("fetching_page", timeout_s=self.settings.timeout_seconds)

        try:
            async with httpx.AsyncClient(
                headers=self.headers,
                timeout=self.settings.timeout_seconds,
                follow_redirects=True,
                max_redirects=self.settings.max_redirects,
                transport=self.transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning("page_fetch_failed", status=e.response.status_code)
            raise FetchError(
                f"Failed to fetch page: {e}",
                url=url,
                status=e.response.status_code,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning("page_fetch_failed", error=str(e) or type(e).__name__)
            raise FetchError(f"Failed to fetch page: {str(e) or type(e).__name__}", url=url) from e

        page = FetchedPage(url=str(response.url), html=response.text, status=response.status_code)
        log.info("page_fetched", status=page.status, size_chars=page.length)
        return page


async def fetch_page(url: str, headers: dict[str, str] | None = None) -> FetchedPage:
    """Convenience function to fetch a single page with default settings.

    Args:
        url: Absolute URL to fetch.
        headers: Optional extra request headers.

    Returns:
        FetchedPage with markup and status.
    """
    loader = PageLoader(headers=headers)
    return await loader.fetch_page(url)
