"""Exceptions raised by the listing scraper."""


class ListingScraperError(Exception):
    """Base class for listing scraper errors."""


class FetchError(ListingScraperError):
    """A page could not be fetched (network, timeout, redirect or HTTP status)."""

    def __init__(self, message: str, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class RequestValidationError(ListingScraperError):
    """A top-level request is malformed and was rejected before any work began."""
