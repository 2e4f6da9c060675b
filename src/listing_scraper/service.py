"""Request handlers for the integration builder endpoints.

Each handler takes a decoded JSON body and answers with an envelope:
``{"success": True, "data": ...}`` or ``{"success": False, "error": {"message": ...}}``.
Malformed requests are rejected before any page is fetched.
"""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from .exceptions import FetchError, RequestValidationError
from .scraping.logging_config import get_logger
from .scraping.models import FieldMapping
from .scraping.page_loader import PageFetcher
from .scraping.preview import ExtractionPreviewer, is_url_list

logger = get_logger(__name__)

_field_mappings_adapter = TypeAdapter(list[FieldMapping])


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def error(message: str) -> dict[str, Any]:
    return {"success": False, "error": {"message": message}}


def parse_field_mappings(raw: Any) -> list[FieldMapping]:
    """Validate the ``fieldMappings`` member of a request body."""
    if not isinstance(raw, list):
        raise RequestValidationError("fieldMappings array is required")
    try:
        return _field_mappings_adapter.validate_python(raw)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise RequestValidationError(f"Invalid fieldMappings: {details}") from e


def _require(body: dict[str, Any], key: str, message: str) -> str:
    value = body.get(key)
    if not value or not isinstance(value, str):
        raise RequestValidationError(message)
    return value


def _optional(body: dict[str, Any], key: str) -> str | None:
    value = body.get(key)
    if value is not None and not isinstance(value, str):
        raise RequestValidationError(f"{key} must be a string")
    return value or None


class IntegrationBuilderService:
    """Handlers behind the selector test, preview, fetch-page and batch-test endpoints."""

    def __init__(self, fetcher: PageFetcher | None = None):
        self.previewer = ExtractionPreviewer(fetcher)

    async def test_selector(self, body: dict[str, Any]) -> dict[str, Any]:
        """Test a CSS selector on pasted HTML or on a fetched URL."""
        try:
            selector = _require(body, "selector", "Selector is required")
            result = await self.previewer.test_selector_on_page(
                selector,
                html=_optional(body, "html"),
                url=_optional(body, "url"),
            )
        except (RequestValidationError, FetchError) as e:
            return error(str(e))
        return ok(result.to_dict())

    async def preview(self, body: dict[str, Any]) -> dict[str, Any]:
        """Preview field extractions on a URL."""
        try:
            url = _require(body, "url", "URL is required")
            field_mappings = parse_field_mappings(body.get("fieldMappings"))
        except RequestValidationError as e:
            return error(str(e))

        preview = await self.previewer.preview_extraction(url, field_mappings)
        return ok(preview.to_dict())

    async def fetch_page(self, body: dict[str, Any]) -> dict[str, Any]:
        """Fetch a page and return its HTML for client-side testing."""
        try:
            url = _require(body, "url", "URL is required")
            page = await self.previewer.fetch_raw_page(url)
        except (RequestValidationError, FetchError) as e:
            return error(str(e))
        return ok(page)

    async def batch_test(self, body: dict[str, Any]) -> dict[str, Any]:
        """Test extraction on up to ten URLs."""
        urls = body.get("urls")
        try:
            if not is_url_list(urls):
                raise RequestValidationError("urls array is required")
            field_mappings = parse_field_mappings(body.get("fieldMappings"))
            batch = await self.previewer.batch_test(urls, field_mappings)
        except RequestValidationError as e:
            logger.info("batch_request_rejected", error=str(e))
            return error(str(e))
        return ok(batch.to_dict())
