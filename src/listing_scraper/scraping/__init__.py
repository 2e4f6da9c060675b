"""Field extraction pipeline: transforms, extraction, previews and batches."""

from .models import (
    BatchTestResult,
    FetchedPage,
    FieldExtraction,
    FieldMapping,
    PagePreview,
    SelectorTestResult,
    TransformConfig,
    TransformType,
)
from .transforms import apply_transforms
from .extractor import extract_field, extract_title, parse_markup, test_selector
from .page_loader import PageFetcher, PageLoader, fetch_page
from .preview import (
    MAX_BATCH_URLS,
    ExtractionPreviewer,
    batch_test,
    preview_extraction,
    preview_html,
)

__all__ = [
    # Models
    "BatchTestResult",
    "FetchedPage",
    "FieldExtraction",
    "FieldMapping",
    "PagePreview",
    "SelectorTestResult",
    "TransformConfig",
    "TransformType",
    # Transforms
    "apply_transforms",
    # Extraction
    "extract_field",
    "extract_title",
    "parse_markup",
    "test_selector",
    # Page loading
    "PageFetcher",
    "PageLoader",
    "fetch_page",
    # Previews
    "MAX_BATCH_URLS",
    "ExtractionPreviewer",
    "batch_test",
    "preview_extraction",
    "preview_html",
]
