"""Listing Scraper - config-driven extraction of real-estate listings."""

from .exceptions import FetchError, ListingScraperError, RequestValidationError
from .integrations import (
    BUILTIN_INTEGRATIONS,
    get_builtin_integration,
    load_integration_config,
    save_integration_config,
)
from .models import (
    IntegrationConfig,
    ListPageConfig,
    PaginationConfig,
    SourceConfig,
    SyncType,
)
from .service import IntegrationBuilderService
from .sync import ListingSyncRunner, SyncResult, build_listing_record, run_sync

__version__ = "0.1.0"

__all__ = [
    "FetchError",
    "ListingScraperError",
    "RequestValidationError",
    "BUILTIN_INTEGRATIONS",
    "get_builtin_integration",
    "load_integration_config",
    "save_integration_config",
    "IntegrationConfig",
    "ListPageConfig",
    "PaginationConfig",
    "SourceConfig",
    "SyncType",
    "IntegrationBuilderService",
    "ListingSyncRunner",
    "SyncResult",
    "build_listing_record",
    "run_sync",
]
