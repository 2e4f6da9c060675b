"""Integration configuration models."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, HttpUrl, field_validator, model_validator

from .scraping.models import CamelModel, FieldMapping

# Pagination names used by older platform templates
LEGACY_PAGINATION_TYPES = {
    "page-number": "page",
    "load-more": "loadMore",
    "infinite-scroll": "loadMore",
}


class SourceType(str, Enum):
    """Kind of content served by a source."""

    HTML = "html"
    API = "api"


class AuthType(str, Enum):
    """Authentication scheme for a source."""

    NONE = "none"
    BASIC = "basic"
    BEARER = "bearer"
    COOKIE = "cookie"


class PaginationType(str, Enum):
    """How list pages are paginated."""

    PAGE = "page"
    OFFSET = "offset"
    CURSOR = "cursor"
    LOAD_MORE = "loadMore"


class SyncType(str, Enum):
    """Kind of sync run."""

    FULL_SYNC = "full_sync"
    INCREMENTAL = "incremental"
    SINGLE_URL = "single_url"


class RateLimit(CamelModel):
    """Request pacing for a source."""

    requests_per_minute: int | None = Field(default=None, ge=1, le=120)
    delay_ms: int = Field(default=2000, ge=500, le=10000)


class AuthConfig(CamelModel):
    """Credentials for a source."""

    type: AuthType = AuthType.NONE
    credentials: dict[str, str] = Field(default_factory=dict)


class SourceConfig(CamelModel):
    """Where an integration's pages live and how to request them."""

    base_url: HttpUrl
    list_url: str | None = None  # Relative to base_url, or absolute
    type: SourceType = SourceType.HTML
    auth: AuthConfig = Field(default_factory=AuthConfig)
    rate_limit: RateLimit = Field(default_factory=RateLimit)
    headers: dict[str, str] = Field(default_factory=dict)


class PaginationConfig(CamelModel):
    """Pagination of an integration's list pages."""

    type: PaginationType = PaginationType.PAGE
    param_name: str = Field(default="page", min_length=1)
    start_value: int = Field(default=1, ge=0)
    increment: int = Field(default=1, ge=1)
    max_pages: int = Field(default=5, ge=1, le=100)
    has_next_selector: str | None = Field(
        default=None,
        validation_alias=AliasChoices("hasNextSelector", "has_next_selector", "nextSelector"),
    )

    @field_validator("type", mode="before")
    @classmethod
    def normalize_legacy_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LEGACY_PAGINATION_TYPES.get(value, value)
        return value


class ListPageConfig(CamelModel):
    """Selectors locating listing items and their detail links on list pages."""

    list_selector: str | None = None
    item_selector: str = Field(default="article", min_length=1)
    detail_link_selector: str = Field(default="a", min_length=1)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)


class IntegrationConfig(CamelModel):
    """A complete scraping integration for one listings website."""

    name: str = Field(min_length=3, max_length=50, pattern=r"^[a-z0-9-]+$")
    display_name: str = Field(min_length=1, max_length=100)
    enabled: bool = False
    source_config: SourceConfig
    list_page_config: ListPageConfig = Field(default_factory=ListPageConfig)
    field_mappings: list[FieldMapping] = Field(min_length=1)
    schedule: str | None = None  # Cron expression

    @model_validator(mode="after")
    def check_unique_fields(self) -> "IntegrationConfig":
        seen: set[str] = set()
        for mapping in self.field_mappings:
            if mapping.field in seen:
                raise ValueError(f"Duplicate field mapping: {mapping.field}")
            seen.add(mapping.field)
        return self

    @property
    def base_url(self) -> str:
        return str(self.source_config.base_url)
