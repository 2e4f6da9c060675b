"""Data models for the extraction pipeline."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TransformType(str, Enum):
    """Kind of transform applied to an extracted value."""

    TRIM = "trim"
    EXTRACT_NUMBER = "extractNumber"
    EXTRACT_CURRENCY = "extractCurrency"
    RESOLVE_URL = "resolveUrl"
    REGEX = "regex"
    REPLACE = "replace"
    DEFAULT = "default"


class TransformConfig(CamelModel):
    """A single step of a transform chain."""

    type: TransformType
    options: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("options", "params"),
    )

    @field_validator("options", mode="before")
    @classmethod
    def null_options_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class FieldMapping(CamelModel):
    """How to populate one target field from a page."""

    field: str = Field(min_length=1)  # Dotted path, e.g. "location.city"
    selector: str = Field(min_length=1)
    attribute: str | None = None  # "text" (default), "html" or an attribute name
    multiple: bool = False
    transforms: list[TransformConfig] = Field(default_factory=list)


class FieldExtraction(CamelModel):
    """Outcome of extracting one field mapping."""

    field: str
    selector: str
    value: str | list[str] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        # value is always reported, even when null
        data = self.model_dump(mode="json", by_alias=True)
        if data["error"] is None:
            del data["error"]
        return data


class PagePreview(CamelModel):
    """Extraction results for a single page."""

    url: str
    title: str = ""
    success: bool
    extractions: list[FieldExtraction] = Field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["extractions"] = [e.to_dict() for e in self.extractions]
        return data


class SelectorTestResult(CamelModel):
    """Outcome of probing a selector against a page."""

    found: bool
    count: int = 0
    samples: list[str] = Field(default_factory=list)
    error: str | None = None


class FetchedPage(CamelModel):
    """Markup returned by the page loader."""

    url: str
    html: str
    status: int

    @property
    def length(self) -> int:
        return len(self.html)


class BatchTestResult(CamelModel):
    """Previews for a batch of URLs, in input order."""

    tested: int
    results: list[PagePreview] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tested": self.tested,
            "results": [r.to_dict() for r in self.results],
        }
