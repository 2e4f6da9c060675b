"""Integration config storage and built-in platform templates.

The templates target Romanian real-estate platforms. They ship disabled:
check each site's terms of service and validate the selectors with the
preview tools before enabling one.
"""

import json
from pathlib import Path

from .config import get_data_dir
from .models import IntegrationConfig

_BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
}


def _price_mappings(selector: str) -> list[dict]:
    return [
        {"field": "price", "selector": selector, "transforms": [{"type": "extractNumber"}]},
        {"field": "currency", "selector": selector, "transforms": [{"type": "extractCurrency"}]},
    ]


def _images_mapping(selector: str) -> dict:
    return {
        "field": "images",
        "selector": selector,
        "attribute": "src",
        "multiple": True,
        "transforms": [{"type": "resolveUrl"}],
    }


STORIA = IntegrationConfig.model_validate({
    "name": "storia-romania",
    "displayName": "Storia.ro",
    "sourceConfig": {
        "baseUrl": "https://www.storia.ro",
        "listUrl": "/vanzare/apartament/",
        "rateLimit": {"delayMs": 2000},
        "headers": _BROWSER_HEADERS,
    },
    "listPageConfig": {
        "itemSelector": '[data-cy="listing-item"]',
        "detailLinkSelector": 'a[data-cy="listing-item-link"]',
        "pagination": {"type": "page-number", "maxPages": 10},
    },
    "fieldMappings": [
        {"field": "title", "selector": '[data-cy="listing-item-title"]', "transforms": [{"type": "trim"}]},
        *_price_mappings('[data-cy="listing-item-price"]'),
        {"field": "location.city", "selector": '[data-cy="listing-item-location"]', "transforms": [{"type": "trim"}]},
        {"field": "area_sqm", "selector": '[data-cy="listing-item-area"]', "transforms": [{"type": "extractNumber"}]},
        {"field": "rooms", "selector": '[data-cy="listing-item-rooms"]', "transforms": [{"type": "extractNumber"}]},
        _images_mapping('img[data-cy="listing-item-image"]'),
        {"field": "externalId", "selector": '[data-cy="listing-item"]', "attribute": "data-id", "transforms": [{"type": "trim"}]},
    ],
    "schedule": "0 */4 * * *",
})

IMOBILIARE = IntegrationConfig.model_validate({
    "name": "imobiliare-ro",
    "displayName": "Imobiliare.ro",
    "sourceConfig": {
        "baseUrl": "https://www.imobiliare.ro",
        "listUrl": "/vanzari-apartamente/bucuresti",
        "rateLimit": {"delayMs": 3000},
        "headers": _BROWSER_HEADERS,
    },
    "listPageConfig": {
        "itemSelector": ".box-anunt",
        "detailLinkSelector": ".box-anunt a.titlu",
        "pagination": {"type": "page-number", "maxPages": 5},
    },
    "fieldMappings": [
        {"field": "title", "selector": ".titlu-anunt", "transforms": [{"type": "trim"}]},
        *_price_mappings(".pret"),
        {"field": "location.city", "selector": ".localizare", "transforms": [{"type": "trim"}]},
        {"field": "area_sqm", "selector": '.caracteristici-anunt span:-soup-contains("mp")', "transforms": [{"type": "extractNumber"}]},
        {"field": "rooms", "selector": '.caracteristici-anunt span:-soup-contains("camere")', "transforms": [{"type": "extractNumber"}]},
        _images_mapping(".imagine-anunt img"),
        {"field": "externalId", "selector": ".box-anunt", "attribute": "data-id"},
    ],
    "schedule": "0 */6 * * *",
})

OLX = IntegrationConfig.model_validate({
    "name": "olx-romania",
    "displayName": "OLX România",
    "sourceConfig": {
        "baseUrl": "https://www.olx.ro",
        "listUrl": "/imobiliare/apartamente-garsoniere-de-vanzare/",
        "rateLimit": {"delayMs": 5000},
        "headers": _BROWSER_HEADERS,
    },
    "listPageConfig": {
        "itemSelector": '[data-cy="l-card"]',
        "detailLinkSelector": 'a[data-cy="l-card"], [data-cy="l-card"] a',
        "pagination": {"type": "page-number", "maxPages": 5},
    },
    "fieldMappings": [
        {"field": "title", "selector": '[data-cy="ad-title"]', "transforms": [{"type": "trim"}]},
        *_price_mappings('[data-cy="ad-price"]'),
        {"field": "location.city", "selector": '[data-testid="location-date"]', "transforms": [{"type": "trim"}]},
        _images_mapping('img[data-testid="ad-photo"]'),
        {"field": "externalId", "selector": '[data-cy="l-card"]', "attribute": "id"},
    ],
    "schedule": "0 */8 * * *",
})

PUBLI24 = IntegrationConfig.model_validate({
    "name": "publi24-romania",
    "displayName": "Publi24",
    "sourceConfig": {
        "baseUrl": "https://www.publi24.ro",
        "listUrl": "/anunturi/imobiliare/de-vanzare/apartamente/",
        "rateLimit": {"delayMs": 2000},
        "headers": _BROWSER_HEADERS,
    },
    "listPageConfig": {
        "itemSelector": ".listing-item",
        "detailLinkSelector": ".listing-item a.title",
        "pagination": {"type": "page-number", "maxPages": 10},
    },
    "fieldMappings": [
        {"field": "title", "selector": ".listing-title", "transforms": [{"type": "trim"}]},
        *_price_mappings(".listing-price"),
        {"field": "location.city", "selector": ".listing-location", "transforms": [{"type": "trim"}]},
        _images_mapping(".listing-image img"),
        {"field": "externalId", "selector": ".listing-item", "attribute": "data-listing-id"},
    ],
    "schedule": "0 */4 * * *",
})

BUILTIN_INTEGRATIONS: dict[str, IntegrationConfig] = {
    config.name: config for config in (STORIA, IMOBILIARE, OLX, PUBLI24)
}


def get_builtin_integration(name: str) -> IntegrationConfig | None:
    """Get a built-in platform template by name."""
    config = BUILTIN_INTEGRATIONS.get(name)
    return config.model_copy(deep=True) if config else None


def get_integrations_dir() -> Path:
    """Get the directory holding saved integration configs."""
    integrations_dir = get_data_dir() / "integrations"
    integrations_dir.mkdir(exist_ok=True)
    return integrations_dir


def save_integration_config(config: IntegrationConfig, path: Path | None = None) -> Path:
    """Save an integration config to a JSON file.

    Args:
        config: The config to save.
        path: Output path. If None, uses default location.

    Returns:
        Path to the saved file.
    """
    if path is None:
        path = get_integrations_dir() / f"{config.name}.json"

    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)

    return path


def load_integration_config(path: Path) -> IntegrationConfig | None:
    """Load an integration config from a JSON file.

    Args:
        path: Path to the config file.

    Returns:
        IntegrationConfig if the file exists, None otherwise.

    Raises:
        pydantic.ValidationError: If the file content is not a valid config.
    """
    if not path.exists():
        return None

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
        return IntegrationConfig.model_validate(data)
