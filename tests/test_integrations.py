"""Tests for integration config storage and built-in templates."""

import json
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from listing_scraper.integrations import (
    BUILTIN_INTEGRATIONS,
    get_builtin_integration,
    load_integration_config,
    save_integration_config,
)
from listing_scraper.scraping import extractor


class TestBuiltinIntegrations:
    """Tests for the platform templates."""

    def test_all_platforms_present(self):
        assert set(BUILTIN_INTEGRATIONS) == {
            "storia-romania",
            "imobiliare-ro",
            "olx-romania",
            "publi24-romania",
        }

    @pytest.mark.parametrize("name", sorted(BUILTIN_INTEGRATIONS))
    def test_templates_ship_disabled(self, name):
        assert BUILTIN_INTEGRATIONS[name].enabled is False

    @pytest.mark.parametrize("name", sorted(BUILTIN_INTEGRATIONS))
    def test_selectors_are_valid(self, name):
        """Test that every template selector compiles."""
        config = BUILTIN_INTEGRATIONS[name]
        selectors = [m.selector for m in config.field_mappings] + [
            config.list_page_config.item_selector,
            config.list_page_config.detail_link_selector,
        ]
        for selector in selectors:
            assert extractor.test_selector("<html></html>", selector).error is None

    def test_get_builtin_returns_copy(self):
        config = get_builtin_integration("storia-romania")
        config.field_mappings.clear()

        assert len(BUILTIN_INTEGRATIONS["storia-romania"].field_mappings) == 8

    def test_get_unknown(self):
        assert get_builtin_integration("nope") is None


class TestSaveIntegrationConfig:
    """Tests for saving integration configs."""

    def test_save_config(self):
        config = get_builtin_integration("olx-romania")

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "olx.json"
            result_path = save_integration_config(config, path)

            assert result_path == path
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
                assert data["name"] == "olx-romania"
                assert data["displayName"] == "OLX România"
                assert data["sourceConfig"]["rateLimit"]["delayMs"] == 5000

    def test_default_location(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.setenv("LISTING_SCRAPER_DATA_DIR", tmpdir)

            path = save_integration_config(get_builtin_integration("publi24-romania"))

            assert path == Path(tmpdir) / "integrations" / "publi24-romania.json"
            assert path.exists()


class TestLoadIntegrationConfig:
    """Tests for loading integration configs."""

    def test_load_nonexistent(self):
        assert load_integration_config(Path("/nonexistent/path.json")) is None

    def test_load_existing(self):
        config = get_builtin_integration("imobiliare-ro")

        with tempfile.TemporaryDirectory() as tmpdir:
            path = save_integration_config(config, Path(tmpdir) / "imobiliare.json")
            loaded = load_integration_config(path)

        assert loaded == config

    def test_load_invalid(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.json"
            path.write_text(json.dumps({"name": "bad"}), encoding="utf-8")

            with pytest.raises(ValidationError):
                load_integration_config(path)
