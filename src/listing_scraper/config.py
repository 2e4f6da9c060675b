"""Runtime settings loaded from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "ro-RO,ro;q=0.9,en-US;q=0.8,en;q=0.7"


@dataclass(frozen=True)
class Settings:
    """Page fetch and storage settings."""

    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    timeout_seconds: float = 30.0
    max_redirects: int = 5
    data_dir: Path | None = None


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    data_dir = os.getenv("LISTING_SCRAPER_DATA_DIR")
    return Settings(
        user_agent=os.getenv("SCRAPER_USER_AGENT", DEFAULT_USER_AGENT),
        accept_language=os.getenv("SCRAPER_ACCEPT_LANGUAGE", DEFAULT_ACCEPT_LANGUAGE),
        timeout_seconds=float(os.getenv("SCRAPER_TIMEOUT_SECONDS", "30")),
        max_redirects=int(os.getenv("SCRAPER_MAX_REDIRECTS", "5")),
        data_dir=Path(data_dir) if data_dir else None,
    )


def get_data_dir(settings: Settings | None = None) -> Path:
    """Get the data directory, creating it if needed."""
    settings = settings or get_settings()
    data_dir = settings.data_dir or get_project_root() / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir
