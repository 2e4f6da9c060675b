"""Logging configuration for the extraction pipeline."""

import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

TRUTHY = ("true", "1", "yes")


def debug_enabled() -> bool:
    """Whether DEBUG is set; read on every call so it can be toggled at runtime."""
    return os.getenv("DEBUG", "false").lower() in TRUTHY


def get_debug_dir() -> Path:
    """Get the debug output directory."""
    debug_dir = Path(os.getenv("DEBUG_DIR", "debug"))
    debug_dir.mkdir(parents=True, exist_ok=True)
    return debug_dir


def save_debug_artifact(
    name: str,
    data: Any,
    integration: str | None = None,
    phase: str | None = None,
) -> Path | None:
    """Save a debug artifact to disk.

    Models are written with their camelCase wire names, the same shape the
    request handlers return. Artifacts land in
    ``DEBUG_DIR/<integration>/<phase>/<timestamp>_<name>.json``.

    Args:
        name: Name of the artifact.
        data: Data to save (will be JSON serialized).
        integration: Optional integration name for organization.
        phase: Optional phase name for organization.

    Returns:
        Path to saved file, or None if debug mode is disabled or the write failed.
    """
    if not debug_enabled():
        return None

    # Microseconds keep concurrent batch artifacts apart
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

    try:
        debug_dir = get_debug_dir()
        for part in (integration, phase):
            if part:
                debug_dir = debug_dir / part
        debug_dir.mkdir(parents=True, exist_ok=True)
        filepath = debug_dir / f"{timestamp}_{name}.json"

        if hasattr(data, "to_dict"):
            data = data.to_dict()
        elif hasattr(data, "model_dump"):
            data = data.model_dump(mode="json", by_alias=True)

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str, ensure_ascii=False)

        return filepath
    except (OSError, TypeError, ValueError) as e:
        structlog.get_logger().warning("failed_to_save_debug_artifact", error=str(e))
        return None


def configure_logging() -> None:
    """Configure structured logging for the application."""
    level_map = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
    }
    default_level = "DEBUG" if debug_enabled() else "INFO"
    level = level_map.get(os.getenv("LOG_LEVEL", default_level).upper(), 20)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=True)
            if sys.stderr.isatty()
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a logger instance with optional initial context.

    Args:
        name: Optional logger name.
        **initial_context: Initial context to bind to the logger.

    Returns:
        Configured logger instance.
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


# Initialize logging on module import
configure_logging()
