"""
Configuration management for Recipe Finder.

This module centralizes environment variable loading from .env file at project root.
It should be imported early in both backend (api/main.py) and frontend (streamlit_app/app.py)
to ensure .env is loaded before any other code accesses environment variables.

In production, .env will not exist, but load_dotenv() is safe to call and will no-op.
Platform environment variables will be used instead.

Environment Variables:
- MEALDB_BASE_URL: Optional, defaults to "https://www.themealdb.com/api/json/v1/1"
- REQUEST_TIMEOUT_SECONDS: Optional, client-side HTTP timeout (default: 10)
- RECIPE_DEFAULT_SEARCH: Optional, term searched when the query is empty (default: "chicken")
- SEARCH_QUIET_PERIOD_MS: Optional, debounce delay after the last keystroke (default: 500)
- RECIPE_PLACEHOLDER_TEXT: Optional, shown for prep/cook time and servings (default: "N/A")
- RECIPE_PLACEHOLDER_IMAGE: Optional, image shown when a recipe thumbnail fails to load
- LOG_LEVEL: Optional, root log level for the API and Streamlit entry points (default: "INFO")
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

DEFAULT_MEALDB_BASE_URL = "https://www.themealdb.com/api/json/v1/1"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_SEARCH_TERM = "chicken"
DEFAULT_QUIET_PERIOD_MS = 500
DEFAULT_PLACEHOLDER_TEXT = "N/A"
DEFAULT_PLACEHOLDER_IMAGE = "https://placehold.co/400x300/CCCCCC/333?text=No+Image"


def load_env_file() -> None:
    """
    Load environment variables from .env file at project root.

    This function locates the project root by going up from this file's location
    (api/config.py -> project root) and loads .env if it exists.

    Safe to call multiple times. Existing environment variables take precedence.
    """
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env", override=False)


# Load .env file on module import
load_env_file()


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from e


class MealDBConfig:
    """Configuration for the TheMealDB recipe source."""

    @staticmethod
    def get_base_url() -> str:
        """
        Get TheMealDB API base URL.

        Returns:
            Base URL with trailing slash removed.
        """
        return os.getenv("MEALDB_BASE_URL", DEFAULT_MEALDB_BASE_URL).rstrip("/")

    @staticmethod
    def get_timeout() -> float:
        """
        Get client-side request timeout in seconds.

        Raises:
            RuntimeError: If REQUEST_TIMEOUT_SECONDS is not a number.
        """
        return _get_float("REQUEST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)


class SearchConfig:
    """Product choices for the search experience."""

    @staticmethod
    def get_default_term() -> str:
        """Term searched on start-up and whenever the query is cleared."""
        return os.getenv("RECIPE_DEFAULT_SEARCH", DEFAULT_SEARCH_TERM)

    @staticmethod
    def get_quiet_period_seconds() -> float:
        """
        Get the debounce quiet period, converted from SEARCH_QUIET_PERIOD_MS to seconds.

        Raises:
            RuntimeError: If SEARCH_QUIET_PERIOD_MS is not a number or is negative.
        """
        millis = _get_float("SEARCH_QUIET_PERIOD_MS", DEFAULT_QUIET_PERIOD_MS)
        if millis < 0:
            raise RuntimeError(f"SEARCH_QUIET_PERIOD_MS must not be negative, got {millis}")
        return millis / 1000.0

    @staticmethod
    def get_placeholder_text() -> str:
        return os.getenv("RECIPE_PLACEHOLDER_TEXT", DEFAULT_PLACEHOLDER_TEXT)

    @staticmethod
    def get_placeholder_image() -> str:
        return os.getenv("RECIPE_PLACEHOLDER_IMAGE", DEFAULT_PLACEHOLDER_IMAGE)

    @staticmethod
    def get_controller_options() -> Dict[str, Any]:
        """
        Keyword arguments for recipe_finder.controller.QueryController.

        Usage:
            controller = QueryController(source, **SearchConfig.get_controller_options())
        """
        return {
            "default_term": SearchConfig.get_default_term(),
            "quiet_period": SearchConfig.get_quiet_period_seconds(),
            "placeholder": SearchConfig.get_placeholder_text(),
        }


def get_log_level() -> str:
    """Get the configured log level name (default: INFO)."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    """Configure root logging for an entry point (API or Streamlit app)."""
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_config_summary() -> Dict[str, Any]:
    """
    Get the effective configuration values.

    Returns:
        Dictionary with the resolved base URL, timeout, default term, quiet period
        and placeholder text. Used by the /health endpoint for diagnostics.
    """
    return {
        "mealdb_base_url": MealDBConfig.get_base_url(),
        "timeout_seconds": MealDBConfig.get_timeout(),
        "default_search_term": SearchConfig.get_default_term(),
        "quiet_period_seconds": SearchConfig.get_quiet_period_seconds(),
        "placeholder_text": SearchConfig.get_placeholder_text(),
    }
