"""
TheMealDB recipe source using the public JSON API.

This source talks to TheMealDB's v1 API with requests:
- GET {base_url}/search.php?s=<term> for name searches
- GET {base_url}/lookup.php?i=<id> for single-recipe lookups

TheMealDB answers "no match" with {"meals": null} and a 200 status, so an empty
result is never an error here. Timeouts, connection problems, non-2xx statuses and
undecodable bodies are all raised as TransportError.

The base URL and timeout default to MEALDB_BASE_URL / REQUEST_TIMEOUT_SECONDS
(loaded from .env by api.config for local dev) but can be passed explicitly.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from .base import BaseRecipeSource, TransportError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.themealdb.com/api/json/v1/1"
DEFAULT_TIMEOUT_SECONDS = 10.0


class MealDBSource(BaseRecipeSource):
    """
    Recipe source backed by TheMealDB.

    Returns raw records exactly as the API provides them; normalization is left
    to recipe_finder.normalizer.
    """
    name = "mealdb"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the TheMealDB source.

        Args:
            base_url: API base URL (optional, reads from MEALDB_BASE_URL if not provided)
            timeout: Request timeout in seconds (optional, reads from REQUEST_TIMEOUT_SECONDS)
            session: requests.Session to reuse (optional, a new one is created otherwise)
        """
        self.base_url = (base_url or os.getenv("MEALDB_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        if timeout is None:
            timeout = float(os.getenv("REQUEST_TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS)
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_meals(self, endpoint: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """
        Call an endpoint and return its "meals" list ([] when the API reports null).

        Raises:
            TransportError: On any request failure or malformed response.
        """
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            logger.warning("TheMealDB request timed out: %s params=%r", url, params)
            raise TransportError(f"Request to {url} timed out after {self.timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            logger.warning("Could not connect to TheMealDB: %s", e)
            raise TransportError(f"Could not connect to {url}: {e}") from e
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else "unknown"
            logger.warning("TheMealDB returned HTTP %s for %s params=%r", status_code, url, params)
            raise TransportError(f"{url} returned HTTP {status_code}") from e
        except requests.exceptions.RequestException as e:
            logger.warning("TheMealDB request failed: %s", e)
            raise TransportError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            # response.json() raises a ValueError subclass on invalid JSON
            logger.warning("TheMealDB returned a non-JSON body for %s", url)
            raise TransportError(f"Invalid JSON from {url}") from e

        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response format from {url}: {str(data)[:100]}")

        meals = data.get("meals") or []
        if not isinstance(meals, list):
            raise TransportError(f"Unexpected 'meals' value from {url}: {str(meals)[:100]}")
        if not all(isinstance(meal, dict) for meal in meals):
            logger.warning("TheMealDB returned non-object meal records for %s params=%r", url, params)
            raise TransportError(f"Unexpected meal record from {url}: {str(meals)[:100]}")
        return meals

    def search_by_name(self, term: str) -> List[Dict[str, Any]]:
        """
        Search TheMealDB by recipe name.

        Args:
            term: Search term (e.g., "chicken")

        Returns:
            List of raw meal records (possibly empty).

        Raises:
            TransportError: If the request fails.
        """
        meals = self._get_meals("search.php", {"s": term})
        logger.info("TheMealDB search %r returned %d records", term, len(meals))
        return meals

    def lookup_by_id(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        """
        Look up a single TheMealDB recipe.

        Args:
            recipe_id: TheMealDB idMeal (e.g., "52772")

        Returns:
            The raw meal record, or None if no recipe has that id.

        Raises:
            TransportError: If the request fails.
        """
        meals = self._get_meals("lookup.php", {"i": recipe_id})
        if not meals:
            logger.info("TheMealDB lookup %r found no record", recipe_id)
            return None
        return meals[0]
