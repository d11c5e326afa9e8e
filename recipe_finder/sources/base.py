"""
Base recipe source abstract class and error taxonomy.

A recipe source is the injected capability the QueryController and the API layer use to
reach the external recipe API. Keeping it behind this interface lets tests substitute
in-memory fakes and keeps HTTP details out of the controller.

All sources must:
- Provide search_by_name, returning raw (un-normalized) records
- Provide lookup_by_id, returning a single raw record or None
- Raise TransportError for network failures and non-success HTTP responses
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class RecipeSourceError(Exception):
    """Base class for recipe source errors."""


class TransportError(RecipeSourceError):
    """Network failure, timeout, non-2xx HTTP status or undecodable response body."""


class RecipeNotFoundError(RecipeSourceError):
    """A lookup succeeded but returned no record for the requested id."""

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"No recipe found for id {recipe_id!r}")
        self.recipe_id = recipe_id


class BaseRecipeSource(ABC):
    """
    Abstract base class for all recipe sources.

    Attributes:
        name: Short identifier for the source (e.g., "mealdb")
    """
    name: str

    @abstractmethod
    def search_by_name(self, term: str) -> List[Dict[str, Any]]:
        """
        Search recipes by name.

        Args:
            term: Search term (e.g., "chicken", "arrabiata")

        Returns:
            Zero or more raw records. No matches is an empty list, not an error.

        Raises:
            TransportError: If the request fails.
        """
        pass

    @abstractmethod
    def lookup_by_id(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a single recipe by its identifier.

        Args:
            recipe_id: External recipe identifier (e.g., "52772")

        Returns:
            The raw record, or None if the source has no recipe with that id.

        Raises:
            TransportError: If the request fails.
        """
        pass
