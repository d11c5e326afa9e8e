"""
Record normalizer: flat TheMealDB records -> Recipe.

TheMealDB returns each meal as a flat object with fixed-width numbered fields
(strIngredient1..strIngredient20 / strMeasure1..strMeasure20). This module folds those
into ordered ingredient lines and splits the free-text instructions into steps.

Absent values come in several forms from the API: missing keys, JSON null, empty or
whitespace-only strings, and the literal string "null". All of them are treated the same.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from recipe_finder.models import Recipe

logger = logging.getLogger(__name__)

# Number of numbered ingredient/measure slots in a TheMealDB record
INGREDIENT_SLOTS = 20

# TheMealDB's documented "no value" sentinel
NULL_SENTINEL = "null"

DEFAULT_PLACEHOLDER = "N/A"

# Raw record field names
ID_FIELD = "idMeal"
NAME_FIELD = "strMeal"
IMAGE_FIELD = "strMealThumb"
INSTRUCTIONS_FIELD = "strInstructions"
CATEGORY_FIELD = "strCategory"
AREA_FIELD = "strArea"
VIDEO_FIELD = "strYoutube"


class InvalidRecordError(ValueError):
    """Raised when a raw record cannot be turned into a Recipe (no identifier)."""


def clean_field(value: Any) -> Optional[str]:
    """
    Trim a raw field value, returning None when it is absent.

    Args:
        value: Raw value from the record (str, None, or anything str()-able)

    Returns:
        Trimmed string, or None if the value is missing, blank, or the "null" sentinel.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == NULL_SENTINEL:
        return None
    return text


def ingredient_lines(raw: Dict[str, Any]) -> List[str]:
    """
    Combine the numbered ingredient/measure pairs into "<measure> <ingredient>" lines.

    Slots without an ingredient are skipped; a missing measure yields the bare
    ingredient. Output order follows slot index 1..20.
    """
    lines: List[str] = []
    for index in range(1, INGREDIENT_SLOTS + 1):
        ingredient = clean_field(raw.get(f"strIngredient{index}"))
        if ingredient is None:
            continue
        measure = clean_field(raw.get(f"strMeasure{index}"))
        lines.append(f"{measure} {ingredient}" if measure else ingredient)
    return lines


def instruction_steps(text: Any) -> List[str]:
    """Split raw instructions on newlines into trimmed, non-empty steps."""
    if text is None:
        return []
    return [segment.strip() for segment in str(text).split("\n") if segment.strip()]


def normalize(raw: Dict[str, Any], placeholder: str = DEFAULT_PLACEHOLDER) -> Recipe:
    """
    Normalize a single raw TheMealDB record into a Recipe.

    Args:
        raw: Flat record as returned by search.php / lookup.php
        placeholder: Text used for quick facts the API does not provide
                     (prep time, cook time, servings)

    Returns:
        Immutable Recipe instance.

    Raises:
        InvalidRecordError: If the record is not a mapping or has no identifier.

    Examples:
        >>> recipe = normalize({"idMeal": "1", "strMeal": "Soup",
        ...                     "strIngredient1": "Salt", "strMeasure1": "1 tsp",
        ...                     "strInstructions": "Boil.\\n\\nServe.\\n"})
        >>> recipe.ingredients
        ['1 tsp Salt']
        >>> recipe.instructions
        ['Boil.', 'Serve.']
    """
    if not isinstance(raw, dict):
        raise InvalidRecordError(f"Record is not an object: {str(raw)[:100]}")
    recipe_id = clean_field(raw.get(ID_FIELD))
    if recipe_id is None:
        raise InvalidRecordError(f"Record has no {ID_FIELD}: {str(raw)[:100]}")

    return Recipe(
        id=recipe_id,
        name=clean_field(raw.get(NAME_FIELD)) or "",
        image_url=clean_field(raw.get(IMAGE_FIELD)) or "",
        ingredients=ingredient_lines(raw),
        instructions=instruction_steps(raw.get(INSTRUCTIONS_FIELD)),
        category=clean_field(raw.get(CATEGORY_FIELD)),
        area=clean_field(raw.get(AREA_FIELD)),
        video_url=clean_field(raw.get(VIDEO_FIELD)),
        prep_time=placeholder,
        cook_time=placeholder,
        servings=placeholder,
    )


def normalize_many(raws: Iterable[Dict[str, Any]], placeholder: str = DEFAULT_PLACEHOLDER) -> List[Recipe]:
    """
    Normalize a sequence of raw records, skipping records that are not objects or have no identifier.

    Args:
        raws: Raw records in API order
        placeholder: Quick-facts placeholder passed through to normalize()

    Returns:
        List of Recipe objects in input order.
    """
    recipes: List[Recipe] = []
    skipped = 0
    for raw in raws:
        try:
            recipes.append(normalize(raw, placeholder=placeholder))
        except InvalidRecordError as e:
            logger.warning("Skipping raw record: %s", e)
            skipped += 1
    if skipped:
        logger.info("Normalized %d records, skipped %d invalid", len(recipes), skipped)
    return recipes
