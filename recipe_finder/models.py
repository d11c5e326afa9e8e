"""
Recipe and search state models for the recipe finder.

This module defines the canonical shapes used throughout the pipeline:
- Recipe: immutable, normalized recipe built by recipe_finder.normalizer from a raw
  TheMealDB record. Nothing else should construct it from raw API data.
- SearchStatus: idle / loading / error(message) status of the controller.
- SearchState: the single mutable state object owned by a QueryController and
  observed by the rendering layer (Streamlit page or websocket client).

# NOTE: SearchState.results is only replaced wholesale when a search completes.
    While a new request is loading (or after an error), renderers should read
    visible_results so stale results are never shown next to a spinner or an error box.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Recipe(BaseModel):
    """
    Normalized recipe as shown in the list and detail views.

    Ingredients are "<measure> <ingredient>" strings (or just "<ingredient>" when the
    source has no measure), in source slot order 1..20. Instructions are the non-empty,
    trimmed lines of the raw instruction text.
    """
    id: str = Field(..., min_length=1, description="External recipe identifier (TheMealDB idMeal)")
    name: str = Field("", description="Recipe name")
    image_url: str = Field("", description="Thumbnail URL, may point to a missing resource")
    ingredients: List[str] = Field(default_factory=list, description="Ingredient lines in slot order")
    instructions: List[str] = Field(default_factory=list, description="Instruction steps in source order")

    # Optional pass-through fields from the source record
    category: Optional[str] = Field(None, description="Recipe category (strCategory)")
    area: Optional[str] = Field(None, description="Cuisine / region (strArea)")
    video_url: Optional[str] = Field(None, description="Video link (strYoutube)")

    # Quick facts the source does not provide, filled with a configurable placeholder
    prep_time: str = Field("N/A", description="Preparation time")
    cook_time: str = Field("N/A", description="Cooking time")
    servings: str = Field("N/A", description="Number of servings")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "52772",
                "name": "Teriyaki Chicken Casserole",
                "image_url": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
                "ingredients": ["3/4 cup soy sauce", "1/2 cup water", "1/4 cup brown sugar"],
                "instructions": ["Preheat oven to 350° F.", "Spray a 9x13-inch baking pan with non-stick spray."],
                "category": "Chicken",
                "area": "Japanese",
                "video_url": "https://www.youtube.com/watch?v=4aZr5hZXP_s",
                "prep_time": "N/A",
                "cook_time": "N/A",
                "servings": "N/A",
            }
        },
    )


class SearchStatus(BaseModel):
    """Status of the most recent request: idle, loading, or error with a user-facing message."""
    kind: Literal["idle", "loading", "error"] = "idle"
    message: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def idle(cls) -> "SearchStatus":
        return cls(kind="idle")

    @classmethod
    def loading(cls) -> "SearchStatus":
        return cls(kind="loading")

    @classmethod
    def error(cls, message: str) -> "SearchStatus":
        return cls(kind="error", message=message)


class SearchState(BaseModel):
    """
    Process-wide UI state for one search session.

    Owned and mutated by a single QueryController; everything else only reads it.
    """
    query: str = Field("", description="Current raw user input")
    results: List[Recipe] = Field(default_factory=list, description="Recipes from the last successful search")
    selected: Optional[Recipe] = Field(None, description="Recipe shown in the detail view")
    status: SearchStatus = Field(default_factory=SearchStatus.idle, description="Idle, loading or error")

    model_config = ConfigDict(frozen=False)  # Mutated in place by the controller

    @property
    def is_loading(self) -> bool:
        return self.status.kind == "loading"

    @property
    def error_message(self) -> Optional[str]:
        """User-facing error message, or None when not in the error state."""
        if self.status.kind == "error":
            return self.status.message
        return None

    @property
    def visible_results(self) -> List[Recipe]:
        """Results to render: only shown when no request is loading and no error is displayed."""
        if self.status.kind != "idle":
            return []
        return self.results

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready copy of the state, as pushed to websocket clients."""
        data = self.model_dump(mode="json")
        data["visible_results"] = [r.model_dump(mode="json") for r in self.visible_results]
        return data
