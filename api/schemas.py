"""
Pydantic schemas for FastAPI request and response models.

The schemas include:
- RecipeOut: a normalized recipe as returned by the REST endpoints
- SearchResponse: the term that was actually searched plus its results
- HealthResponse: liveness info and effective configuration
- ClientMessage: messages accepted on the /ws/search websocket

# NOTE: RecipeOut mirrors recipe_finder.models.Recipe field for field. Build it with
    RecipeOut.from_recipe() rather than by hand so the two cannot drift.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from recipe_finder.models import Recipe


class RecipeOut(BaseModel):
    """Normalized recipe returned to clients."""
    id: str = Field(..., description="TheMealDB recipe identifier")
    name: str = Field(..., description="Recipe name")
    image_url: str = Field(..., description="Thumbnail URL (clients should fall back to a placeholder)")
    ingredients: List[str] = Field(default_factory=list, description="'<measure> <ingredient>' lines")
    instructions: List[str] = Field(default_factory=list, description="Instruction steps")
    category: Optional[str] = Field(None, description="Recipe category")
    area: Optional[str] = Field(None, description="Cuisine / region")
    video_url: Optional[str] = Field(None, description="Video link")
    prep_time: str = Field(..., description="Preparation time (placeholder when unknown)")
    cook_time: str = Field(..., description="Cooking time (placeholder when unknown)")
    servings: str = Field(..., description="Servings (placeholder when unknown)")

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeOut":
        return cls(**recipe.model_dump())


class SearchResponse(BaseModel):
    """Response model for the recipe search endpoint."""
    query: str = Field(..., description="Term that was searched (default term when the request had none)")
    results: List[RecipeOut] = Field(default_factory=list, description="Matching recipes, possibly empty")


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Always 'ok' when the API is up")
    uptime_seconds: float = Field(..., ge=0, description="Seconds since the API started")
    config: Dict[str, Any] = Field(default_factory=dict, description="Effective configuration values")


class ClientMessage(BaseModel):
    """
    Message sent by a websocket client.

    - {"action": "query", "text": "..."}: user edited the search box
    - {"action": "select", "id": "..."}: user opened a recipe
    - {"action": "close"}: user closed the detail view
    """
    action: Literal["query", "select", "close"]
    text: str = ""
    id: Optional[str] = None
