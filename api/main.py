"""
FastAPI application for the Recipe Finder API.

This module defines the endpoints for the recipe finder backend:
- GET /health: Liveness check with effective configuration
- GET /recipes/search: Search recipes by name (empty query searches the default term)
- GET /recipes/{recipe_id}: Full details for a single recipe
- WS /ws/search: Live search session driven by a QueryController (debounced input,
  state snapshot pushed after every change)

Run the API with:
    uvicorn api.main:app --reload

Access API documentation at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

# Import config early to load .env file before any other code accesses environment variables
import api.config  # noqa: F401

import asyncio
import logging
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from api.config import SearchConfig, configure_logging, get_config_summary
from api.schemas import ClientMessage, HealthResponse, RecipeOut, SearchResponse
from recipe_finder.controller import (
    DETAILS_FAILED_MESSAGE,
    DETAILS_NOT_FOUND_MESSAGE,
    SEARCH_FAILED_MESSAGE,
    QueryController,
)
from recipe_finder.normalizer import InvalidRecordError, normalize, normalize_many
from recipe_finder.sources.base import BaseRecipeSource, RecipeNotFoundError, TransportError
from recipe_finder.sources.mealdb_source import MealDBSource

configure_logging()
logger = logging.getLogger(__name__)

# Track app start time for uptime calculation
_APP_START_TIME = time.time()

app = FastAPI(
    title="Recipe Finder API",
    description="Search TheMealDB recipes and fetch normalized recipe details",
    version="1.0.0",
    openapi_tags=[
        {"name": "recipes", "description": "Search recipes and look up recipe details."},
        {"name": "health", "description": "Health check and monitoring endpoints."},
    ],
)


def _get_source() -> BaseRecipeSource:
    """Create the recipe source. Resolved at call time so tests can patch MealDBSource."""
    return MealDBSource()


def _lookup_recipe(source: BaseRecipeSource, recipe_id: str) -> RecipeOut:
    """
    Look up and normalize one recipe.

    Raises:
        RecipeNotFoundError: If the source has no usable record for recipe_id.
        TransportError: If the source request fails.
    """
    raw = source.lookup_by_id(recipe_id)
    if raw is None:
        raise RecipeNotFoundError(recipe_id)
    try:
        recipe = normalize(raw, placeholder=SearchConfig.get_placeholder_text())
    except InvalidRecordError as e:
        raise RecipeNotFoundError(recipe_id) from e
    return RecipeOut.from_recipe(recipe)


@app.get("/health", response_model=HealthResponse, tags=["health"])
def health() -> HealthResponse:
    """
    Liveness check.

    Returns:
        HealthResponse with status "ok", uptime and the effective configuration.
    """
    return HealthResponse(
        status="ok",
        uptime_seconds=round(time.time() - _APP_START_TIME, 3),
        config=get_config_summary(),
    )


@app.get(
    "/recipes/search",
    response_model=SearchResponse,
    tags=["recipes"],
    summary="Search recipes by name",
    description="Searches TheMealDB by recipe name. An empty or missing query searches the "
                "configured default term. No matches is a 200 with an empty result list.",
)
def search_recipes(
    q: Optional[str] = Query(None, description="Search term (e.g., 'chicken', 'arrabiata')"),
) -> SearchResponse:
    """
    Search recipes by name.

    Raises:
        HTTPException 502: If TheMealDB cannot be reached or returns an error.

    Example:
        ```bash
        GET /recipes/search?q=arrabiata
        ```
    """
    term = q or SearchConfig.get_default_term()
    logger.info("Search request: q=%r term=%r", q, term)

    try:
        raws = _get_source().search_by_name(term)
    except TransportError as e:
        logger.error("Recipe search for %r failed: %s", term, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=SEARCH_FAILED_MESSAGE) from e

    recipes = normalize_many(raws, placeholder=SearchConfig.get_placeholder_text())
    return SearchResponse(query=term, results=[RecipeOut.from_recipe(r) for r in recipes])


@app.get(
    "/recipes/{recipe_id}",
    response_model=RecipeOut,
    tags=["recipes"],
    summary="Get recipe details",
)
def get_recipe(recipe_id: str) -> RecipeOut:
    """
    Get full details for a single recipe.

    Raises:
        HTTPException 404: If no recipe exists with this id.
        HTTPException 502: If TheMealDB cannot be reached or returns an error.
    """
    try:
        return _lookup_recipe(_get_source(), recipe_id)
    except RecipeNotFoundError as e:
        logger.info("Recipe %r not found", recipe_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=DETAILS_NOT_FOUND_MESSAGE) from e
    except TransportError as e:
        logger.error("Recipe lookup for %r failed: %s", recipe_id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=DETAILS_FAILED_MESSAGE) from e


async def _send_updates(websocket: WebSocket, updates: "asyncio.Queue[Dict[str, Any]]") -> None:
    """Forward queued state snapshots to the websocket client."""
    while True:
        snapshot = await updates.get()
        await websocket.send_json({"type": "state", "state": snapshot})


@app.websocket("/ws/search")
async def search_socket(websocket: WebSocket) -> None:
    """
    Live search session.

    Each connection owns one QueryController. On connect the default search runs.
    Client messages (see ClientMessage) drive the controller; every state change is
    pushed back as {"type": "state", "state": {...}}. Invalid messages get
    {"type": "error", "detail": "..."} and the session continues.
    """
    await websocket.accept()
    controller = QueryController(_get_source(), **SearchConfig.get_controller_options())
    updates: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    def push(state) -> None:
        updates.put_nowait(state.snapshot())

    controller.subscribe(push)
    sender = asyncio.create_task(_send_updates(websocket, updates))

    controller.start()
    try:
        while True:
            try:
                data = await websocket.receive_json()
            except ValueError:
                # Non-JSON text frame
                logger.warning("Non-JSON websocket message")
                await websocket.send_json({"type": "error", "detail": "Invalid message"})
                continue
            try:
                message = ClientMessage(**data)
            except (ValidationError, TypeError) as e:
                logger.warning("Invalid websocket message %r: %s", data, e)
                await websocket.send_json({"type": "error", "detail": "Invalid message"})
                continue

            if message.action == "query":
                controller.set_query(message.text)
            elif message.action == "select":
                if not message.id:
                    await websocket.send_json({"type": "error", "detail": "Missing recipe id"})
                    continue
                controller.request_recipe(message.id)
            else:
                controller.close_details()
    except WebSocketDisconnect:
        logger.info("Search websocket disconnected")
    finally:
        controller.unsubscribe(push)
        controller.cancel_pending()
        sender.cancel()
