"""
Search State Management Module.

This module wraps Streamlit's session_state to hold one QueryController per browser
session. The controller owns the SearchState (query, results, selected recipe, status);
pages only read controller.state and call the helpers below to change it.

Streamlit reruns the whole script on every interaction and no event loop survives
between reruns, so the UI uses submit_query() (commit on Enter) instead of the
debounced set_query(). Widget callbacks only record a pending action; the page runs
it with run_action() in the script body, under a loading spinner.

# NOTE: This module uses session_state, so the state persists only for the current
    Streamlit session. Refreshing the page starts over with the default search.
"""

import asyncio
import logging
from typing import Optional, Tuple

import streamlit as st

from api.config import SearchConfig
from recipe_finder.controller import QueryController
from recipe_finder.sources.mealdb_source import MealDBSource

logger = logging.getLogger(__name__)

# Session state keys
CONTROLLER_KEY = "recipe_controller"
QUERY_INPUT_KEY = "recipe_query_input"
PENDING_ACTION_KEY = "recipe_pending_action"

# Pending action kinds
SEARCH_ACTION = "search"
SELECT_ACTION = "select"

PendingAction = Tuple[str, str]


def init_controller() -> QueryController:
    """
    Ensure a QueryController exists in session state.

    The first call in a session creates the controller and runs the initial
    default-term search (the on-mount load).

    Returns:
        The session's QueryController.
    """
    if CONTROLLER_KEY not in st.session_state:
        controller = QueryController(MealDBSource(), **SearchConfig.get_controller_options())
        st.session_state[CONTROLLER_KEY] = controller
        logger.info("New session, loading default search %r", controller.default_term)
        asyncio.run(controller.search(controller.default_term))
    return st.session_state[CONTROLLER_KEY]


def on_query_change() -> None:
    """Widget callback: queue a search for the text currently in the search box."""
    st.session_state[PENDING_ACTION_KEY] = (SEARCH_ACTION, st.session_state.get(QUERY_INPUT_KEY, ""))


def open_recipe(recipe_id: str) -> None:
    """Widget callback: queue a detail lookup for a recipe card."""
    st.session_state[PENDING_ACTION_KEY] = (SELECT_ACTION, recipe_id)


def pop_pending_action() -> Optional[PendingAction]:
    """Take the action queued by a widget callback, if any."""
    return st.session_state.pop(PENDING_ACTION_KEY, None)


def run_action(controller: QueryController, action: PendingAction) -> None:
    """
    Run a queued action to completion on a fresh event loop.

    Args:
        controller: The session's QueryController
        action: (SEARCH_ACTION, query text) or (SELECT_ACTION, recipe id)
    """
    kind, value = action
    if kind == SEARCH_ACTION:
        asyncio.run(controller.submit_query(value))
    elif kind == SELECT_ACTION:
        asyncio.run(controller.select_recipe(value))
    else:
        raise ValueError(f"Unknown action: {kind!r}")


def close_recipe() -> None:
    """Widget callback: leave the detail view (also dismisses an error)."""
    init_controller().close_details()
