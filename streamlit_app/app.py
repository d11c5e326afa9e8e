"""
Recipe Finder - Streamlit Frontend Main Entry Point.

Single-page app: a search box, a grid of recipe cards, and a detail view for the
selected recipe. All data flows through the session's QueryController (see
utils/state.py); this module only renders controller.state.

Run with:
    streamlit run streamlit_app/app.py
"""

import sys
from pathlib import Path

# Ensure the streamlit_app directory is in the Python path
# This allows imports to work regardless of how the app is run
streamlit_app_dir = Path(__file__).parent
if str(streamlit_app_dir) not in sys.path:
    sys.path.insert(0, str(streamlit_app_dir))

# Add project root to path so we can import api.config and recipe_finder
project_root = streamlit_app_dir.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Import config early to load .env file before any other code accesses environment variables
import api.config  # noqa: F401

from html import escape

import streamlit as st

from api.config import SearchConfig, configure_logging
from recipe_finder.models import Recipe, SearchState
from ui.feedback import show_empty_state, show_error, working_spinner
from ui.styles import card_html, load_global_styles, recipe_image_html
from utils.state import (
    QUERY_INPUT_KEY,
    SELECT_ACTION,
    close_recipe,
    init_controller,
    on_query_change,
    open_recipe,
    pop_pending_action,
    run_action,
)

configure_logging()

# Cards per row in the results grid
GRID_COLUMNS = 3

# Page configuration - must be called before any other Streamlit commands
st.set_page_config(
    page_title="Recipe Finder",
    page_icon="🍽️",
    layout="wide",
)

load_global_styles()


def render_header() -> None:
    title_col, search_col = st.columns([1, 2])
    with title_col:
        st.markdown("# 🍽️ Recipe Finder")
    with search_col:
        st.text_input(
            "Search recipes",
            key=QUERY_INPUT_KEY,
            placeholder="Search recipes or ingredients...",
            on_change=on_query_change,
            label_visibility="collapsed",
        )


def render_results(state: SearchState, placeholder_url: str) -> None:
    """Results grid, or the empty state when the last search matched nothing."""
    results = state.visible_results
    if not results:
        query = state.query or SearchConfig.get_default_term()
        show_empty_state(f'No recipes found for "{query}". Try a different search!')
        return

    for row_start in range(0, len(results), GRID_COLUMNS):
        columns = st.columns(GRID_COLUMNS)
        for column, recipe in zip(columns, results[row_start:row_start + GRID_COLUMNS]):
            with column:
                st.markdown(
                    card_html(recipe.name, recipe.image_url, recipe.ingredients, placeholder_url),
                    unsafe_allow_html=True,
                )
                st.button(
                    "View Recipe ›",
                    key=f"view_{recipe.id}",
                    on_click=open_recipe,
                    args=(recipe.id,),
                    use_container_width=True,
                )


def render_details(recipe: Recipe, placeholder_url: str) -> None:
    """Detail view: image and quick facts on the left, ingredients and steps on the right."""
    title_col, close_col = st.columns([5, 1])
    with title_col:
        st.markdown(f"## {recipe.name}")
        pills = [p for p in (recipe.category, recipe.area) if p]
        if pills:
            st.markdown(
                "".join(f'<span class="rf-pill">{escape(p)}</span>' for p in pills),
                unsafe_allow_html=True,
            )
    with close_col:
        st.button("✕ Close", key="close_details", on_click=close_recipe, use_container_width=True)

    image_col, content_col = st.columns([2, 3])
    with image_col:
        st.markdown(
            recipe_image_html(recipe.image_url, recipe.name, placeholder_url, css_class="rf-detail-image"),
            unsafe_allow_html=True,
        )
        st.markdown(
            '<div class="rf-quick-facts"><h4>Quick Facts</h4><ul>'
            f'<li><span class="rf-quick-fact-label">Prep Time:</span> {escape(recipe.prep_time)}</li>'
            f'<li><span class="rf-quick-fact-label">Cook Time:</span> {escape(recipe.cook_time)}</li>'
            f'<li><span class="rf-quick-fact-label">Servings:</span> {escape(recipe.servings)}</li>'
            "</ul></div>",
            unsafe_allow_html=True,
        )
        if recipe.video_url:
            st.link_button("▶ Watch video", recipe.video_url, use_container_width=True)

    with content_col:
        st.markdown("### ❤️ Ingredients")
        if recipe.ingredients:
            st.markdown("\n".join(f"- {line}" for line in recipe.ingredients))
        else:
            st.markdown("- No ingredients listed.")

        st.markdown("### 🍴 Instructions")
        if recipe.instructions:
            st.markdown("\n".join(f"{i}. {step}" for i, step in enumerate(recipe.instructions, start=1)))
        else:
            st.markdown("1. No instructions available.")


render_header()

with working_spinner("Loading recipes..."):
    controller = init_controller()

action = pop_pending_action()
if action is not None:
    label = "Loading recipe details..." if action[0] == SELECT_ACTION else "Loading recipes..."
    with working_spinner(label):
        run_action(controller, action)

state = controller.state
placeholder_image = SearchConfig.get_placeholder_image()

if state.error_message:
    show_error(state.error_message)
    st.button("Back to results", key="dismiss_error", on_click=close_recipe)
elif state.selected is not None:
    render_details(state.selected, placeholder_image)
else:
    render_results(state, placeholder_image)
