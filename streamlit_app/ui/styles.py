"""
Global CSS Styling and HTML snippets for Recipe Finder.

This module provides load_global_styles() to inject consistent styling, plus small
HTML builders for recipe images and cards. Recipe images swap to a placeholder in
the browser when the thumbnail URL fails to load.
"""

from html import escape
from typing import List

import streamlit as st

# Number of ingredients shown on a result card before truncating
CARD_INGREDIENT_PREVIEW = 6


def load_global_styles() -> None:
    """
    Inject global CSS styles for the Recipe Finder app.

    This function:
    - Imports Google Fonts (Inter) for typography
    - Styles recipe cards (rounded, bordered, fixed image height)
    - Styles the quick facts box and instruction list in the detail view
    """
    css = """
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;600;700&display=swap');

        html, body, [class*="css"] {
            font-family: 'Inter', sans-serif !important;
        }

        h1, h2, h3 {
            font-weight: 700 !important;
        }

        .main .block-container {
            max-width: 1200px !important;
            padding-top: 1.5rem !important;
            padding-bottom: 2.5rem !important;
        }

        .stButton > button {
            border-radius: 50px !important;
            font-weight: 600 !important;
        }

        /* Recipe cards */
        .rf-card {
            border-radius: 16px !important;
            background-color: #ffffff !important;
            border: 1px solid rgba(79, 70, 229, 0.12) !important;
            overflow: hidden;
            margin-bottom: 0.5rem !important;
        }

        .rf-card img {
            width: 100%;
            height: 12rem;
            object-fit: cover;
            display: block;
        }

        .rf-card-body {
            padding: 0.75rem 1rem;
        }

        .rf-card-title {
            font-size: 1.1rem;
            font-weight: 700;
            margin: 0 0 0.35rem 0;
        }

        .rf-card-ingredients {
            color: #666;
            font-size: 0.85rem;
            line-height: 1.4;
            max-height: 3.6rem;
            overflow: hidden;
        }

        /* Detail view */
        .rf-detail-image {
            width: 100%;
            border-radius: 16px;
        }

        .rf-quick-facts {
            margin-top: 1rem;
            padding: 1rem 1.25rem;
            border-radius: 12px;
            background: #eef2ff;
        }

        .rf-quick-facts ul {
            list-style-type: none;
            padding-left: 0;
            margin: 0;
        }

        .rf-quick-fact-label {
            font-weight: 600;
            color: #4338ca;
        }

        .rf-pill {
            display: inline-block;
            padding: 0.2rem 0.7rem;
            border-radius: 999px;
            background: #e0e7ff;
            color: #4338ca;
            font-size: 0.8rem;
            font-weight: 600;
            margin-right: 0.35rem;
        }
    </style>
    """
    st.markdown(css, unsafe_allow_html=True)


def recipe_image_html(url: str, alt: str, placeholder_url: str, css_class: str = "") -> str:
    """
    Build an <img> tag that falls back to placeholder_url when url cannot be loaded.

    Args:
        url: Recipe thumbnail URL (may be empty or broken)
        alt: Alt text (recipe name)
        placeholder_url: Image shown instead of a missing thumbnail
        css_class: Optional CSS class for the tag
    """
    src = url or placeholder_url
    fallback = escape(placeholder_url, quote=True)
    return (
        f'<img src="{escape(src, quote=True)}" alt="{escape(alt, quote=True)}" class="{css_class}" '
        f"onerror=\"this.onerror=null;this.src='{fallback}';\" />"
    )


def ingredient_preview(ingredients: List[str], limit: int = CARD_INGREDIENT_PREVIEW) -> str:
    """Comma-joined ingredient preview for a result card, truncated after `limit` items."""
    if not ingredients:
        return "No ingredients listed."
    preview = ", ".join(ingredients[:limit])
    if len(ingredients) > limit:
        preview += ", …"
    return preview


def card_html(name: str, image_url: str, ingredients: List[str], placeholder_url: str) -> str:
    """HTML for the visual part of a recipe card (the button is rendered separately)."""
    return (
        '<div class="rf-card">'
        f"{recipe_image_html(image_url, name, placeholder_url)}"
        '<div class="rf-card-body">'
        f'<p class="rf-card-title">{escape(name)}</p>'
        f'<p class="rf-card-ingredients">{escape(ingredient_preview(ingredients))}</p>'
        "</div></div>"
    )
