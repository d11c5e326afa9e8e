"""
UI Styling and Components Module.

This module provides global CSS styling, HTML snippets for recipe cards and
feedback helpers for the Recipe Finder Streamlit app.
"""
