"""
Standardized feedback utilities for consistent error, empty, and loading states.
"""

from contextlib import contextmanager

import streamlit as st


def show_error(message: str) -> None:
    """
    Display a standardized error message.

    Args:
        message: User-facing error message (e.g., "Recipe details not found.")
    """
    st.error(f"⚠️ {message}")


def show_empty_state(title: str) -> None:
    """Display a standardized empty state."""
    st.info(f"📭 **{title}**")


@contextmanager
def working_spinner(label: str = "Loading recipes..."):
    """
    Context manager wrapper for standardized loading spinners.

    Usage:
        with working_spinner("Loading recipe details..."):
            # Do work here
            pass
    """
    with st.spinner(label):
        yield
