"""
Utility modules for the Streamlit frontend.

This package contains:
- state: Session state management for the per-session QueryController
"""
