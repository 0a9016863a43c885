"""
Convertify file conversion demo package.

This module provides a FastAPI application exposing the conversion and
download endpoints, and a Streamlit page driving the interactive flow.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
