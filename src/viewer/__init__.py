"""
Viewport host for the scrolling landscape.

- FastAPI server exposing scroll, cursor and SVG endpoints
"""

from .api import create_app, main

__all__ = ["create_app", "main"]
