"""
Offline export of scrolling landscape frames.
"""

from .scroll_export import ScrollExporter, main

__all__ = ["ScrollExporter", "main"]
