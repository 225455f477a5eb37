"""Render Java sources as hyperlinked, symbol-annotated marker streams."""

__version__ = "0.1.0"
