"""Exceptions raised while rendering a single source unit."""

from __future__ import annotations


class SourceLinkError(Exception):
    """Base class for failures that abort the current unit only."""


class SymbolLookupError(SourceLinkError, LookupError):
    """A symbol was referenced before it was registered in its table."""


class MalformedAnchorError(SourceLinkError):
    """The link resolver returned a declaration link that is not an anchor."""


class DuplicateAnchorError(SourceLinkError):
    """Two declarations in one unit resolved to the same anchor id."""


class OverlappingMarkerError(SourceLinkError, ValueError):
    """A marker intersects a marker already emitted for the unit."""
