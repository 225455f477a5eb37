"""Marker building: turn a resolved syntax tree into flat span annotations."""

from __future__ import annotations

import bisect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from sourcelink.errors import (
    DuplicateAnchorError,
    MalformedAnchorError,
    OverlappingMarkerError,
)
from sourcelink.interner import Interner
from sourcelink.links import ANCHOR_PREFIX, LinkResolver
from sourcelink.models import (
    ElementKind,
    Marker,
    Modifier,
    ResolvedNode,
    Role,
    Symbol,
    Token,
)
from sourcelink.positions import LineMap
from sourcelink.styles import classify

logger = logging.getLogger(__name__)

Classifier = Callable[[ElementKind, Iterable[Modifier], bool, str], str]


@dataclass
class BuildContext:
    """Everything accumulated while walking one source unit."""

    interner: Interner = field(default_factory=Interner)
    markers: list[Marker] = field(default_factory=list)


class MarkerBuilder:
    """Single-pass visitor emitting declaration and reference markers.

    Every emitted marker also registers its symbol with the context's
    interner, so tables always cover the symbols the markers mention.
    """

    def __init__(
        self,
        positions: LineMap,
        links: LinkResolver,
        *,
        classifier: Classifier = classify,
        context: BuildContext | None = None,
    ) -> None:
        self.positions = positions
        self.links = links
        self.classifier = classifier
        self.context = context if context is not None else BuildContext()
        self._starts: list[int] = []
        self._ends: list[int] = []
        self._anchors: set[str] = set()

    def build(self, tree: ResolvedNode) -> BuildContext:
        """Walk the tree in pre-order and return the populated context."""
        stack = [tree]
        while stack:
            node = stack.pop()
            self._visit(node)
            stack.extend(reversed(node.children))
        logger.debug(
            "built %d markers, %d types, %d callables",
            len(self.context.markers),
            len(self.context.interner.types),
            len(self.context.interner.callables),
        )
        return self.context

    def _visit(self, node: ResolvedNode) -> None:
        if node.role is None:
            return
        if node.symbol is None:
            logger.debug("unresolved %s at %d:%d", node.type, *node.start)
            return
        if node.role is Role.DECLARATION:
            self.add_decl(node, node.symbol, token=node.token)
        else:
            self.add_ref(node, node.symbol, token=node.token)

    def add_decl(
        self, node: ResolvedNode, symbol: Symbol, token: Token | None = None
    ) -> Marker | None:
        """Add a declaration marker for the node, or for its name token."""
        start, end = self._span(node, token)
        index = self._slot(start, end)
        if index is None:
            return None
        anchor = self._anchor_id(symbol)
        href = ANCHOR_PREFIX + anchor if anchor is not None else ""
        marker = Marker(
            start,
            end,
            href,
            self._style(symbol, Role.DECLARATION),
            anchor_id=anchor,
        )
        if anchor is not None:
            self._anchors.add(anchor)
        return self._insert(index, marker, symbol)

    def add_ref(
        self,
        node: ResolvedNode,
        symbol: Symbol,
        token: Token | None = None,
        title: str | None = None,
    ) -> Marker | None:
        """Add a reference marker for the node, or for the given token."""
        start, end = self._span(node, token)
        return self.add_ref_span(start, end, symbol, title=title)

    def add_ref_span(
        self, start: int, end: int, symbol: Symbol, title: str | None = None
    ) -> Marker | None:
        """Add a reference marker over explicit absolute offsets."""
        index = self._slot(start, end)
        if index is None:
            return None
        marker = Marker(
            start,
            end,
            self.links.href(symbol),
            self._style(symbol, Role.REFERENCE),
            title=title,
        )
        return self._insert(index, marker, symbol)

    def _span(self, node: ResolvedNode, token: Token | None) -> tuple[int, int]:
        if token is not None:
            return self.positions.token_span(token)
        return self.positions.span(node)

    def _style(self, symbol: Symbol, role: Role) -> str:
        return self.classifier(
            symbol.kind, symbol.modifiers, symbol.deprecated, role.value
        )

    def _anchor_id(self, symbol: Symbol) -> str | None:
        """Strip the anchor prefix from the symbol's declaration link.

        Raises:
            MalformedAnchorError: If the link is not an in-page anchor.
            DuplicateAnchorError: If the anchor was already declared.
        """
        href = self.links.href(symbol)
        if not href:
            return None
        if not href.startswith(ANCHOR_PREFIX):
            raise MalformedAnchorError(f"Computed ID for {symbol!r} is {href!r}")
        anchor = href[len(ANCHOR_PREFIX) :]
        if anchor in self._anchors:
            raise DuplicateAnchorError(f"Anchor {anchor!r} declared twice")
        return anchor

    def _slot(self, start: int, end: int) -> int | None:
        """Find where a new span goes, or None if it repeats one exactly.

        Raises:
            OverlappingMarkerError: If the span partially intersects an
                existing marker.
        """
        index = bisect.bisect_left(self._starts, start)
        if (
            index < len(self._starts)
            and self._starts[index] == start
            and self._ends[index] == end
        ):
            logger.debug("dropping marker at [%d, %d): span already marked", start, end)
            return None
        before_overlaps = index > 0 and self._ends[index - 1] > start
        after_overlaps = index < len(self._starts) and self._starts[index] < end
        if before_overlaps or after_overlaps:
            raise OverlappingMarkerError(
                f"marker [{start}, {end}) overlaps an existing marker"
            )
        return index

    def _insert(self, index: int, marker: Marker, symbol: Symbol) -> Marker:
        self.context.interner.collect(symbol)
        self._starts.insert(index, marker.start)
        self._ends.insert(index, marker.end)
        self.context.markers.append(marker)
        return marker
