"""Conversion of (line, column) points into absolute character offsets."""

from __future__ import annotations

import re

from sourcelink.models import ResolvedNode, Token

_NEWLINE = re.compile(r"\n")


class LineMap:
    """Position table for one source unit.

    Only the start offset of every line is kept, not the text itself. Lines
    are 1-based and columns are 0-based character counts.
    """

    def __init__(self, line_starts: list[int], length: int) -> None:
        if not line_starts or line_starts[0] != 0:
            raise ValueError("line starts must begin at offset 0")
        self._starts = line_starts
        self._length = length

    @classmethod
    def from_text(cls, text: str) -> LineMap:
        """Build a line map by scanning text for ``\\n`` terminators."""
        starts = [0]
        starts.extend(m.end() for m in _NEWLINE.finditer(text))
        return cls(starts, len(text))

    def offset(self, line: int, column: int) -> int:
        """Absolute character offset of a (line, column) point."""
        if not 1 <= line <= len(self._starts):
            raise ValueError(f"line {line} outside 1..{len(self._starts)}")
        if column < 0:
            raise ValueError(f"negative column {column}")
        position = self._starts[line - 1] + column
        if position > self._length:
            raise ValueError(f"point {line}:{column} is past the end of the unit")
        return position

    def span(self, node: ResolvedNode) -> tuple[int, int]:
        """Start and end offsets of a tree node."""
        return self.offset(*node.start), self.offset(*node.end)

    def token_span(self, token: Token) -> tuple[int, int]:
        """Start and end offsets of a token from its position and length."""
        start = self.offset(token.line, token.column)
        return start, start + len(token.text)
