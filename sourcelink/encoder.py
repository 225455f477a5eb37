"""Marker stream encoder.

Writes a unit's symbol tables and markers as three call-like records::

    typeTable([...]);methodTable([...]);markers([...]);

Values use a small bracket grammar: arrays ``[a,b]``, double-quoted strings
with only ``"`` escaped, bare decimal integers for offsets and symbol ids.
"""

from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from sourcelink.markers import BuildContext

INDENT = "  "

TYPE_TABLE = "typeTable"
METHOD_TABLE = "methodTable"
MARKERS = "markers"


@dataclass(frozen=True)
class EncoderConfig:
    """Output settings, fixed for the whole run.

    Attributes:
        pretty: Indent two spaces per level with one element per line.
            Compact output (the default) inserts no whitespace at all.
    """

    pretty: bool = False


class StreamEncoder:
    """Streams records to a text sink, one table entry at a time."""

    def __init__(self, out: TextIO, config: EncoderConfig | None = None) -> None:
        self.out = out
        self.config = config if config is not None else EncoderConfig()

    def write_record(self, name: str, entries: Iterable[object]) -> None:
        """Write ``name([entry,...]);`` without materializing the entries."""
        pretty = self.config.pretty
        self.out.write(f"{name}([")
        empty = True
        for entry in entries:
            if not empty:
                self.out.write(",")
            if pretty:
                self.out.write("\n" + INDENT)
            self.out.write(encode_value(entry, pretty=pretty, level=1))
            empty = False
        if pretty and not empty:
            self.out.write("\n")
        self.out.write("]);")
        if pretty:
            self.out.write("\n")

    def write_unit(self, context: BuildContext) -> None:
        """Write the type table, the callable table, then the markers.

        Tables come first so every id a marker consumer sees is defined.
        """
        self.write_record(TYPE_TABLE, context.interner.types.serialize())
        self.write_record(METHOD_TABLE, context.interner.callables.serialize())
        self.write_record(MARKERS, (m.to_row() for m in context.markers))


def encode_unit(context: BuildContext, config: EncoderConfig | None = None) -> str:
    """Encode a unit into a string.

    Args:
        context: The populated build context of one unit.
        config: Output settings; compact when omitted.

    Returns:
        The encoded artifact.
    """
    buf = io.StringIO()
    StreamEncoder(buf, config).write_unit(context)
    return buf.getvalue()


def encode_value(value: object, *, pretty: bool = False, level: int = 0) -> str:
    """Encode a single value.

    Args:
        value: A list/tuple, str, int or None (written as ``""``).
        pretty: Whether to indent nested arrays.
        level: Nesting level of ``value`` itself, for pretty indentation.

    Returns:
        The encoded literal.

    Raises:
        TypeError: If the value has no representation in the grammar.
    """
    if value is None:
        return '""'
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, bool):
        raise TypeError("booleans are not part of the marker stream grammar")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (list, tuple)):
        return _encode_array(value, pretty, level)
    raise TypeError(f"cannot encode {type(value).__name__} value {value!r}")


def _encode_array(items: list | tuple, pretty: bool, level: int) -> str:
    if not items:
        return "[]"
    encoded = [encode_value(item, pretty=pretty, level=level + 1) for item in items]
    if not pretty:
        return f"[{','.join(encoded)}]"
    inner = INDENT * (level + 1)
    lines = f",\n{inner}".join(encoded)
    return f"[\n{inner}{lines}\n{INDENT * level}]"


def _quote(value: str) -> str:
    """Double-quote a string, escaping only embedded quotes."""
    escaped = value.replace('"', '\\"')
    return f'"{escaped}"'
