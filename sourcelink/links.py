"""Link resolution: which anchor or URL a symbol points to."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from sourcelink.models import (
    CallableSymbol,
    ElementKind,
    Symbol,
    TypeSymbol,
    VariableSymbol,
)

ANCHOR_PREFIX = "#"

_MEMBER_VARIABLES = frozenset({ElementKind.FIELD, ElementKind.ENUM_CONSTANT})


class LinkResolver(Protocol):
    """Maps a symbol to a link target.

    ``href`` returns ``""`` for no link, ``"#<id>"`` for an in-page anchor,
    or any other string for an external location. Implementations must be
    safe for concurrent reads.
    """

    def href(self, symbol: Symbol) -> str: ...


def anchor_for(symbol: Symbol) -> str | None:
    """Anchor id for a symbol, or None if it has no addressable location.

    Types use their qualified name, callables ``Owner.name(p1,p2)`` with
    erased parameters, fields and enum constants ``Owner.name``.
    """
    if isinstance(symbol, TypeSymbol):
        return symbol.qualified_name
    if isinstance(symbol, CallableSymbol):
        params = ",".join(
            p.qualified_name if isinstance(p, TypeSymbol) else p
            for p in symbol.parameters
        )
        return f"{symbol.owner.qualified_name}.{symbol.display_name}({params})"
    if isinstance(symbol, VariableSymbol):
        if symbol.kind in _MEMBER_VARIABLES and symbol.owner is not None:
            return f"{symbol.owner.qualified_name}.{symbol.name}"
    return None


class UnitLinkResolver:
    """Links symbols declared in the current unit to in-page anchors.

    When two declarations compute the same anchor, the first one keeps it and
    the later ones are left unlinked.
    """

    def __init__(self, declared: Iterable[Symbol] = ()) -> None:
        self._hrefs: dict[int, tuple[Symbol, str]] = {}
        taken: set[str] = set()
        for symbol in declared:
            anchor = anchor_for(symbol)
            if anchor is None or anchor in taken:
                continue
            taken.add(anchor)
            self._hrefs[id(symbol)] = (symbol, ANCHOR_PREFIX + anchor)

    def href(self, symbol: Symbol) -> str:
        found = self._hrefs.get(id(symbol))
        if found is None or found[0] is not symbol:
            return ""
        return found[1]
