"""Symbol interning: dense, insertion-ordered ids for types and callables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Generic, TypeVar

from sourcelink.errors import SymbolLookupError
from sourcelink.models import CallableSymbol, Symbol, TypeSymbol
from sourcelink.styles import style_class

S = TypeVar("S", TypeSymbol, CallableSymbol)


class SymbolTable(ABC, Generic[S]):
    """Append-only mapping from symbol identity to a zero-based id.

    Ids are assigned in first-registration order. Symbols are keyed by
    ``id()``; the table keeps a reference to every symbol so those keys stay
    valid for the table's lifetime.
    """

    def __init__(self) -> None:
        self._ids: dict[int, int] = {}
        self._symbols: list[S] = []

    def register(self, symbol: S) -> int:
        """Add a symbol if absent and return its id."""
        if symbol is None:
            raise ValueError("cannot register a missing symbol")
        existing = self._ids.get(id(symbol))
        if existing is not None:
            return existing
        new_id = len(self._symbols)
        self._ids[id(symbol)] = new_id
        self._symbols.append(symbol)
        return new_id

    def id_of(self, symbol: S) -> int:
        """Return the id of a registered symbol.

        Raises:
            SymbolLookupError: If the symbol was never registered.
        """
        found = self._ids.get(id(symbol))
        if found is None:
            raise SymbolLookupError(f"No such symbol: {symbol!r}")
        return found

    def serialize(self) -> list[list[int | str | list[int | str]]]:
        """Return the table's on-wire entries in id order."""
        return [self._entry(symbol) for symbol in self._symbols]

    @abstractmethod
    def _entry(self, symbol: S) -> list[int | str | list[int | str]]:
        """Encode one registered symbol as a table entry."""

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[S]:
        return iter(self._symbols)

    def __contains__(self, symbol: object) -> bool:
        return id(symbol) in self._ids


class TypeTable(SymbolTable[TypeSymbol]):
    """Table of nominal types; entries are ``[qualified_name, style]``."""

    def _entry(self, symbol: TypeSymbol) -> list[int | str | list[int | str]]:
        return [symbol.qualified_name, style_class(symbol)]


class CallableTable(SymbolTable[CallableSymbol]):
    """Table of constructors and methods.

    Entries are ``[owner_id, name, [param_id_or_text, ...], style]``.
    Registering a callable first registers its owner and every resolved
    parameter type in the companion type table.
    """

    def __init__(self, types: TypeTable) -> None:
        super().__init__()
        self._types = types

    def register(self, symbol: CallableSymbol) -> int:
        if symbol is None:
            raise ValueError("cannot register a missing symbol")
        if symbol not in self:
            self._types.register(symbol.owner)
            for param in symbol.parameters:
                if isinstance(param, TypeSymbol):
                    self._types.register(param)
        return super().register(symbol)

    def _entry(self, symbol: CallableSymbol) -> list[int | str | list[int | str]]:
        params: list[int | str] = [
            self._types.id_of(p) if isinstance(p, TypeSymbol) else p
            for p in symbol.parameters
        ]
        return [
            self._types.id_of(symbol.owner),
            symbol.display_name,
            params,
            style_class(symbol),
        ]


class Interner:
    """The pair of tables collected while walking one source unit."""

    def __init__(self) -> None:
        self.types = TypeTable()
        self.callables = CallableTable(self.types)

    def collect(self, symbol: Symbol) -> int | None:
        """Register a type or callable; other symbols are not interned.

        Returns:
            The symbol's id in its table, or None if it is not interned.
        """
        if isinstance(symbol, TypeSymbol):
            return self.types.register(symbol)
        if isinstance(symbol, CallableSymbol):
            return self.callables.register(symbol)
        if symbol is None:
            raise ValueError("cannot collect a missing symbol")
        return None
