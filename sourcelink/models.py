"""Core data structures for sourcelink."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sourcelink.links import LinkResolver
    from sourcelink.positions import LineMap


class ElementKind(enum.Enum):
    """The kind of a program element; the value is its two-letter style code."""

    ANNOTATION_TYPE = "an"
    CLASS = "cl"
    CONSTRUCTOR = "co"
    ENUM = "en"
    ENUM_CONSTANT = "ec"
    EXCEPTION_PARAMETER = "ex"
    FIELD = "fi"
    INSTANCE_INIT = "ii"
    INTERFACE = "it"
    LOCAL_VARIABLE = "lv"
    METHOD = "me"
    PACKAGE = "pk"
    PARAMETER = "pa"
    STATIC_INIT = "si"
    TYPE_PARAMETER = "tp"


TYPE_KINDS: frozenset[ElementKind] = frozenset(
    {
        ElementKind.CLASS,
        ElementKind.INTERFACE,
        ElementKind.ENUM,
        ElementKind.ANNOTATION_TYPE,
    }
)
CALLABLE_KINDS: frozenset[ElementKind] = frozenset(
    {ElementKind.CONSTRUCTOR, ElementKind.METHOD}
)


class Modifier(enum.Enum):
    """Java declaration modifiers, valued by their source keyword."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    ABSTRACT = "abstract"
    STATIC = "static"
    FINAL = "final"
    TRANSIENT = "transient"
    VOLATILE = "volatile"
    SYNCHRONIZED = "synchronized"
    NATIVE = "native"
    STRICTFP = "strictfp"
    DEFAULT = "default"
    SEALED = "sealed"
    NON_SEALED = "non-sealed"


class Role(enum.Enum):
    """Whether an occurrence declares a symbol or refers to one."""

    DECLARATION = "d"
    REFERENCE = "r"


# Symbols compare by identity (eq=False): two distinct declarations with the
# same name are still two table entries.


@dataclass(eq=False)
class TypeSymbol:
    """A nominal type: class, interface, enum or annotation type."""

    qualified_name: str
    kind: ElementKind = ElementKind.CLASS
    modifiers: frozenset[Modifier] = frozenset()
    deprecated: bool = False

    def __post_init__(self) -> None:
        if self.kind not in TYPE_KINDS:
            raise ValueError(f"{self.kind.name} is not a type kind")

    @property
    def name(self) -> str:
        """The simple (unqualified) name."""
        return self.qualified_name.rpartition(".")[2]

    def __repr__(self) -> str:
        return f"TypeSymbol({self.qualified_name!r})"


@dataclass(eq=False)
class CallableSymbol:
    """A constructor or method with its erased parameter types."""

    owner: TypeSymbol
    name: str
    parameters: tuple[TypeSymbol | str, ...] = ()
    kind: ElementKind = ElementKind.METHOD
    modifiers: frozenset[Modifier] = frozenset()
    deprecated: bool = False

    def __post_init__(self) -> None:
        if self.kind not in CALLABLE_KINDS:
            raise ValueError(f"{self.kind.name} is not a callable kind")
        if self.owner is None:
            raise ValueError(f"callable {self.name!r} has no owner type")

    @property
    def display_name(self) -> str:
        """Name as written in tables: constructors take the owner's name."""
        if self.kind is ElementKind.CONSTRUCTOR:
            return self.owner.name
        return self.name

    def __repr__(self) -> str:
        return f"CallableSymbol({self.owner.qualified_name}.{self.display_name})"


@dataclass(eq=False)
class VariableSymbol:
    """A field, enum constant, parameter, local or type parameter."""

    name: str
    kind: ElementKind
    owner: TypeSymbol | None = None
    modifiers: frozenset[Modifier] = frozenset()
    deprecated: bool = False

    def __post_init__(self) -> None:
        if self.kind in TYPE_KINDS or self.kind in CALLABLE_KINDS:
            raise ValueError(f"{self.kind.name} is not a variable kind")


Symbol = TypeSymbol | CallableSymbol | VariableSymbol


@dataclass(frozen=True)
class Marker:
    """One decorated span of source text, in absolute character offsets."""

    start: int
    end: int
    href: str
    style_class: str
    anchor_id: str | None = None
    title: str | None = None

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"marker starts at negative offset {self.start}")
        if self.start >= self.end:
            raise ValueError(f"empty marker span [{self.start}, {self.end})")

    def to_row(self) -> list[int | str | None]:
        """The fixed-arity row written to the marker stream."""
        return [
            self.start,
            self.end,
            self.href,
            self.style_class,
            self.anchor_id,
            self.title,
        ]


@dataclass(frozen=True)
class Token:
    """A name token addressed by line, column and text length."""

    line: int
    column: int
    text: str


@dataclass(eq=False)
class ResolvedNode:
    """A syntax tree node with its symbol binding, as produced by a front-end.

    Points are ``(line, column)`` pairs: 1-based lines, 0-based character
    columns. A node with ``role`` set but no ``symbol`` is an occurrence the
    front-end could not bind.
    """

    type: str
    start: tuple[int, int]
    end: tuple[int, int]
    children: list[ResolvedNode] = field(default_factory=list)
    symbol: Symbol | None = None
    role: Role | None = None
    token: Token | None = None


@dataclass
class CompilationUnit:
    """One parsed source file, ready for marker building."""

    path: Path | None
    tree: ResolvedNode
    positions: LineMap
    links: LinkResolver


@dataclass
class RenderedUnit:
    """The encoded marker artifact for one source file."""

    path: Path
    language: str
    artifact: str
