"""Style class computation for program elements."""

from __future__ import annotations

from collections.abc import Iterable

from sourcelink.models import ElementKind, Modifier, Symbol

STATIC = "st"
DEPRECATED = "dp"


def classify(
    kind: ElementKind,
    modifiers: Iterable[Modifier] = (),
    deprecated: bool = False,
    seed: str = "",
) -> str:
    """Compose the style class for an element.

    Args:
        kind: The element kind; contributes the trailing two-letter code.
        modifiers: The element's modifier set. Only ``static`` is rendered.
        deprecated: Whether the element is deprecated.
        seed: Optional leading token, e.g. ``"d"`` for declarations.

    Returns:
        Space-joined tokens such as ``"st dp me"`` or ``"d cl"``.
    """
    parts: list[str] = [seed] if seed else []
    if Modifier.STATIC in modifiers:
        parts.append(STATIC)
    if deprecated:
        parts.append(DEPRECATED)
    parts.append(kind.value)
    return " ".join(parts)


def style_class(symbol: Symbol, seed: str = "") -> str:
    """Style class for a symbol; see classify."""
    return classify(symbol.kind, symbol.modifiers, symbol.deprecated, seed)
