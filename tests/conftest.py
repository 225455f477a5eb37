"""Shared test fixtures for sourcelink."""

from __future__ import annotations

from pathlib import Path

import pytest

from sourcelink.links import UnitLinkResolver
from sourcelink.models import (
    CallableSymbol,
    CompilationUnit,
    ElementKind,
    Modifier,
    ResolvedNode,
    Role,
    Symbol,
    Token,
    TypeSymbol,
)
from sourcelink.positions import LineMap

# Offsets: "A" is [6, 7), the declared "m" is [24, 25), the called "m" is
# [37, 38). The unresolved "x" call sits at [50, 51).
EXAMPLE_SOURCE = "class A {\n  static void m() {}\n  { a.m(); }\n  { b.x(); }\n}\n"


def node(
    type_: str,
    start: tuple[int, int],
    end: tuple[int, int],
    *children: ResolvedNode,
    symbol: Symbol | None = None,
    role: Role | None = None,
    token: Token | None = None,
) -> ResolvedNode:
    """Build a ResolvedNode tersely."""
    return ResolvedNode(
        type=type_,
        start=start,
        end=end,
        children=list(children),
        symbol=symbol,
        role=role,
        token=token,
    )


class StaticLinks:
    """Link resolver backed by a plain identity map."""

    def __init__(self, hrefs: dict[int, str] | None = None) -> None:
        self.hrefs = hrefs or {}

    def href(self, symbol: Symbol) -> str:
        return self.hrefs.get(id(symbol), "")


@pytest.fixture()
def type_a() -> TypeSymbol:
    return TypeSymbol("A", ElementKind.CLASS)


@pytest.fixture()
def method_m(type_a: TypeSymbol) -> CallableSymbol:
    """A static, deprecated, parameterless method of A."""
    return CallableSymbol(
        type_a,
        "m",
        (),
        ElementKind.METHOD,
        frozenset({Modifier.STATIC}),
        deprecated=True,
    )


@pytest.fixture()
def example_unit(type_a: TypeSymbol, method_m: CallableSymbol) -> CompilationUnit:
    """Class A declaring static deprecated m(), called once as a.m()."""
    tree = node(
        "program",
        (1, 0),
        (6, 0),
        node(
            "class_declaration",
            (1, 0),
            (5, 1),
            node(
                "class_body",
                (1, 8),
                (5, 1),
                node(
                    "method_declaration",
                    (2, 2),
                    (2, 20),
                    symbol=method_m,
                    role=Role.DECLARATION,
                    token=Token(2, 14, "m"),
                ),
                node(
                    "block",
                    (3, 2),
                    (3, 12),
                    node(
                        "method_invocation",
                        (3, 4),
                        (3, 9),
                        symbol=method_m,
                        role=Role.REFERENCE,
                        token=Token(3, 6, "m"),
                    ),
                ),
                node(
                    "block",
                    (4, 2),
                    (4, 12),
                    node(
                        "method_invocation",
                        (4, 4),
                        (4, 9),
                        role=Role.REFERENCE,
                        token=Token(4, 6, "x"),
                    ),
                ),
            ),
            symbol=type_a,
            role=Role.DECLARATION,
            token=Token(1, 6, "A"),
        ),
    )
    return CompilationUnit(
        path=None,
        tree=tree,
        positions=LineMap.from_text(EXAMPLE_SOURCE),
        links=UnitLinkResolver([type_a, method_m]),
    )


@pytest.fixture()
def sample_java_file(tmp_path: Path) -> Path:
    """Create a Java file with a constructor, fields and local calls."""
    code = tmp_path / "Greeter.java"
    code.write_text(
        """\
package demo;

public class Greeter {
    private String name;

    public Greeter(String name) {
        this.name = name;
    }

    @Deprecated
    public static Greeter create(String name) {
        return new Greeter(name);
    }

    public String greet() {
        return helper(name);
    }

    private String helper(String who) {
        return "Hello, " + who;
    }
}
""",
        encoding="utf-8",
    )
    return code


@pytest.fixture()
def sample_repo(tmp_path: Path) -> Path:
    """Create a small Java source tree with three units."""
    pkg = tmp_path / "src" / "shop"
    pkg.mkdir(parents=True)
    (pkg / "Item.java").write_text(
        """\
package shop;

public class Item {
    private final int price;

    public Item(int price) {
        this.price = price;
    }

    public int price() {
        return this.price;
    }
}
""",
        encoding="utf-8",
    )
    (pkg / "Cart.java").write_text(
        """\
package shop;

import java.util.ArrayList;
import java.util.List;

public class Cart {
    private final List<Item> items = new ArrayList<>();

    public void add(Item item) {
        items.add(item);
    }

    public int total() {
        int sum = 0;
        for (Item item : items) {
            sum += item.price();
        }
        return sum;
    }
}
""",
        encoding="utf-8",
    )
    (pkg / "Status.java").write_text(
        """\
package shop;

public enum Status {
    OPEN,
    CLOSED;

    public static Status parse(String value) {
        return valueOf(value);
    }
}
""",
        encoding="utf-8",
    )
    return tmp_path
