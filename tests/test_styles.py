"""Tests for style class computation."""

from __future__ import annotations

import re

import pytest

from sourcelink.models import ElementKind, Modifier, TypeSymbol, VariableSymbol
from sourcelink.styles import classify, style_class

STYLE_GRAMMAR = re.compile(r"^(st )?(dp )?[a-z]{2}$")


class TestClassify:
    """Tests for classify."""

    def test_kind_code_only(self) -> None:
        assert classify(ElementKind.CLASS) == "cl"

    def test_static_and_deprecated(self) -> None:
        result = classify(ElementKind.METHOD, {Modifier.STATIC}, deprecated=True)
        assert result == "st dp me"

    def test_deprecated_without_static(self) -> None:
        assert classify(ElementKind.FIELD, {Modifier.FINAL}, True) == "dp fi"

    def test_non_static_modifiers_ignored(self) -> None:
        mods = {Modifier.PUBLIC, Modifier.FINAL, Modifier.ABSTRACT}
        assert classify(ElementKind.INTERFACE, mods) == "it"

    def test_seed_comes_first(self) -> None:
        result = classify(ElementKind.METHOD, {Modifier.STATIC}, True, seed="d")
        assert result == "d st dp me"

    @pytest.mark.parametrize("kind", list(ElementKind))
    @pytest.mark.parametrize("static", [False, True])
    @pytest.mark.parametrize("deprecated", [False, True])
    def test_matches_grammar(
        self, kind: ElementKind, static: bool, deprecated: bool
    ) -> None:
        mods = {Modifier.STATIC} if static else set()
        result = classify(kind, mods, deprecated)
        assert STYLE_GRAMMAR.match(result)
        assert not result.endswith(" ")

    def test_deterministic(self) -> None:
        args = (ElementKind.ENUM_CONSTANT, {Modifier.STATIC}, False)
        assert classify(*args) == classify(*args)


class TestStyleClass:
    """Tests for style_class on symbols."""

    def test_type_symbol(self) -> None:
        symbol = TypeSymbol("a.B", ElementKind.ENUM, deprecated=True)
        assert style_class(symbol) == "dp en"

    def test_variable_with_seed(self) -> None:
        symbol = VariableSymbol("x", ElementKind.LOCAL_VARIABLE)
        assert style_class(symbol, "r") == "r lv"
