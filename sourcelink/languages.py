"""Registry of the grammars the front-end can parse."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tree_sitter_language_pack import get_language, get_parser

if TYPE_CHECKING:
    from tree_sitter import Language, Parser


@dataclass(frozen=True)
class TreeSitterLanguage:
    """A tree-sitter-language-pack grammar and the file suffixes it owns."""

    name: str
    extensions: tuple[str, ...]

    def get_language(self) -> Language:
        return get_language(self.name)

    def get_parser(self) -> Parser:
        """Return the process-wide parser for this grammar."""
        return _parser_for(self.name)


@functools.cache
def _parser_for(name: str) -> Parser:
    return get_parser(name)


JAVA = TreeSitterLanguage(name="java", extensions=(".java",))

LANGUAGES: dict[str, TreeSitterLanguage] = {JAVA.name: JAVA}

EXTENSION_MAP: dict[str, str] = {
    ext: lang.name for lang in LANGUAGES.values() for ext in lang.extensions
}


def language_for_extension(ext: str) -> TreeSitterLanguage | None:
    """Return the language owning a suffix such as ``".java"``, if any.

    Suffixes are matched case-sensitively and must include the dot.
    """
    name = EXTENSION_MAP.get(ext)
    return LANGUAGES[name] if name is not None else None
