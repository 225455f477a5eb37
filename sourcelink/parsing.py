"""Tree-sitter front-end: parse Java source into a resolved syntax tree.

Binding is unit-local. Types and annotations resolve by simple name; method
calls, ``new`` expressions and field accesses resolve by name (and argument
count) against the members declared in the same file. Anything else is left
unresolved and produces no marker.
"""

from __future__ import annotations

import logging
from pathlib import Path

from tree_sitter import Node

from sourcelink.languages import TreeSitterLanguage
from sourcelink.links import UnitLinkResolver
from sourcelink.models import (
    CallableSymbol,
    CompilationUnit,
    ElementKind,
    Modifier,
    ResolvedNode,
    Role,
    Symbol,
    TypeSymbol,
    VariableSymbol,
)
from sourcelink.positions import LineMap

logger = logging.getLogger(__name__)

_TYPE_DECLARATIONS: dict[str, ElementKind] = {
    "class_declaration": ElementKind.CLASS,
    "record_declaration": ElementKind.CLASS,
    "interface_declaration": ElementKind.INTERFACE,
    "enum_declaration": ElementKind.ENUM,
    "annotation_type_declaration": ElementKind.ANNOTATION_TYPE,
}
_CALLABLE_DECLARATIONS: dict[str, ElementKind] = {
    "method_declaration": ElementKind.METHOD,
    "annotation_type_element_declaration": ElementKind.METHOD,
    "constructor_declaration": ElementKind.CONSTRUCTOR,
}
_FIELD_DECLARATIONS = frozenset({"field_declaration", "constant_declaration"})
_MEMBER_DECLARATIONS = (
    frozenset(_CALLABLE_DECLARATIONS) | _FIELD_DECLARATIONS | {"enum_constant"}
)
_ANONYMOUS_BODY_PARENTS = frozenset({"object_creation_expression", "enum_constant"})
_PARAMETER_KINDS: dict[str, ElementKind] = {
    "formal_parameter": ElementKind.PARAMETER,
    "catch_formal_parameter": ElementKind.EXCEPTION_PARAMETER,
}
_COMMENTS = frozenset({"line_comment", "block_comment"})
_MODIFIERS: dict[str, Modifier] = {m.value: m for m in Modifier}
_DEPRECATED_ANNOTATIONS = frozenset({"Deprecated", "java.lang.Deprecated"})
_STATIC = frozenset({Modifier.STATIC})
_ENUM_CONSTANT_MODIFIERS = frozenset(
    {Modifier.PUBLIC, Modifier.STATIC, Modifier.FINAL}
)

NodeKey = tuple[int, int, str]


def parse_unit(file_path: Path, language: TreeSitterLanguage) -> CompilationUnit:
    """Parse a source file into a compilation unit.

    Args:
        file_path: Path to the source file.
        language: The tree-sitter language configuration.

    Returns:
        The resolved tree with its position table and link resolver.

    Raises:
        FileNotFoundError: If file_path does not exist.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    return parse_source(file_path.read_bytes(), language, path=file_path)


def parse_source(
    source: bytes,
    language: TreeSitterLanguage,
    *,
    path: Path | None = None,
) -> CompilationUnit:
    """Parse source bytes into a compilation unit; see parse_unit."""
    text = _SourceText(source)
    tree = language.get_parser().parse(source)
    if tree.root_node.has_error:
        logger.debug("syntax errors in %s", path or "<source>")
    resolver = _UnitResolver(text)
    resolver.collect(tree.root_node)
    root = resolver.build(tree.root_node)
    return CompilationUnit(
        path=path,
        tree=root,
        positions=LineMap.from_text(text.text),
        links=UnitLinkResolver(resolver.declared),
    )


class _SourceText:
    """Converts tree-sitter byte columns into character columns."""

    def __init__(self, source: bytes) -> None:
        self.text = source.decode("utf-8")
        self._lines = source.split(b"\n")

    def point(self, ts_point: tuple[int, int]) -> tuple[int, int]:
        row, column = ts_point
        return row + 1, len(self._lines[row][:column].decode("utf-8"))


def _key(node: Node) -> NodeKey:
    return (node.start_byte, node.end_byte, node.type)


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _usable(node: Node | None) -> bool:
    """Whether a name node has real text (error recovery inserts empty ones)."""
    if node is None or node.is_missing:
        return False
    return node.end_byte > node.start_byte


def _modifiers_node(node: Node) -> Node | None:
    for child in node.children:
        if child.type == "modifiers":
            return child
    return None


def _modifiers(node: Node) -> frozenset[Modifier]:
    mods = _modifiers_node(node)
    if mods is None:
        return frozenset()
    return frozenset(
        _MODIFIERS[c.type] for c in mods.children if c.type in _MODIFIERS
    )


def _is_deprecated(node: Node) -> bool:
    """Check for ``@Deprecated`` or a Javadoc ``@deprecated`` tag."""
    mods = _modifiers_node(node)
    if mods is not None:
        for child in mods.named_children:
            if child.type not in ("marker_annotation", "annotation"):
                continue
            name = child.child_by_field_name("name")
            if name is not None and _text(name) in _DEPRECATED_ANNOTATIONS:
                return True
    doc = node.prev_named_sibling
    if doc is not None and doc.type == "block_comment":
        comment = _text(doc)
        return comment.startswith("/**") and "@deprecated" in comment
    return False


def _arity(node: Node) -> int:
    args = node.child_by_field_name("arguments")
    if args is None:
        return 0
    return sum(1 for c in args.named_children if c.type not in _COMMENTS)


def _type_text(erased: TypeSymbol | str) -> str:
    return erased.qualified_name if isinstance(erased, TypeSymbol) else erased


class _UnitResolver:
    """Collects the declarations of one unit, then binds its references."""

    def __init__(self, text: _SourceText) -> None:
        self._text = text
        self._package = ""
        self.declared: list[Symbol] = []
        self._decls: dict[NodeKey, Symbol] = {}
        self._names: dict[NodeKey, Symbol] = {}
        self._refs: dict[NodeKey, Symbol | None] = {}
        self._members: list[tuple[Node, TypeSymbol]] = []
        self._types: dict[str, list[TypeSymbol]] = {}
        self._methods: dict[str, list[CallableSymbol]] = {}
        self._constructors: dict[int, list[CallableSymbol]] = {}
        self._fields: dict[str, list[VariableSymbol]] = {}
        self._varargs: set[int] = set()

    # Declarations

    def collect(self, root: Node) -> None:
        """Declare every type, then every member, in source order."""
        stack: list[tuple[Node, TypeSymbol | None]] = [(root, None)]
        while stack:
            node, owner = stack.pop()
            if node.type == "package_declaration":
                self._package = self._package_name(node)
                continue
            child_owner = owner
            if node.type in _TYPE_DECLARATIONS:
                child_owner = self._declare_type(node, owner)
            elif node.type in _MEMBER_DECLARATIONS and owner is not None:
                self._members.append((node, owner))
            if node.type == "class_body" and node.parent is not None:
                if node.parent.type in _ANONYMOUS_BODY_PARENTS:
                    child_owner = None
            stack.extend((c, child_owner) for c in reversed(node.named_children))

        for node, owner in self._members:
            if node.type in _CALLABLE_DECLARATIONS:
                self._declare_callable(node, owner)
            elif node.type in _FIELD_DECLARATIONS:
                self._declare_fields(node, owner)
            else:
                self._declare_enum_constant(node, owner)

    def _package_name(self, node: Node) -> str:
        for child in node.named_children:
            if child.type in ("identifier", "scoped_identifier"):
                return _text(child)
        return ""

    def _declare(self, node: Node, symbol: Symbol) -> None:
        self._decls[_key(node)] = symbol
        self.declared.append(symbol)

    def _declare_type(self, node: Node, outer: TypeSymbol | None) -> TypeSymbol | None:
        name_node = node.child_by_field_name("name")
        if not _usable(name_node):
            return None
        name = _text(name_node)
        if outer is not None:
            qualified = f"{outer.qualified_name}.{name}"
        elif self._package:
            qualified = f"{self._package}.{name}"
        else:
            qualified = name
        kind = _TYPE_DECLARATIONS[node.type]
        modifiers = _modifiers(node)
        if outer is not None and (
            kind is not ElementKind.CLASS
            or node.type == "record_declaration"
            or outer.kind in (ElementKind.INTERFACE, ElementKind.ANNOTATION_TYPE)
        ):
            modifiers |= _STATIC
        symbol = TypeSymbol(qualified, kind, modifiers, _is_deprecated(node))
        self._declare(node, symbol)
        self._types.setdefault(name, []).append(symbol)
        return symbol

    def _declare_callable(self, node: Node, owner: TypeSymbol) -> None:
        name_node = node.child_by_field_name("name")
        if not _usable(name_node):
            return
        name = _text(name_node)
        params, varargs = self._parameters(node)
        kind = _CALLABLE_DECLARATIONS[node.type]
        symbol = CallableSymbol(
            owner, name, params, kind, _modifiers(node), _is_deprecated(node)
        )
        self._declare(node, symbol)
        if varargs:
            self._varargs.add(id(symbol))
        if kind is ElementKind.CONSTRUCTOR:
            self._constructors.setdefault(id(owner), []).append(symbol)
        else:
            self._methods.setdefault(name, []).append(symbol)

    def _declare_fields(self, node: Node, owner: TypeSymbol) -> None:
        modifiers = _modifiers(node)
        if node.type == "constant_declaration" or owner.kind in (
            ElementKind.INTERFACE,
            ElementKind.ANNOTATION_TYPE,
        ):
            modifiers |= _STATIC
        deprecated = _is_deprecated(node)
        for declarator in node.children_by_field_name("declarator"):
            name_node = declarator.child_by_field_name("name")
            if not _usable(name_node):
                continue
            name = _text(name_node)
            symbol = VariableSymbol(
                name, ElementKind.FIELD, owner, modifiers, deprecated
            )
            self._declare(declarator, symbol)
            self._fields.setdefault(name, []).append(symbol)

    def _declare_enum_constant(self, node: Node, owner: TypeSymbol) -> None:
        name_node = node.child_by_field_name("name")
        if not _usable(name_node):
            return
        name = _text(name_node)
        symbol = VariableSymbol(
            name,
            ElementKind.ENUM_CONSTANT,
            owner,
            _modifiers(node) | _ENUM_CONSTANT_MODIFIERS,
            _is_deprecated(node),
        )
        self._declare(node, symbol)
        self._fields.setdefault(name, []).append(symbol)

    def _parameters(self, node: Node) -> tuple[tuple[TypeSymbol | str, ...], bool]:
        """Erased parameter types, and whether the last one is varargs."""
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            return (), False
        params: list[TypeSymbol | str] = []
        varargs = False
        for child in params_node.named_children:
            if child.type == "formal_parameter":
                type_node = child.child_by_field_name("type")
                if type_node is None:
                    continue
                erased = self._erase(type_node)
                dims = child.child_by_field_name("dimensions")
                if dims is not None:
                    erased = _type_text(erased) + "[]" * _text(dims).count("[")
                params.append(erased)
            elif child.type == "spread_parameter":
                type_node = next(
                    (
                        c
                        for c in child.named_children
                        if c.type not in ("modifiers", "variable_declarator")
                    ),
                    None,
                )
                if type_node is None:
                    continue
                params.append(_type_text(self._erase(type_node)) + "[]")
                varargs = True
        return tuple(params), varargs

    def _erase(self, node: Node) -> TypeSymbol | str:
        """Erase generics from a type node; unit types resolve to symbols."""
        if node.type == "generic_type":
            for child in node.named_children:
                if child.type in ("type_identifier", "scoped_type_identifier"):
                    return self._erase(child)
        elif node.type == "annotated_type":
            for child in node.named_children:
                if child.type not in ("marker_annotation", "annotation"):
                    return self._erase(child)
        elif node.type == "type_identifier":
            return self._lookup_type(_text(node)) or _text(node)
        elif node.type == "scoped_type_identifier":
            # Outer.Inner: the innermost name decides; the rest is kept as text.
            parts: list[str] = []
            for child in node.named_children:
                if child.type == "type_identifier":
                    parts.append(_text(child))
                elif child.type in ("scoped_type_identifier", "generic_type"):
                    parts.append(_type_text(self._erase(child)))
            return self._lookup_type(parts[-1]) or ".".join(parts)
        elif node.type == "array_type":
            element = node.child_by_field_name("element")
            dims = node.child_by_field_name("dimensions")
            depth = _text(dims).count("[") if dims is not None else 1
            if element is not None:
                return _type_text(self._erase(element)) + "[]" * depth
        return _text(node)

    # Lookups

    def _lookup_type(self, name: str) -> TypeSymbol | None:
        candidates = self._types.get(name)
        return candidates[0] if candidates else None

    def _lookup_callable(
        self, candidates: list[CallableSymbol], arity: int
    ) -> CallableSymbol | None:
        """Pick the only candidate the argument count allows.

        Fixed-arity matches are tried before varargs ones. When several
        candidates fit equally well the call is left unresolved.
        """
        fixed = [
            c
            for c in candidates
            if id(c) not in self._varargs and len(c.parameters) == arity
        ]
        if fixed:
            return fixed[0] if len(fixed) == 1 else None
        spread = [
            c
            for c in candidates
            if id(c) in self._varargs and arity >= len(c.parameters) - 1
        ]
        return spread[0] if len(spread) == 1 else None

    def _lookup_field(self, name: str) -> VariableSymbol | None:
        candidates = self._fields.get(name)
        return candidates[0] if candidates else None

    # Tree building

    def build(self, root: Node) -> ResolvedNode:
        """Convert the named nodes of the tree, binding each occurrence."""
        top = self._resolve(root)
        stack = [(root, top)]
        while stack:
            node, resolved = stack.pop()
            for child in node.named_children:
                child_resolved = self._resolve(child)
                resolved.children.append(child_resolved)
                stack.append((child, child_resolved))
        return top

    def _resolve(self, node: Node) -> ResolvedNode:
        resolved = ResolvedNode(
            type=node.type,
            start=self._text.point(node.start_point),
            end=self._text.point(node.end_point),
        )
        key = _key(node)
        if key in self._names:
            resolved.role = Role.DECLARATION
            resolved.symbol = self._names.pop(key)
            return resolved
        if key in self._refs:
            resolved.role = Role.REFERENCE
            resolved.symbol = self._refs.pop(key)
            return resolved

        declared = self._decls.get(key)
        if declared is not None:
            # Markers go on the name so they stay in source order.
            self._names[_key(node.child_by_field_name("name"))] = declared
            return resolved

        handler = getattr(self, f"_resolve_{node.type}", None)
        if handler is not None:
            handler(node, resolved)
        return resolved

    def _declare_local(self, node: Node, kind: ElementKind, mods_from: Node) -> None:
        name_node = node.child_by_field_name("name")
        if not _usable(name_node):
            return
        self._names[_key(name_node)] = VariableSymbol(
            _text(name_node), kind, None, _modifiers(mods_from)
        )

    def _resolve_formal_parameter(self, node: Node, resolved: ResolvedNode) -> None:
        self._declare_local(node, _PARAMETER_KINDS[node.type], node)

    _resolve_catch_formal_parameter = _resolve_formal_parameter

    def _resolve_variable_declarator(self, node: Node, resolved: ResolvedNode) -> None:
        parent = node.parent
        if parent is None:
            return
        if parent.type == "spread_parameter":
            kind = ElementKind.PARAMETER
        elif parent.type in _FIELD_DECLARATIONS:
            # fields of anonymous classes are styled but never linked
            kind = ElementKind.FIELD
        else:
            kind = ElementKind.LOCAL_VARIABLE
        self._declare_local(node, kind, parent)

    def _resolve_type_identifier(self, node: Node, resolved: ResolvedNode) -> None:
        if not _usable(node):
            return
        name = _text(node)
        if node.parent is not None and node.parent.type == "type_parameter":
            resolved.role = Role.DECLARATION
            resolved.symbol = VariableSymbol(name, ElementKind.TYPE_PARAMETER)
            return
        resolved.role = Role.REFERENCE
        resolved.symbol = self._lookup_type(name)

    def _resolve_method_invocation(self, node: Node, resolved: ResolvedNode) -> None:
        name_node = node.child_by_field_name("name")
        if not _usable(name_node):
            return
        candidates = self._methods.get(_text(name_node), [])
        self._refs[_key(name_node)] = self._lookup_callable(candidates, _arity(node))

    def _resolve_object_creation_expression(
        self, node: Node, resolved: ResolvedNode
    ) -> None:
        type_node = node.child_by_field_name("type")
        if type_node is not None and type_node.type == "generic_type":
            type_node = next(
                (c for c in type_node.named_children if c.type == "type_identifier"),
                None,
            )
        if type_node is None or type_node.type != "type_identifier":
            return
        owner = self._lookup_type(_text(type_node))
        if owner is None:
            return
        constructor = self._lookup_callable(
            self._constructors.get(id(owner), []), _arity(node)
        )
        if constructor is not None:
            self._refs[_key(type_node)] = constructor

    def _resolve_field_access(self, node: Node, resolved: ResolvedNode) -> None:
        field_node = node.child_by_field_name("field")
        if _usable(field_node):
            self._refs[_key(field_node)] = self._lookup_field(_text(field_node))

    def _resolve_marker_annotation(self, node: Node, resolved: ResolvedNode) -> None:
        name_node = node.child_by_field_name("name")
        if _usable(name_node) and name_node.type == "identifier":
            self._refs[_key(name_node)] = self._lookup_type(_text(name_node))

    _resolve_annotation = _resolve_marker_annotation
