"""Syntax tree model and tree-sitter helpers.

The parser mirrors the tree-sitter tree into plain ``SyntaxNode`` objects so
that literal values can be rewritten in place. Each node carries a
``NodeKind`` tag; eligibility for replacement is decided from the tag alone.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tree_sitter import Language, Node


class NodeKind(str, Enum):
    """Syntactic role of a mirrored node."""

    PLAIN_LITERAL = "plain_literal"  # "..." or '...' in expression position
    MODULE_SPECIFIER = "module_specifier"  # import/export/require/import() target
    TEMPLATE_QUASI = "template_quasi"  # static text of a `template`
    PROPERTY_KEY = "property_key"  # { "key": ... }, member and enum member names
    ENUM_INITIALIZER = "enum_initializer"  # enum E { A = "a" }
    TYPE_LITERAL = "type_literal"  # type T = "a"; declare module "m"
    COMMENT = "comment"
    OTHER = "other"


# Kinds whose nodes carry a decoded string value
STRING_KINDS = frozenset({
    NodeKind.PLAIN_LITERAL,
    NodeKind.MODULE_SPECIFIER,
    NodeKind.PROPERTY_KEY,
    NodeKind.ENUM_INITIALIZER,
    NodeKind.TYPE_LITERAL,
})


@dataclass
class SyntaxNode:
    """A node of the mirrored syntax tree.

    ``value`` is the decoded string for literal kinds and the raw text for
    template quasis; it is None for everything else. ``start_byte`` and
    ``end_byte`` index into the UTF-8 encoded source.
    """

    kind: NodeKind
    type: str  # tree-sitter node type
    start_byte: int
    end_byte: int
    value: str | None = None
    quote: str = '"'
    children: list["SyntaxNode"] = field(default_factory=list)
    replaced: bool = False

    def replace_value(self, value: str) -> None:
        """Overwrite the literal value; the code generator re-emits it."""
        if self.kind not in STRING_KINDS:
            raise TypeError(f"Cannot replace the value of a {self.kind.value} node")
        self.value = value
        self.replaced = True


@dataclass
class SyntaxTree:
    """A parsed source file: the encoded source plus the mirrored root node."""

    source: bytes
    root: SyntaxNode
    path: Path | None = None

    def text(self, node: SyntaxNode) -> str:
        """Return the original source text covered by a node."""
        return self.source[node.start_byte:node.end_byte].decode("utf-8")


def walk(root: SyntaxNode) -> Iterator[SyntaxNode]:
    """Yield nodes in pre-order, children left to right.

    Uses an explicit stack, so arbitrarily deep trees are fine.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


# =============================================================================
# Tree-sitter Helper Functions
# =============================================================================

# Lazy imports for tree-sitter language bindings
_LANGUAGES: dict[str, Language] = {}


def _get_language(name: str) -> Language | None:
    """Lazily load tree-sitter language bindings."""
    if name in _LANGUAGES:
        return _LANGUAGES[name]

    try:
        if name == "typescript":
            import tree_sitter_typescript as ts_typescript

            _LANGUAGES[name] = Language(ts_typescript.language_typescript())
        else:
            return None
    except ImportError:
        return None

    return _LANGUAGES.get(name)


def _get_child_by_field(node: Node, field_name: str) -> Node | None:
    """Get child by field name."""
    return node.child_by_field_name(field_name)


def _first_named_child(node: Node, skip: frozenset[str] = frozenset({"comment"})) -> Node | None:
    """Get the first named child whose type is not in ``skip``."""
    for child in node.named_children:
        if child.type not in skip:
            return child
    return None


def _find_first_error(node: Node) -> Node | None:
    """Find the first ERROR or MISSING node in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None
