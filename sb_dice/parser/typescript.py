"""TypeScript parsing on top of tree-sitter-typescript.

Parses source text, rejects trees with syntax errors, classifies every
``string`` node by its syntactic role and mirrors the result into a
``SyntaxTree``. Also holds the string literal codec (decoding escapes into
the logical value and re-encoding a value as a literal).
"""

import re
from pathlib import Path

from tree_sitter import Node, Parser

from sb_dice.errors import GrammarError, ParseError
from sb_dice.logging import logger
from sb_dice.parser.base import (
    NodeKind,
    SyntaxNode,
    SyntaxTree,
    _find_first_error,
    _first_named_child,
    _get_child_by_field,
    _get_language,
)

TYPESCRIPT_EXTENSION = ".ts"

# Statements whose `source` field names a module
_MODULE_SOURCE_PARENTS = frozenset({"import_statement", "export_statement"})

# Calls whose first argument names a module: require("m"), import("m")
_MODULE_CALLEES = frozenset({b"require", b"import"})

# Parent type -> field holding a property/member name
_KEY_FIELDS: dict[str, str] = {
    "pair": "key",
    "pair_pattern": "key",
    "public_field_definition": "name",
    "property_signature": "name",
    "method_definition": "name",
    "method_signature": "name",
    "abstract_method_signature": "name",
    "enum_assignment": "name",
}

# import { "a" as b } / export { a as "b" }: names, never values
_SPECIFIER_PARENTS = frozenset({
    "import_specifier",
    "export_specifier",
    "namespace_export",
    "namespace_import",
})

_AMBIENT_MODULE_PARENTS = frozenset({"module", "internal_module"})

_TEMPLATE_TYPES = frozenset({"template_string", "template_literal_type"})
_QUASI_TYPES = frozenset({"string_fragment", "escape_sequence"})
_COMMENT_TYPES = frozenset({"comment", "html_comment"})


# =============================================================================
# String literal codec
# =============================================================================

_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-3][0-7]{0,2}|[4-7][0-7]?|\r\n|[\s\S])"
)
_SURROGATE_PAIR_RE = re.compile("[\ud800-\udbff][\udc00-\udfff]")
_LINE_CONTINUATIONS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})
_SIMPLE_ESCAPES = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}
_SIMPLE_ENCODINGS = {v: f"\\{k}" for k, v in _SIMPLE_ESCAPES.items()}


def _decode_escape(match: re.Match[str]) -> str:
    seq = match.group(1)
    if seq in _LINE_CONTINUATIONS:
        return ""
    if seq in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[seq]
    head = seq[0]
    if head == "u" and len(seq) > 1:
        digits = seq[2:-1] if seq[1] == "{" else seq[1:]
        code_point = int(digits, 16)
        if code_point > 0x10FFFF:
            raise ParseError(f"Invalid unicode escape \\{seq}")
        return chr(code_point)
    if head == "x" and len(seq) == 3:
        return chr(int(seq[1:], 16))
    if head in "xu":
        raise ParseError(f"Invalid escape sequence \\{seq}")
    if head in "01234567":
        return chr(int(seq, 8))
    return seq


def _join_surrogate_pair(match: re.Match[str]) -> str:
    high, low = match.group(0)
    return chr(0x10000 + ((ord(high) - 0xD800) << 10) + (ord(low) - 0xDC00))


def decode_string_literal(body: str) -> str:
    """Decode the text between the quotes of a string literal.

    Args:
        body: Source spelling without the surrounding quotes.

    Returns:
        The logical string value. Escaped UTF-16 surrogate pairs are joined
        into one code point; unpaired surrogates are kept as they are.

    Raises:
        ParseError: For a malformed hex or unicode escape.
    """
    value = _ESCAPE_RE.sub(_decode_escape, body)
    return _SURROGATE_PAIR_RE.sub(_join_surrogate_pair, value)


def encode_string_literal(value: str, quote: str = '"') -> str:
    """Spell a string value as a TypeScript string literal."""
    parts = [quote]
    for ch in value:
        code = ord(ch)
        if ch == "\\" or ch == quote:
            parts.append("\\" + ch)
        elif ch in _SIMPLE_ENCODINGS:
            parts.append(_SIMPLE_ENCODINGS[ch])
        elif code < 0x20 or code == 0x7F or ch in "\u2028\u2029" or 0xD800 <= code <= 0xDFFF:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(ch)
    parts.append(quote)
    return "".join(parts)


# =============================================================================
# Classification
# =============================================================================


def _is_module_call_argument(node: Node, arguments: Node) -> bool:
    call = arguments.parent
    if call is None or call.type != "call_expression":
        return False
    function = _get_child_by_field(call, "function")
    if function is None or function.text not in _MODULE_CALLEES:
        return False
    return _first_named_child(arguments) == node


def classify_string(node: Node) -> NodeKind:
    """Classify a tree-sitter ``string`` node by its syntactic role."""
    parent = node.parent
    if parent is None:
        return NodeKind.PLAIN_LITERAL
    parent_type = parent.type

    if parent_type in _MODULE_SOURCE_PARENTS:
        if _get_child_by_field(parent, "source") == node:
            return NodeKind.MODULE_SPECIFIER
        return NodeKind.PLAIN_LITERAL  # export default "x"
    if parent_type == "import_require_clause":
        return NodeKind.MODULE_SPECIFIER
    if parent_type == "arguments" and _is_module_call_argument(node, parent):
        return NodeKind.MODULE_SPECIFIER

    if parent_type in _KEY_FIELDS:
        if _get_child_by_field(parent, _KEY_FIELDS[parent_type]) == node:
            return NodeKind.PROPERTY_KEY
        if parent_type == "enum_assignment":
            return NodeKind.ENUM_INITIALIZER
        return NodeKind.PLAIN_LITERAL
    if parent_type == "enum_body":
        return NodeKind.PROPERTY_KEY

    if parent_type == "literal_type":
        return NodeKind.TYPE_LITERAL
    if parent_type in _AMBIENT_MODULE_PARENTS:
        if _get_child_by_field(parent, "name") == node:
            return NodeKind.TYPE_LITERAL
        return NodeKind.PLAIN_LITERAL

    if parent_type in _SPECIFIER_PARENTS:
        return NodeKind.OTHER

    return NodeKind.PLAIN_LITERAL


def _classify(node: Node) -> NodeKind:
    node_type = node.type
    if node_type == "string":
        return classify_string(node)
    if node_type in _COMMENT_TYPES:
        return NodeKind.COMMENT
    if node_type in _QUASI_TYPES and node.parent is not None and node.parent.type in _TEMPLATE_TYPES:
        return NodeKind.TEMPLATE_QUASI
    return NodeKind.OTHER


# =============================================================================
# Parsing
# =============================================================================

# Cached parser
_PARSER: Parser | None = None


def _get_parser() -> Parser:
    """Get the cached TypeScript parser."""
    global _PARSER
    if _PARSER is None:
        language = _get_language("typescript")
        if language is None:
            raise GrammarError("tree-sitter-typescript is required to parse TypeScript")
        _PARSER = Parser(language)
    return _PARSER


def _mirror(node: Node) -> SyntaxNode:
    """Create the mirror of a single tree-sitter node (without children)."""
    kind = _classify(node)
    mirrored = SyntaxNode(
        kind=kind,
        type=node.type,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
    )
    if node.type == "string":
        text = node.text.decode("utf-8")
        mirrored.quote = text[0]
        try:
            mirrored.value = decode_string_literal(text[1:-1])
        except ParseError as e:
            raise ParseError(
                e.args[0],
                line=node.start_point[0] + 1,
                column=node.start_point[1] + 1,
                snippet=text[:40],
            ) from e
    elif kind == NodeKind.TEMPLATE_QUASI:
        mirrored.value = node.text.decode("utf-8")
    return mirrored


def _build_tree(root: Node) -> SyntaxNode:
    """Mirror the named nodes of a tree-sitter tree, keeping source order.

    String literals, quasis and comments are leaves.
    """
    mirrored_root = _mirror(root)
    stack: list[tuple[Node, SyntaxNode]] = [
        (child, mirrored_root) for child in reversed(root.named_children)
    ]
    while stack:
        node, parent = stack.pop()
        mirrored = _mirror(node)
        parent.children.append(mirrored)
        if node.type == "string" or mirrored.kind in (NodeKind.COMMENT, NodeKind.TEMPLATE_QUASI):
            continue
        stack.extend((child, mirrored) for child in reversed(node.named_children))
    return mirrored_root


def _parse_error(root: Node, source: bytes, path: Path | None) -> ParseError:
    error_node = _find_first_error(root)
    if error_node is None:
        return ParseError("Invalid TypeScript syntax", path=path)

    line = error_node.start_point[0] + 1
    column = error_node.start_point[1] + 1
    if error_node.is_missing:
        message = f"Missing {error_node.type!r}"
        snippet = None
    else:
        message = "Unexpected syntax"
        snippet = source[error_node.start_byte:error_node.end_byte][:40].decode(
            "utf-8", errors="replace"
        )
    return ParseError(message, line=line, column=column, snippet=snippet or None, path=path)


def parse_typescript(source: str, path: Path | None = None) -> SyntaxTree:
    """Parse TypeScript source into a mirrored syntax tree.

    Args:
        source: Source text.
        path: Originating file, used in error messages.

    Returns:
        SyntaxTree over the UTF-8 encoded source.

    Raises:
        ParseError: If tree-sitter reports any syntax error.
    """
    encoded = source.encode("utf-8")
    tree = _get_parser().parse(encoded)
    root = tree.root_node

    if root.has_error:
        raise _parse_error(root, encoded, path)

    try:
        mirrored = _build_tree(root)
    except ParseError as e:
        e.path = path
        raise
    logger.debug("Parsed %d bytes of TypeScript", len(encoded))
    return SyntaxTree(source=encoded, root=mirrored, path=path)
