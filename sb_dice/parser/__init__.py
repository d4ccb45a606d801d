"""TypeScript parsing via tree-sitter.

Produces a mirrored syntax tree whose string literals can be rewritten in
place and regenerated by ``sb_dice.codegen``.
"""

from sb_dice.parser.base import (
    STRING_KINDS,
    NodeKind,
    SyntaxNode,
    SyntaxTree,
    walk,
)
from sb_dice.parser.typescript import (
    TYPESCRIPT_EXTENSION,
    classify_string,
    decode_string_literal,
    encode_string_literal,
    parse_typescript,
)

__all__ = [
    "STRING_KINDS",
    "TYPESCRIPT_EXTENSION",
    "NodeKind",
    "SyntaxNode",
    "SyntaxTree",
    "classify_string",
    "decode_string_literal",
    "encode_string_literal",
    "parse_typescript",
    "walk",
]
