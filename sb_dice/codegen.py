"""Regenerate TypeScript source from a rewritten syntax tree.

The generator splices the original source: replaced literals are re-emitted
from their new value, comments are dropped, and every other byte (template
quasis included) is copied unchanged.

Comment removal rules:
- a line holding nothing but comments and whitespace is removed entirely
- a comment that ends its line is removed with the whitespace around it
- a comment spanning lines in the middle of code becomes a line break, which
  keeps automatic semicolon insertion unchanged
- a one-line block comment between two tokens becomes a single space
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass

from sb_dice.errors import GenerationError, ParseError
from sb_dice.logging import logger
from sb_dice.parser.base import NodeKind, SyntaxNode, SyntaxTree, walk
from sb_dice.parser.typescript import encode_string_literal, parse_typescript

_HSPACE = b" \t"
_BLANK = b" \t\r"
_NEWLINE = 0x0A
# Tokens on either side of these never merge
_SEPARATORS = frozenset(b"()[]{},;")


@dataclass
class _Edit:
    """Replace ``source[start:end]`` with ``text``."""

    start: int
    end: int
    text: bytes = b""


class _CommentSpans:
    """Sorted, non-overlapping comment byte ranges."""

    def __init__(self, comments: list[SyntaxNode]) -> None:
        ordered = sorted((c.start_byte, c.end_byte) for c in comments)
        self.spans = ordered
        self.starts = [s for s, _ in ordered]
        self.ends = [e for _, e in ordered]

    def overlapping(self, start: int, end: int) -> list[tuple[int, int]]:
        lo = bisect_right(self.ends, start)
        hi = bisect_left(self.starts, end)
        return self.spans[lo:hi]

    def is_blank(self, source: bytes, start: int, end: int) -> bool:
        """True if ``source[start:end]`` is whitespace once comments are ignored."""
        if start >= end:
            return True
        chunk = bytearray(source[start:end])
        for span_start, span_end in self.overlapping(start, end):
            lo = max(span_start, start) - start
            hi = min(span_end, end) - start
            chunk[lo:hi] = b" " * (hi - lo)
        return not chunk.strip(_BLANK)


def _line_bounds(source: bytes, start: int, end: int) -> tuple[int, int]:
    """Start of the line holding ``start``; position of the newline ending ``end``'s line."""
    line_start = source.rfind(b"\n", 0, start) + 1
    line_end = source.find(b"\n", end)
    return line_start, len(source) if line_end == -1 else line_end


def _comment_range(source: bytes, node: SyntaxNode, spans: _CommentSpans) -> tuple[int, int]:
    start, end = node.start_byte, node.end_byte
    line_start, line_end = _line_bounds(source, start, end)
    before_blank = spans.is_blank(source, line_start, start)
    after_blank = spans.is_blank(source, end, line_end)

    if before_blank and after_blank:
        return line_start, min(line_end + 1, len(source))
    if after_blank:
        while start > line_start and source[start - 1] in _HSPACE:
            start -= 1
        while end < line_end and source[end] in _HSPACE:
            end += 1
    return start, end


def _merge(ranges: list[tuple[int, int]]) -> list[list[int]]:
    merged: list[list[int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    return merged


def _removal_text(source: bytes, start: int, end: int, newline: bytes) -> bytes:
    """What a removed comment region is replaced with."""
    if start == 0 or source[start - 1] == _NEWLINE:
        return b""
    if b"\n" in source[start:end]:
        return newline
    if start > 0 and end < len(source):
        prev, nxt = source[start - 1], source[end]
        if prev not in _BLANK and nxt not in _BLANK and prev not in _SEPARATORS and nxt not in _SEPARATORS:
            return b" "
    return b""


def _comment_edits(source: bytes, comments: list[SyntaxNode]) -> list[_Edit]:
    if not comments:
        return []
    spans = _CommentSpans(comments)
    newline = b"\r\n" if b"\r\n" in source else b"\n"
    ranges = [_comment_range(source, node, spans) for node in comments]
    return [
        _Edit(start, end, _removal_text(source, start, end, newline))
        for start, end in _merge(ranges)
    ]


def _apply(source: bytes, edits: list[_Edit]) -> bytes:
    parts: list[bytes] = []
    cursor = 0
    for edit in sorted(edits, key=lambda e: (e.start, e.end)):
        if edit.start < cursor:
            raise GenerationError(
                f"Overlapping rewrite at byte {edit.start} (previous edit ends at {cursor})"
            )
        parts.append(source[cursor:edit.start])
        parts.append(edit.text)
        cursor = edit.end
    parts.append(source[cursor:])
    return b"".join(parts)


def generate(tree: SyntaxTree, verify: bool = True) -> str:
    """Produce source text for a (possibly rewritten) tree, without comments.

    Args:
        tree: Parsed tree whose literal values may have been replaced.
        verify: Re-parse the result and check it is valid and comment-free.

    Returns:
        The regenerated source text.

    Raises:
        GenerationError: If edits collide or the result fails verification.
    """
    comments: list[SyntaxNode] = []
    edits: list[_Edit] = []
    for node in walk(tree.root):
        if node.kind == NodeKind.COMMENT:
            comments.append(node)
        elif node.replaced:
            literal = encode_string_literal(node.value or "", node.quote)
            edits.append(_Edit(node.start_byte, node.end_byte, literal.encode("utf-8")))

    rewrites = len(edits)
    edits.extend(_comment_edits(tree.source, comments))
    output = _apply(tree.source, edits)

    try:
        text = output.decode("utf-8")
    except UnicodeDecodeError as e:
        raise GenerationError(f"Regenerated source is not valid UTF-8: {e}") from e

    logger.info(
        "Regenerated %d bytes (%d literal rewrites, %d comments removed)",
        len(output),
        rewrites,
        len(comments),
    )

    if verify:
        _verify(text)
    return text


def _verify(text: str) -> None:
    try:
        regenerated = parse_typescript(text)
    except ParseError as e:
        raise GenerationError(f"Regenerated source does not parse: {e}") from e
    for node in walk(regenerated.root):
        if node.kind == NodeKind.COMMENT:
            raise GenerationError(f"Comment survived regeneration at byte {node.start_byte}")
