"""Tests for the literal visitor."""

import pytest

from sb_dice.config import LiteralPolicy
from sb_dice.errors import InvariantError
from sb_dice.mapping import MappingTable
from sb_dice.parser import NodeKind, SyntaxNode, parse_typescript, walk
from sb_dice.visitor import ALWAYS_ELIGIBLE, LiteralVisitor, eligible_kinds, replace_literals


def _node(kind: NodeKind, value: str | None = None, *children: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(kind=kind, type=kind.value, start_byte=0, end_byte=0, value=value, children=list(children))


class TestEligibleKinds:
    """Tests for the eligibility policy."""

    def test_default_policy(self) -> None:
        """Only plain literals and module specifiers by default."""
        assert eligible_kinds() == ALWAYS_ELIGIBLE
        assert eligible_kinds() == {NodeKind.PLAIN_LITERAL, NodeKind.MODULE_SPECIFIER}

    def test_quasis_never_eligible(self) -> None:
        policy = LiteralPolicy(property_keys=True, enum_initializers=True, type_literals=True)
        kinds = eligible_kinds(policy)
        assert NodeKind.TEMPLATE_QUASI not in kinds
        assert NodeKind.COMMENT not in kinds
        assert NodeKind.OTHER not in kinds

    def test_opt_in_flags(self) -> None:
        assert NodeKind.PROPERTY_KEY in eligible_kinds(LiteralPolicy(property_keys=True))
        assert NodeKind.ENUM_INITIALIZER in eligible_kinds(LiteralPolicy(enum_initializers=True))
        assert NodeKind.TYPE_LITERAL in eligible_kinds(LiteralPolicy(type_literals=True))

    def test_visitor_eligibility_follows_policy(self) -> None:
        visitor = LiteralVisitor(LiteralPolicy(type_literals=True))
        assert visitor.is_eligible(_node(NodeKind.TYPE_LITERAL, "t")) is True
        assert visitor.is_eligible(_node(NodeKind.PROPERTY_KEY, "k")) is False
        assert visitor.is_eligible(_node(NodeKind.TEMPLATE_QUASI, "q")) is False


class TestLiteralVisitor:
    """Tests for traversal order and replacement on hand-built trees."""

    def test_pre_order_source_order(self) -> None:
        """Outer literals before inner ones, left to right."""
        first = _node(NodeKind.PLAIN_LITERAL, "first")
        inner = _node(NodeKind.PLAIN_LITERAL, "inner")
        last = _node(NodeKind.MODULE_SPECIFIER, "last")
        root = _node(NodeKind.OTHER, None, first, _node(NodeKind.OTHER, None, inner), last)

        table = LiteralVisitor().visit(root)

        assert table.to_dict() == {"0": "first", "1": "inner", "2": "last"}
        assert [first.value, inner.value, last.value] == ["0", "1", "2"]
        assert all(node.replaced for node in (first, inner, last))

    def test_quasis_untouched(self) -> None:
        quasi = _node(NodeKind.TEMPLATE_QUASI, "Hello, ")
        hole = _node(NodeKind.PLAIN_LITERAL, "name")
        root = _node(NodeKind.OTHER, None, quasi, hole)

        table = LiteralVisitor().visit(root)

        assert quasi.value == "Hello, "
        assert quasi.replaced is False
        assert table.to_dict() == {"0": "name"}

    def test_duplicates_get_distinct_indices(self) -> None:
        root = _node(
            NodeKind.OTHER,
            None,
            _node(NodeKind.PLAIN_LITERAL, "same"),
            _node(NodeKind.PLAIN_LITERAL, "same"),
        )
        assert LiteralVisitor().visit(root).to_dict() == {"0": "same", "1": "same"}

    def test_empty_and_digit_literals(self) -> None:
        """Empty strings and digit strings are replaced like any other."""
        root = _node(
            NodeKind.OTHER,
            None,
            _node(NodeKind.PLAIN_LITERAL, "7"),
            _node(NodeKind.PLAIN_LITERAL, ""),
        )
        assert LiteralVisitor().visit(root).to_dict() == {"0": "7", "1": ""}

    def test_counter_matches_table(self) -> None:
        literals = [_node(NodeKind.PLAIN_LITERAL, f"v{i}") for i in range(25)]
        visitor = LiteralVisitor()
        table = visitor.visit(_node(NodeKind.OTHER, None, *literals))

        assert visitor.counter == len(table) == 25
        assert [node.value for node in literals] == [str(i) for i in range(25)]

    def test_deep_tree(self) -> None:
        """Deeply nested trees do not hit the recursion limit."""
        leaf = _node(NodeKind.PLAIN_LITERAL, "deep")
        node = leaf
        for _ in range(5000):
            node = _node(NodeKind.OTHER, None, node)

        table = LiteralVisitor().visit(node)
        assert table.to_dict() == {"0": "deep"}

    def test_no_literals(self) -> None:
        table = LiteralVisitor().visit(_node(NodeKind.OTHER))
        assert len(table) == 0

    def test_injected_non_empty_table_is_invariant_error(self) -> None:
        """A table that does not start empty breaks the index discipline."""
        table = MappingTable()
        table.insert(0, "stale")
        visitor = LiteralVisitor(table=table)

        with pytest.raises(InvariantError):
            visitor.visit(_node(NodeKind.OTHER, None, _node(NodeKind.PLAIN_LITERAL, "x")))

    def test_injected_table_receives_entries(self) -> None:
        table = MappingTable()
        LiteralVisitor(table=table).visit(_node(NodeKind.OTHER, None, _node(NodeKind.PLAIN_LITERAL, "x")))
        assert table.to_dict() == {"0": "x"}

    def test_visitor_traverses_once(self) -> None:
        """Reusing a visitor is an internal error, not a crash."""
        visitor = LiteralVisitor()
        visitor.visit(_node(NodeKind.OTHER))
        with pytest.raises(InvariantError, match="exactly one tree"):
            visitor.visit(_node(NodeKind.OTHER))

    def test_separate_visitors_start_at_zero(self) -> None:
        """Indices are scoped to one traversal."""
        first = replace_literals(_node(NodeKind.OTHER, None, _node(NodeKind.PLAIN_LITERAL, "a")))
        second = replace_literals(_node(NodeKind.OTHER, None, _node(NodeKind.PLAIN_LITERAL, "b")))
        assert first.to_dict() == {"0": "a"}
        assert second.to_dict() == {"0": "b"}


class TestVisitorOnParsedSource:
    """Tests for the visitor on real TypeScript."""

    def test_template_hole_literals_are_replaced(self) -> None:
        tree = parse_typescript('const s = `Hi ${"there"} and ${x ? "a" : "b"}`;')
        table = LiteralVisitor().visit(tree.root)
        assert table.to_dict() == {"0": "there", "1": "a", "2": "b"}

    def test_property_keys_excluded_by_default(self) -> None:
        tree = parse_typescript('const o = { "k": "v" };')
        assert LiteralVisitor().visit(tree.root).to_dict() == {"0": "v"}

    def test_property_keys_opt_in(self) -> None:
        tree = parse_typescript('const o = { "k": "v" };')
        table = LiteralVisitor(LiteralPolicy(property_keys=True)).visit(tree.root)
        assert table.to_dict() == {"0": "k", "1": "v"}

    def test_table_size_matches_eligible_count(self, sample_typescript_file) -> None:
        """Every eligible node is visited exactly once."""
        source = sample_typescript_file.read_text(encoding="utf-8")
        expected = sum(
            1 for node in walk(parse_typescript(source).root) if node.kind in ALWAYS_ELIGIBLE
        )

        tree = parse_typescript(source)
        table = LiteralVisitor().visit(tree.root)

        assert len(table) == expected == 8
        replaced = [node for node in walk(tree.root) if node.replaced]
        assert [node.value for node in replaced] == [str(i) for i in range(expected)]
