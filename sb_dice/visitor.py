"""Literal visitor: assigns sequential indices to eligible string literals.

Walks the mirrored tree in pre-order, source order (descending into
template substitutions), and for every eligible literal records the
original value in the mapping table and replaces it with the decimal index.
"""

from collections.abc import Callable

from sb_dice.config import LiteralPolicy
from sb_dice.errors import InvariantError
from sb_dice.logging import logger
from sb_dice.mapping import MappingTable
from sb_dice.parser.base import NodeKind, SyntaxNode, walk

# Always replaced, regardless of policy
ALWAYS_ELIGIBLE = frozenset({NodeKind.PLAIN_LITERAL, NodeKind.MODULE_SPECIFIER})


def eligible_kinds(policy: LiteralPolicy | None = None) -> frozenset[NodeKind]:
    """Return the node kinds replaced under a policy."""
    policy = policy or LiteralPolicy()
    kinds = set(ALWAYS_ELIGIBLE)
    if policy.property_keys:
        kinds.add(NodeKind.PROPERTY_KEY)
    if policy.enum_initializers:
        kinds.add(NodeKind.ENUM_INITIALIZER)
    if policy.type_literals:
        kinds.add(NodeKind.TYPE_LITERAL)
    return frozenset(kinds)


class LiteralVisitor:
    """Replaces eligible literals with their index, one traversal per instance.

    The counter and mapping table belong to the visitor, so separate
    visitors never share indices. A table may be injected for testing.

    Example:
        visitor = LiteralVisitor()
        table = visitor.visit(tree.root)
    """

    def __init__(
        self,
        policy: LiteralPolicy | None = None,
        table: MappingTable | None = None,
    ) -> None:
        self.table = table if table is not None else MappingTable()
        self.counter = 0
        self._eligible = eligible_kinds(policy)
        self._visited = False

    def _replace(self, node: SyntaxNode) -> None:
        index = self.counter
        original = node.value if node.value is not None else ""
        self.table.insert(index, original)
        node.replace_value(str(index))
        self.counter += 1
        logger.debug("Literal %d at byte %d: %r", index, node.start_byte, original)

    def _skip(self, node: SyntaxNode) -> None:
        pass

    def is_eligible(self, node: SyntaxNode) -> bool:
        return node.kind in self._eligible

    def handler_for(self, node: SyntaxNode) -> Callable[[SyntaxNode], None]:
        """Pick the action for a node by its kind."""
        return self._replace if self.is_eligible(node) else self._skip

    def visit(self, root: SyntaxNode) -> MappingTable:
        """Traverse the tree once, replacing eligible literals.

        Args:
            root: Root of the mirrored syntax tree.

        Returns:
            The mapping table (not frozen; the caller freezes it once the
            whole pipeline has succeeded).
        """
        if self._visited:
            raise InvariantError("LiteralVisitor instances traverse exactly one tree")
        self._visited = True

        for node in walk(root):
            self.handler_for(node)(node)

        logger.info("Replaced %d string literals", self.counter)
        return self.table


def replace_literals(root: SyntaxNode, policy: LiteralPolicy | None = None) -> MappingTable:
    """Replace eligible literals under ``root`` and return the mapping table."""
    return LiteralVisitor(policy).visit(root)
