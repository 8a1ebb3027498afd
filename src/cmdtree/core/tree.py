"""Arena-style command tree: a node table keyed by node id.

:class:`CommandTree` owns every node of an application and checks the
whole structure once, at construction time.  A tree that constructs
successfully cannot fail at runtime because of a dangling reference, a
cycle, an unreachable variant or a context type mismatch between a
parent and its child.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from cmdtree.core.nodes import (
    ChoiceNode,
    FieldKind,
    NamedArg,
    Node,
    SequenceNode,
    Subcommand,
)
from cmdtree.exceptions import TreeDefinitionError

logger = logging.getLogger(__name__)


class CommandTree:
    """Immutable table of nodes plus the id of the root node.

    Parameters
    ----------
    root:
        Id of the first node visited by a walk.
    nodes:
        Every node of the tree.  Ids must be unique.
    root_context:
        Type of the context supplied by the process entry point.
    max_depth:
        Optional bound on the number of nodes along any path.

    Raises
    ------
    TreeDefinitionError
        If the structure is malformed.
    """

    def __init__(
        self,
        root: str,
        nodes: Iterable[Node],
        *,
        root_context: type = object,
        max_depth: int | None = None,
    ) -> None:
        self._nodes: dict[str, Node] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise TreeDefinitionError(f"Duplicate node id {node.id!r}.")
            self._nodes[node.id] = node

        if root not in self._nodes:
            raise TreeDefinitionError(f"Root node {root!r} is not defined.")

        self.root: str = root
        self.root_context: type = root_context
        self.max_depth: int | None = max_depth

        self._check_nodes()
        self._check_links()
        depth = self._check_acyclic()
        self._check_reachable()
        self._check_contexts()

        if max_depth is not None and depth > max_depth:
            raise TreeDefinitionError(
                f"Tree depth {depth} exceeds the allowed maximum of {max_depth}."
            )
        self.depth: int = depth
        logger.debug("Built command tree %r: %d nodes, depth %d", root, len(self._nodes), depth)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def node(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise TreeDefinitionError(f"Unknown node id {node_id!r}.") from None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def children(self, node_id: str) -> tuple[str, ...]:
        """Ids of the nodes directly below *node_id*."""
        node = self.node(node_id)
        if isinstance(node, ChoiceNode):
            return tuple(variant.node for variant in node.variants)
        if node.child is None:
            return ()
        return (node.child.node,)

    # ------------------------------------------------------------------
    # Structural checks
    # ------------------------------------------------------------------

    def _check_nodes(self) -> None:
        for node in self._nodes.values():
            if isinstance(node, ChoiceNode):
                _check_choice(node)
            else:
                _check_sequence(node)

    def _check_links(self) -> None:
        for node in self._nodes.values():
            for child_id in self.children(node.id):
                if child_id not in self._nodes:
                    raise TreeDefinitionError(
                        f"Node {node.id!r} refers to undefined node {child_id!r}."
                    )
            if isinstance(node, SequenceNode) and isinstance(node.child, Subcommand):
                if not isinstance(self._nodes[node.child.node], ChoiceNode):
                    raise TreeDefinitionError(
                        f"Subcommand of {node.id!r} must target a choice node, "
                        f"got {node.child.node!r}.",
                        hint="Use NamedArg to attach a sequence node behind a keyword.",
                    )

    def _check_acyclic(self) -> int:
        """Return the tree depth; raise on any cycle."""
        depths: dict[str, int] = {}
        visiting: list[str] = []

        def visit(node_id: str) -> int:
            if node_id in depths:
                return depths[node_id]
            if node_id in visiting:
                cycle = " -> ".join(visiting[visiting.index(node_id):] + [node_id])
                raise TreeDefinitionError(f"Cycle in command tree: {cycle}.")
            visiting.append(node_id)
            below = [visit(child) for child in self.children(node_id)]
            visiting.pop()
            depths[node_id] = 1 + max(below, default=0)
            return depths[node_id]

        return visit(self.root)

    def _check_reachable(self) -> None:
        seen: set[str] = set()
        pending = [self.root]
        while pending:
            node_id = pending.pop()
            if node_id in seen:
                continue
            seen.add(node_id)
            pending.extend(self.children(node_id))
        unreachable = sorted(set(self._nodes) - seen)
        if unreachable:
            raise TreeDefinitionError(
                f"Nodes not reachable from {self.root!r}: {', '.join(unreachable)}."
            )

    def _check_contexts(self) -> None:
        root = self._nodes[self.root]
        if not issubclass(self.root_context, root.input_context):
            raise TreeDefinitionError(
                f"Root node {root.id!r} expects {root.input_context.__name__}, "
                f"but the entry point supplies {self.root_context.__name__}."
            )
        for node in self._nodes.values():
            for child_id in self.children(node.id):
                child = self._nodes[child_id]
                if not issubclass(node.output_type, child.input_context):
                    raise TreeDefinitionError(
                        f"Node {child.id!r} expects {child.input_context.__name__}, "
                        f"but parent {node.id!r} produces {node.output_type.__name__}."
                    )


# ---------------------------------------------------------------------------
# Per-node checks
# ---------------------------------------------------------------------------

def _check_choice(node: ChoiceNode) -> None:
    if not node.variants:
        raise TreeDefinitionError(f"Choice node {node.id!r} has no variants.")
    names = node.names
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise TreeDefinitionError(
            f"Choice node {node.id!r} repeats variant names: {', '.join(duplicates)}."
        )
    for name in names:
        if not name or name.startswith("-"):
            raise TreeDefinitionError(
                f"Choice node {node.id!r} has an invalid variant name {name!r}."
            )


def _check_sequence(node: SequenceNode) -> None:
    seen: set[str] = set()
    for field in node.fields:
        if not field.name.isidentifier() or field.name.startswith("_"):
            raise TreeDefinitionError(
                f"Node {node.id!r} has an invalid field name {field.name!r}."
            )
        if field.name in seen:
            raise TreeDefinitionError(
                f"Node {node.id!r} repeats field {field.name!r}."
            )
        seen.add(field.name)
        if field.kind is FieldKind.FLAG and (field.positional or field.choices):
            raise TreeDefinitionError(
                f"Flag field {field.name!r} of {node.id!r} cannot be positional "
                "or restricted to choices."
            )
        if field.positional and not node.is_leaf:
            raise TreeDefinitionError(
                f"Positional field {field.name!r} is only allowed on leaf nodes, "
                f"but {node.id!r} has a child.",
            )

    if node.is_leaf and node.action is None:
        raise TreeDefinitionError(f"Leaf node {node.id!r} has no action.")
    if not node.is_leaf and node.action is not None:
        raise TreeDefinitionError(
            f"Node {node.id!r} has both a child and an action."
        )
    if isinstance(node.child, NamedArg) and (
        not node.child.name or node.child.name.startswith("-")
    ):
        raise TreeDefinitionError(
            f"Node {node.id!r} has an invalid named argument {node.child.name!r}."
        )
