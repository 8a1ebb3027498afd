"""Depth-first walk of a command tree down to one leaf action.

For every node on the path the walker:

1. resolves the node (sequence: fields, choice: variant),
2. derives the child context from ``(parent context, scope)``,
3. descends into the next node — for choice nodes only the selected
   variant is visited,

and finally runs the leaf action with the fully derived context.

The walk never revisits a committed node.  An error raised below a
committed node is reported with the path of the failing node and does
not touch ancestor scopes.
"""

from __future__ import annotations

import logging
from typing import Any

from cmdtree.core.models import Scope, Surface, WalkResult, WalkStep
from cmdtree.core.nodes import ChoiceNode, Node, SequenceNode
from cmdtree.core.protocols import Prompter
from cmdtree.core.resolver import InteractiveResolver
from cmdtree.core.tree import CommandTree
from cmdtree.exceptions import CmdTreeError, TreeDefinitionError

logger = logging.getLogger(__name__)


def derive_context(node: Node, parent_context: Any, scope: Scope) -> Any:
    """Map ``(parent context, scope)`` to the context below *node*.

    Raises
    ------
    TreeDefinitionError
        If the mapping returns an object of the wrong declared type.
    """
    if node.context is None:
        context = parent_context
    else:
        context = node.context(parent_context, scope)
    if not isinstance(context, node.output_type):
        raise TreeDefinitionError(
            f"Context of {node.id!r} must be {node.output_type.__name__}, "
            f"got {type(context).__name__}."
        )
    return context


class TreeWalker:
    """Visit nodes one at a time, in tree order, down to a leaf.

    Parameters
    ----------
    tree:
        The command tree to walk.
    prompter:
        Interactive input source; may be ``None`` in non-interactive mode.
    interactive:
        Whether missing values may be asked for.
    """

    def __init__(
        self,
        tree: CommandTree,
        *,
        prompter: Prompter | None = None,
        interactive: bool = True,
    ) -> None:
        self._tree: CommandTree = tree
        self._resolver: InteractiveResolver = InteractiveResolver(
            prompter, interactive=interactive
        )
        self.steps: list[WalkStep] = []
        """Committed node visits of the most recent walk."""

    def walk(self, surface: Surface | None, root_context: Any) -> WalkResult:
        """Resolve the path selected by *surface* and run its leaf action.

        Raises
        ------
        CmdTreeError
            Any parse, validation or leaf error, with ``path`` set to the
            failing node.  Exceptions raised by the leaf action that are
            not :class:`CmdTreeError` propagate unchanged.
        """
        self.steps = []
        path: list[str] = []
        node_id = self._tree.root
        context = root_context

        while True:
            node = self._tree.node(node_id)
            path.append(node.id)
            logger.debug("Visiting %s", " > ".join(path))
            try:
                if isinstance(node, ChoiceNode):
                    resolution = self._resolver.select(node, context, surface)
                    child_context = derive_context(node, context, resolution.scope)
                    self.steps.append(
                        WalkStep(node.id, resolution.scope, resolution.prompted)
                    )
                    variant = node.variant(resolution.scope["variant"])
                    node_id = variant.node
                    surface = _descend(surface, variant.name)
                else:
                    resolution = self._resolver.resolve(node, context, surface)
                    child_context = derive_context(node, context, resolution.scope)
                    self.steps.append(
                        WalkStep(node.id, resolution.scope, resolution.prompted)
                    )
                    if node.child is None:
                        code = self._run_leaf(node, child_context)
                        return WalkResult(code, tuple(self.steps), child_context)
                    node_id = node.child.node
                    surface = surface.child if surface is not None else None
            except CmdTreeError as exc:
                raise exc.at(path)
            context = child_context

    @staticmethod
    def _run_leaf(node: SequenceNode, context: Any) -> int:
        assert node.action is not None
        logger.debug("Running leaf action of %r", node.id)
        result = node.action(context)
        return 0 if result is None else int(result)


def _descend(surface: Surface | None, variant: str) -> Surface | None:
    """Surface of the selected variant, if the user typed that variant."""
    if surface is None or surface.selected != variant:
        return None
    return surface.child


def run_tree(
    tree: CommandTree,
    surface: Surface | None,
    root_context: Any,
    *,
    prompter: Prompter | None = None,
    interactive: bool = True,
) -> WalkResult:
    """Convenience wrapper: walk *tree* once and return the result."""
    return TreeWalker(tree, prompter=prompter, interactive=interactive).walk(
        surface, root_context
    )
