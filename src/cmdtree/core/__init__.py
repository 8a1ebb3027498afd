"""Core layer — the command tree machinery.

Rules
-----
* No ``print()`` calls and no terminal library imports.
* No imports from ``cli``.
* Interaction happens only through the :class:`Prompter` protocol.
"""

from cmdtree.core.models import (
    Builder,
    FieldSource,
    NodeState,
    Scope,
    Surface,
    WalkResult,
    WalkStep,
)
from cmdtree.core.nodes import (
    ChoiceNode,
    Field,
    FieldKind,
    NamedArg,
    SequenceNode,
    Subcommand,
    Variant,
)
from cmdtree.core.protocols import LeafAction, Prompter
from cmdtree.core.replay import to_cli_args
from cmdtree.core.resolver import InteractiveResolver
from cmdtree.core.tree import CommandTree
from cmdtree.core.walker import TreeWalker, derive_context, run_tree

__all__: list[str] = [
    "Builder",
    "ChoiceNode",
    "CommandTree",
    "Field",
    "FieldKind",
    "FieldSource",
    "InteractiveResolver",
    "LeafAction",
    "NamedArg",
    "NodeState",
    "Prompter",
    "Scope",
    "SequenceNode",
    "Subcommand",
    "Surface",
    "TreeWalker",
    "Variant",
    "WalkResult",
    "WalkStep",
    "derive_context",
    "run_tree",
    "to_cli_args",
]
