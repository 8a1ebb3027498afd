"""Reconstruct the command line equivalent to a walk.

After an interactive session the user can copy the printed command to
re-run the same path unattended: every committed value is rendered as
a flag, a positional token, a keyword or a variant name.
"""

from __future__ import annotations

from collections.abc import Sequence

from cmdtree.core.models import WalkStep
from cmdtree.core.nodes import ChoiceNode, FieldKind, NamedArg
from cmdtree.core.tree import CommandTree


def to_cli_args(tree: CommandTree, steps: Sequence[WalkStep]) -> list[str]:
    """Return the argument tokens that reproduce *steps* without prompts."""
    args: list[str] = []
    for index, step in enumerate(steps):
        node = tree.node(step.node_id)
        if isinstance(node, ChoiceNode):
            args.append(step.scope["variant"])
            continue

        positionals: list[str] = []
        for field in node.fields:
            value = step.scope.get(field.name)
            if field.kind is FieldKind.FLAG:
                if value:
                    args.append(field.flag)
            elif value is None:
                continue
            elif field.positional:
                positionals.append(field.format(value))
            else:
                args.append(f"{field.flag}={field.format(value)}")
        if any(token.startswith("-") for token in positionals):
            args.append("--")
        args.extend(positionals)

        if isinstance(node.child, NamedArg) and index + 1 < len(steps):
            args.append(node.child.name)
    return args
