"""Pure construction of a node's initial builder.

Pipeline order (enforced by :func:`initial_builder`):

1. **Fresh** — an empty builder; flag fields start as ``False``.
2. **Derive** — values computed from the parent context by the node's
   ``defaults`` factory.
3. **Merge** — values typed on the command line override everything.

Whatever is still unset afterwards is left for interactive resolution.
"""

from __future__ import annotations

from typing import Any

from cmdtree.core.models import Builder, FieldSource, Surface
from cmdtree.core.nodes import FieldKind, SequenceNode
from cmdtree.exceptions import TreeDefinitionError


# ---------------------------------------------------------------------------
# 1. Fresh
# ---------------------------------------------------------------------------

def fresh_builder(node: SequenceNode) -> Builder:
    """Return a builder for *node* with nothing supplied yet."""
    builder = Builder(node.id)
    for field in node.fields:
        if field.kind is FieldKind.FLAG:
            builder.set(field.name, False, FieldSource.DERIVED)
    return builder


# ---------------------------------------------------------------------------
# 2. Derive
# ---------------------------------------------------------------------------

def derive_defaults(
    node: SequenceNode,
    builder: Builder,
    parent_context: Any,
) -> Builder:
    """Return a copy of *builder* with values derived from *parent_context*.

    ``None`` values returned by the factory are ignored so a factory may
    simply say "no opinion" for a field.
    """
    result = builder.copy()
    if node.defaults is None:
        return result

    derived = node.defaults(parent_context)
    names = {field.name for field in node.fields}
    for name, value in derived.items():
        if name not in names:
            raise TreeDefinitionError(
                f"Defaults of {node.id!r} name unknown field {name!r}."
            )
        if value is not None:
            result.set(name, value, FieldSource.DERIVED)
    return result


# ---------------------------------------------------------------------------
# 3. Merge
# ---------------------------------------------------------------------------

def merge_surface(
    node: SequenceNode,
    builder: Builder,
    surface: Surface | None,
) -> Builder:
    """Return a copy of *builder* where every supplied flag wins.

    Fields absent from *surface* keep their current state.
    """
    result = builder.copy()
    if surface is None:
        return result
    for field in node.fields:
        if surface.supplied(field.name):
            result.set(field.name, surface.values[field.name], FieldSource.FLAG)
    return result


# ---------------------------------------------------------------------------
# Composite pipeline
# ---------------------------------------------------------------------------

def initial_builder(
    node: SequenceNode,
    parent_context: Any,
    surface: Surface | None,
) -> Builder:
    """Run fresh → derive → merge: flag > derived default > prompt."""
    builder = fresh_builder(node)
    builder = derive_defaults(node, builder, parent_context)
    return merge_surface(node, builder, surface)
