"""Command-line surface of a command tree, built on argparse.

The tree is mirrored into nested argparse parsers:

* every field of a sequence node becomes ``--field-name`` (or a
  positional on leaf nodes),
* a choice node becomes a set of subparsers, one per variant,
* a named argument becomes a subparser with a single keyword.

A full invocation therefore reads::

    prog [root flags] variant [flags] keyword variant [flags] ...

Destinations are prefixed with the node id so equal field names on
different nodes never collide.  Parsing happens once; the namespace is
then turned into a parallel tree of :class:`~cmdtree.core.models.Surface`
values holding only what the user explicitly typed.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from typing import Any

from cmdtree.core.models import Surface
from cmdtree.core.nodes import ChoiceNode, Field, FieldKind, NamedArg, SequenceNode
from cmdtree.core.tree import CommandTree
from cmdtree.exceptions import ArgumentParseError, TreeDefinitionError


class RaisingArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises :class:`ArgumentParseError` on bad input.

    ``--help`` and ``--version`` still exit through ``SystemExit``.
    Subparsers inherit this class, so errors from any depth are typed.
    """

    def error(self, message: str) -> Any:  # type: ignore[override]
        raise ArgumentParseError(
            f"{self.prog}: {message}",
            hint=f"Run '{self.prog} --help' for usage.",
        )


# ---------------------------------------------------------------------------
# Destination names
# ---------------------------------------------------------------------------

def _field_dest(node_id: str, name: str) -> str:
    return f"{node_id}.{name}"


def _variant_dest(node_id: str) -> str:
    return f"{node_id}:variant"


def _keyword_dest(node_id: str) -> str:
    return f"{node_id}:keyword"


# ---------------------------------------------------------------------------
# Parser construction
# ---------------------------------------------------------------------------

def _converter(field: Field) -> Callable[[str], Any]:
    """Wrap ``field.parse`` so argparse errors name the field."""

    def convert(text: str) -> Any:
        if field.choices and text not in field.choices:
            raise argparse.ArgumentTypeError(
                f"invalid choice: {text!r} (choose from {', '.join(field.choices)})"
            )
        return field.parse(text)

    convert.__name__ = field.name
    return convert


def _add_field(parser: argparse.ArgumentParser, node: SequenceNode, field: Field) -> None:
    dest = _field_dest(node.id, field.name)
    if field.kind is FieldKind.FLAG:
        parser.add_argument(field.flag, dest=dest, action="store_true", default=None, help=field.help)
    elif field.positional:
        parser.add_argument(
            dest,
            nargs="?",
            type=_converter(field),
            default=None,
            metavar=field.metavar,
            help=field.help,
        )
    else:
        parser.add_argument(
            field.flag,
            dest=dest,
            type=_converter(field),
            default=None,
            metavar=field.metavar,
            help=field.help,
        )


def _add_node(parser: argparse.ArgumentParser, tree: CommandTree, node_id: str) -> None:
    node = tree.node(node_id)

    if isinstance(node, ChoiceNode):
        subparsers = parser.add_subparsers(
            dest=_variant_dest(node.id),
            title=node.help or node.message,
            metavar="{" + ",".join(node.names) + "}",
        )
        for variant in node.variants:
            subparser = subparsers.add_parser(
                variant.name,
                help=variant.description,
                description=variant.description,
            )
            _add_node(subparser, tree, variant.node)
        return

    for field in node.fields:
        _add_field(parser, node, field)

    if node.child is None:
        return
    if isinstance(node.child, NamedArg):
        subparsers = parser.add_subparsers(dest=_keyword_dest(node.id), metavar=node.child.name)
        subparser = subparsers.add_parser(
            node.child.name,
            help=node.child.help,
            description=node.child.help,
        )
        _add_node(subparser, tree, node.child.node)
    else:
        _add_node(parser, tree, node.child.node)


def add_tree_arguments(parser: argparse.ArgumentParser, tree: CommandTree) -> None:
    """Mirror *tree* into *parser*, starting at the root node.

    Raises
    ------
    TreeDefinitionError
        If two option strings of one parser clash (for example a root
        field shadowing a global option).
    """
    try:
        _add_node(parser, tree, tree.root)
    except argparse.ArgumentError as exc:
        raise TreeDefinitionError(f"Conflicting command-line options: {exc}") from exc


def build_parser(
    tree: CommandTree,
    *,
    prog: str | None = None,
    description: str | None = None,
) -> RaisingArgumentParser:
    """Construct a standalone parser for *tree*."""
    parser = RaisingArgumentParser(prog=prog, description=description)
    add_tree_arguments(parser, tree)
    return parser


# ---------------------------------------------------------------------------
# Namespace → Surface
# ---------------------------------------------------------------------------

def surface_from_namespace(tree: CommandTree, namespace: argparse.Namespace) -> Surface:
    """Collect the explicitly supplied values along the parsed path."""
    return _extract(tree, tree.root, namespace)


def _extract(tree: CommandTree, node_id: str, namespace: argparse.Namespace) -> Surface:
    node = tree.node(node_id)

    if isinstance(node, ChoiceNode):
        selected: str | None = getattr(namespace, _variant_dest(node.id), None)
        if selected is None:
            return Surface(node.id)
        child = _extract(tree, node.variant(selected).node, namespace)
        return Surface(node.id, selected=selected, child=child)

    values = {}
    for field in node.fields:
        value = getattr(namespace, _field_dest(node.id, field.name), None)
        if value is not None:
            values[field.name] = value

    child_surface: Surface | None = None
    if isinstance(node.child, NamedArg):
        if getattr(namespace, _keyword_dest(node.id), None) is not None:
            child_surface = _extract(tree, node.child.node, namespace)
    elif node.child is not None:
        child_surface = _extract(tree, node.child.node, namespace)
    return Surface(node.id, values=values, child=child_surface)


def parse_surface(
    tree: CommandTree,
    argv: Sequence[str],
    *,
    prog: str | None = None,
) -> Surface:
    """Parse *argv* against *tree* in one pass and return the root surface.

    Raises
    ------
    ArgumentParseError
        If a value cannot be converted or a variant does not exist.
    """
    parser = build_parser(tree, prog=prog)
    return surface_from_namespace(tree, parser.parse_args(list(argv)))
