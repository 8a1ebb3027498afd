"""Declarative node types for building a command tree.

A tree is made of two node kinds:

* :class:`SequenceNode` — an ordered list of typed :class:`Field` values,
  optionally followed by a nested node (either a :class:`Subcommand`
  choice or a keyword-introduced :class:`NamedArg`).  A sequence node
  without a child is a leaf and owns the action to run.
* :class:`ChoiceNode` — a closed set of named :class:`Variant` entries,
  exactly one of which is active per visit.

Nodes reference each other by id; :class:`~cmdtree.core.tree.CommandTree`
owns the node table and checks that the references are well formed.
All node types are frozen dataclasses with no behaviour beyond small
derived properties.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from cmdtree.core.models import Scope
from cmdtree.core.protocols import LeafAction


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------

class FieldKind(Enum):
    """How a field is supplied on the command line."""

    VALUE = "value"
    """A typed value: ``--name VALUE`` or a positional token."""

    FLAG = "flag"
    """A presence-only boolean: ``--name``.  Never prompted."""


@dataclass(frozen=True, slots=True)
class Field:
    """One typed value of a :class:`SequenceNode`."""

    name: str
    """Python identifier; also the attribute name on the frozen Scope."""

    message: str = ""
    """Prompt shown when the value has to be asked for interactively."""

    parse: Callable[[str], Any] = str
    """Converts raw text to the field value; raises ``ValueError`` on bad input."""

    kind: FieldKind = FieldKind.VALUE

    help: str | None = None

    optional: bool = False
    """When true, the field may be left empty (its value is ``None``)."""

    positional: bool = False
    """Accept the value as a positional token (leaf nodes only)."""

    choices: tuple[str, ...] = ()
    """Closed set of accepted raw values; prompted as a selection list."""

    suggest: Callable[[Any, Mapping[str, Any]], str | None] | None = None
    """Pre-filled prompt text from ``(parent context, values so far)``."""

    validate: Callable[[Any], None] | None = None
    """Single-value semantic check; raises ``ValidationError``."""

    format: Callable[[Any], str] = str
    """Renders a value back into a command-line token."""

    @property
    def flag(self) -> str:
        """Option string used on the command line (``--account-id``)."""
        return "--" + self.name.replace("_", "-")

    @property
    def metavar(self) -> str:
        return self.name.upper()

    @property
    def prompt(self) -> str:
        """Prompt text, falling back to a message built from the name."""
        return self.message or f"Enter {self.name.replace('_', ' ')}:"


# ---------------------------------------------------------------------------
# Links between nodes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Subcommand:
    """Attach a :class:`ChoiceNode` whose variant names follow the flags."""

    node: str


@dataclass(frozen=True, slots=True)
class NamedArg:
    """Attach any node behind a keyword token, e.g. ``network-config``."""

    name: str
    node: str
    help: str | None = None


Link = Union[Subcommand, NamedArg]


# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SequenceNode:
    """A node with a fixed, ordered list of fields.

    ``context`` maps ``(parent context, own scope)`` to the context handed
    to the child (or to the leaf ``action``).  When omitted the parent
    context passes through unchanged.  ``defaults`` builds the initial
    builder values from the parent context for every visit.
    """

    id: str
    fields: tuple[Field, ...] = ()
    child: Link | None = None
    action: LeafAction | None = None
    input_context: type = object
    output_context: type | None = None
    context: Callable[[Any, Scope], Any] | None = None
    defaults: Callable[[Any], Mapping[str, Any]] | None = None
    validate: Callable[[Any, Any], None] | None = None
    """Cross-field check over ``(surface or None, builder)``."""
    help: str | None = None

    @property
    def is_leaf(self) -> bool:
        return self.child is None

    @property
    def output_type(self) -> type:
        return self.output_context or self.input_context

    def field(self, name: str) -> Field:
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(name)


@dataclass(frozen=True, slots=True)
class Variant:
    """One named alternative of a :class:`ChoiceNode`."""

    name: str
    """Token typed on the command line (``view-account-summary``)."""

    description: str
    """Short text shown next to the name in the selection menu."""

    node: str
    """Id of the node visited when this variant is selected."""


@dataclass(frozen=True, slots=True)
class ChoiceNode:
    """A closed set of named variants; exactly one is active per visit.

    The node's scope holds a single value, ``variant``.  ``default``
    may derive the selection from the parent context when no variant
    was named on the command line.
    """

    id: str
    message: str
    variants: tuple[Variant, ...]
    input_context: type = object
    output_context: type | None = None
    context: Callable[[Any, Scope], Any] | None = None
    default: Callable[[Any], str | None] | None = None
    help: str | None = None

    @property
    def output_type(self) -> type:
        return self.output_context or self.input_context

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(variant.name for variant in self.variants)

    def variant(self, name: str) -> Variant:
        for variant in self.variants:
            if variant.name == name:
                return variant
        raise KeyError(name)


Node = Union[SequenceNode, ChoiceNode]
