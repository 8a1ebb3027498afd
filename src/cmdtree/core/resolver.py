"""Interactive resolution and validation of a single node.

For a :class:`SequenceNode` the resolver runs an explicit state machine::

    NEEDS_INPUT ──► VALIDATING ──► DONE
         ▲               │
         └───────────────┘   (validation failed, interactive mode)

``NEEDS_INPUT`` prompts, in declaration order, for every field not yet
supplied.  A value that fails to parse re-prompts the same field
without advancing.  ``VALIDATING`` runs the per-field checks and the
node's cross-field check.  In interactive mode a failure clears only
the offending fields and returns to ``NEEDS_INPUT``; in non-interactive
mode it is terminal.

For a :class:`ChoiceNode` the resolver picks exactly one variant: the
one named on the command line, else the derived default, else the one
chosen from a selection menu.
"""

from __future__ import annotations

import logging
from typing import Any

from cmdtree.core.merge import initial_builder
from cmdtree.core.models import Builder, FieldSource, NodeState, Scope, Surface
from cmdtree.core.nodes import ChoiceNode, Field, FieldKind, SequenceNode
from cmdtree.core.protocols import Prompter
from cmdtree.exceptions import (
    ArgumentParseError,
    MissingArgumentError,
    TreeDefinitionError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class Resolution:
    """A frozen scope plus whether the user was asked for anything."""

    __slots__ = ("scope", "prompted")

    def __init__(self, scope: Scope, prompted: bool) -> None:
        self.scope: Scope = scope
        self.prompted: bool = prompted


class InteractiveResolver:
    """Fill, validate and freeze one node at a time.

    Parameters
    ----------
    prompter:
        Interactive input source.  Required when *interactive* is true.
    interactive:
        When false, nothing is ever prompted: missing values and
        validation failures are terminal.
    """

    def __init__(self, prompter: Prompter | None, *, interactive: bool) -> None:
        if interactive and prompter is None:
            raise ValueError("an interactive resolver needs a prompter")
        self._prompter: Prompter | None = prompter
        self._interactive: bool = interactive

    @property
    def interactive(self) -> bool:
        return self._interactive

    # ------------------------------------------------------------------
    # Sequence nodes
    # ------------------------------------------------------------------

    def resolve(
        self,
        node: SequenceNode,
        parent_context: Any,
        surface: Surface | None,
    ) -> Resolution:
        """Return the validated scope of *node*.

        Raises
        ------
        MissingArgumentError
            Non-interactive mode and a required value was not supplied.
        ValidationError
            Non-interactive mode (or nothing left to re-prompt) and the
            values break a constraint.
        """
        builder = initial_builder(node, parent_context, surface)
        rejected: dict[str, Any] = {}
        prompted = False
        state = NodeState.NEEDS_INPUT

        while state is not NodeState.DONE:
            if state is NodeState.NEEDS_INPUT:
                for field in node.fields:
                    if builder.is_set(field.name):
                        continue
                    value, asked = self._obtain(
                        node, field, parent_context, builder, rejected.pop(field.name, None)
                    )
                    prompted = prompted or asked
                    builder.set(
                        field.name,
                        value,
                        FieldSource.PROMPT if asked else FieldSource.DERIVED,
                    )
                state = NodeState.VALIDATING

            elif state is NodeState.VALIDATING:
                try:
                    self._validate(node, surface, builder)
                except ValidationError as exc:
                    offending = self._retryable(node, exc)
                    if not self._interactive or not offending:
                        raise
                    logger.debug("Validation of %r failed, re-prompting %s", node.id, offending)
                    self._report(exc)
                    for name in offending:
                        value = builder.get(name)
                        if value is not None:
                            rejected[name] = value
                        builder.unset(name)
                    state = NodeState.NEEDS_INPUT
                else:
                    state = NodeState.DONE

        return Resolution(builder.freeze(), prompted)

    def _obtain(
        self,
        node: SequenceNode,
        field: Field,
        parent_context: Any,
        builder: Builder,
        rejected: Any,
    ) -> tuple[Any, bool]:
        """Return ``(value, prompted)`` for a field nothing has supplied."""
        if field.kind is FieldKind.FLAG:
            return False, False
        if not self._interactive:
            if field.optional:
                return None, False
            raise MissingArgumentError(
                f"Missing required argument {field.flag} for {node.id!r}.",
                hint="Supply it on the command line or run interactively.",
            )
        return self._prompt_field(field, parent_context, builder, rejected), True

    def _prompt_field(
        self,
        field: Field,
        parent_context: Any,
        builder: Builder,
        rejected: Any,
    ) -> Any:
        """Prompt until the answer parses and passes the field check."""
        assert self._prompter is not None
        if rejected is not None:
            suggestion: str | None = field.format(rejected)
        elif field.suggest is not None:
            suggestion = field.suggest(parent_context, builder.snapshot())
        else:
            suggestion = None

        while True:
            if field.choices:
                answer = self._prompter.select(
                    field.prompt,
                    [(choice, choice) for choice in field.choices],
                )
            else:
                answer = self._prompter.text(field.prompt, default=suggestion)

            if not answer.strip():
                if field.optional:
                    return None
                self._prompter.error(f"A value for {field.name} is required.")
                continue
            try:
                value = field.parse(answer)
            except (ValueError, TypeError) as exc:
                logger.debug("Could not parse %r for field %r: %s", answer, field.name, exc)
                self._prompter.error(f"Invalid value for {field.name}: {exc}")
                continue
            try:
                if field.validate is not None:
                    field.validate(value)
            except ValidationError as exc:
                self._report(exc)
                suggestion = answer
                continue
            return value

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(node: SequenceNode, surface: Surface | None, builder: Builder) -> None:
        """Run per-field checks, then the node's cross-field check."""
        for field in node.fields:
            value = builder.get(field.name)
            if field.validate is None or value is None:
                continue
            try:
                field.validate(value)
            except ValidationError as exc:
                if not exc.fields:
                    exc.fields = (field.name,)
                raise
        if node.validate is not None:
            node.validate(surface, builder)

    @staticmethod
    def _retryable(node: SequenceNode, exc: ValidationError) -> tuple[str, ...]:
        """Names of the offending fields that can be asked for again."""
        names = exc.fields or tuple(field.name for field in node.fields)
        retryable = []
        for name in names:
            try:
                field = node.field(name)
            except KeyError:
                raise TreeDefinitionError(
                    f"Validator of {node.id!r} blamed unknown field {name!r}."
                ) from exc
            if field.kind is not FieldKind.FLAG:
                retryable.append(name)
        return tuple(retryable)

    def _report(self, exc: ValidationError) -> None:
        assert self._prompter is not None
        message = exc.message if not exc.hint else f"{exc.message} ({exc.hint})"
        self._prompter.error(message)

    # ------------------------------------------------------------------
    # Choice nodes
    # ------------------------------------------------------------------

    def select(
        self,
        node: ChoiceNode,
        parent_context: Any,
        surface: Surface | None,
    ) -> Resolution:
        """Return the scope ``{"variant": name}`` of *node*.

        Raises
        ------
        ArgumentParseError
            A variant that does not exist was named.
        MissingArgumentError
            Non-interactive mode and no variant was named or derived.
        """
        if surface is not None and surface.selected is not None:
            name = surface.selected
            if name not in node.names:
                raise ArgumentParseError(
                    f"Unknown choice {name!r} for {node.id!r}.",
                    hint=f"Choose one of: {', '.join(node.names)}.",
                )
            return Resolution(Scope(node.id, {"variant": name}), False)

        if node.default is not None:
            name = node.default(parent_context)
            if name is not None:
                if name not in node.names:
                    raise TreeDefinitionError(
                        f"Default of {node.id!r} names unknown variant {name!r}."
                    )
                return Resolution(Scope(node.id, {"variant": name}), False)

        if not self._interactive:
            raise MissingArgumentError(
                f"Missing choice for {node.id!r}.",
                hint=f"Choose one of: {', '.join(node.names)}.",
            )

        assert self._prompter is not None
        name = self._prompter.select(
            node.message,
            [(_choice_label(node, variant.name), variant.name) for variant in node.variants],
        )
        if name not in node.names:
            raise ArgumentParseError(f"Unknown choice {name!r} for {node.id!r}.")
        return Resolution(Scope(node.id, {"variant": name}), True)


# ---------------------------------------------------------------------------
# Presentation helpers (pure)
# ---------------------------------------------------------------------------

def _choice_label(node: ChoiceNode, name: str) -> str:
    """Build the ``"name   - description"`` label shown in the menu."""
    width = max(len(variant.name) for variant in node.variants)
    variant = node.variant(name)
    return f"{variant.name:<{width}}  - {variant.description}"
