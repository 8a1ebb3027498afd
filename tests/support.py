"""Test doubles and the scenario tree shared across the test suite.

The scenario tree mirrors a typical invocation path:

    root [--verbose] node-a --x INT choice-b {variant-b1 --y INT | variant-b2 --z TEXT}
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from cmdtree.core.models import Scope
from cmdtree.core.nodes import (
    ChoiceNode,
    Field,
    FieldKind,
    NamedArg,
    SequenceNode,
    Subcommand,
    Variant,
)
from cmdtree.core.tree import CommandTree
from cmdtree.exceptions import ValidationError


# ---------------------------------------------------------------------------
# Scripted prompter
# ---------------------------------------------------------------------------

class ScriptedPrompter:
    """Prompter answering from a fixed script and recording every call."""

    def __init__(self, answers: Sequence[str] = ()) -> None:
        self.answers: list[str] = list(answers)
        self.prompts: list[str] = []
        self.defaults: list[str | None] = []
        self.choices: list[list[tuple[str, str]]] = []
        self.errors: list[str] = []

    def text(self, message: str, *, default: str | None = None) -> str:
        self.prompts.append(message)
        self.defaults.append(default)
        return self._next(message)

    def select(self, message: str, choices: Sequence[tuple[str, str]]) -> str:
        self.prompts.append(message)
        self.choices.append(list(choices))
        return self._next(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def _next(self, message: str) -> str:
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message!r}")
        return self.answers.pop(0)


# ---------------------------------------------------------------------------
# Scenario tree
# ---------------------------------------------------------------------------
#
#   root [--verbose]
#     node-a --x INT  choice-b  {variant-b1 --y INT | variant-b2 --z TEXT}
#     other

@dataclass(frozen=True)
class Config:
    name: str = "test"


@dataclass(frozen=True)
class GlobalCtx:
    config: Config
    verbose: bool


@dataclass(frozen=True)
class ACtx:
    global_ctx: GlobalCtx
    x: int


@dataclass(frozen=True)
class LeafCtx:
    x: int
    y: int


def _x_below_100(value: int) -> None:
    if value >= 100:
        raise ValidationError(f"x must be below 100, got {value}.")


@dataclass
class Scenario:
    tree: CommandTree
    calls: list[Any] = field(default_factory=list)


def build_scenario_tree(calls: list[Any]) -> CommandTree:
    def record(context: Any) -> int | None:
        calls.append(context)
        return None

    return CommandTree(
        "root",
        [
            SequenceNode(
                "root",
                fields=(Field("verbose", kind=FieldKind.FLAG),),
                child=Subcommand("top"),
                input_context=Config,
                output_context=GlobalCtx,
                context=lambda config, scope: GlobalCtx(config, scope.verbose),
            ),
            ChoiceNode(
                "top",
                message="Choose a command",
                variants=(
                    Variant("node-a", "Work on A", "node-a"),
                    Variant("other", "Something else", "other"),
                ),
                input_context=GlobalCtx,
            ),
            SequenceNode(
                "node-a",
                fields=(
                    Field("x", message="value of x?", parse=int, validate=_x_below_100),
                ),
                child=NamedArg("choice-b", "choice-b"),
                input_context=GlobalCtx,
                output_context=ACtx,
                context=lambda parent, scope: ACtx(parent, scope.x),
            ),
            ChoiceNode(
                "choice-b",
                message="Choose a B variant",
                variants=(
                    Variant("variant-b1", "First B", "variant-b1"),
                    Variant("variant-b2", "Second B", "variant-b2"),
                ),
                input_context=ACtx,
            ),
            SequenceNode(
                "variant-b1",
                fields=(Field("y", message="value of y?", parse=int),),
                action=record,
                input_context=ACtx,
                output_context=LeafCtx,
                context=lambda parent, scope: LeafCtx(parent.x, scope.y),
            ),
            SequenceNode(
                "variant-b2",
                fields=(Field("z", message="value of z?"),),
                action=record,
                input_context=ACtx,
            ),
            SequenceNode("other", action=record, input_context=GlobalCtx),
        ],
        root_context=Config,
    )


SCENARIO_A_ARGV: list[str] = [
    "--verbose", "node-a", "--x=1", "choice-b", "variant-b1", "--y=2",
]


def scope(node_id: str, **values: Any) -> Scope:
    return Scope(node_id, values)
