"""Tests for the depth-first tree walk (core/walker.py).

Covers context derivation, choice dispatch, error paths and leaf exit
codes, using the scenario tree from ``support``.
"""

from __future__ import annotations

from typing import Any

import pytest

from cmdtree.core.models import Surface
from cmdtree.core.nodes import Field, NamedArg, SequenceNode
from cmdtree.core.tree import CommandTree
from cmdtree.core.walker import TreeWalker, derive_context, run_tree
from cmdtree.exceptions import (
    LeafActionError,
    MissingArgumentError,
    TreeDefinitionError,
    ValidationError,
)
from support import ACtx, Config, GlobalCtx, LeafCtx, ScriptedPrompter, scope


def _surface_a(y: int | None = 2, x: int = 1) -> Surface:
    """Surface equivalent to ``--verbose node-a --x=1 choice-b variant-b1 --y=2``."""
    leaf_values = {} if y is None else {"y": y}
    return Surface(
        "root",
        values={"verbose": True},
        child=Surface(
            "top",
            selected="node-a",
            child=Surface(
                "node-a",
                values={"x": x},
                child=Surface(
                    "choice-b",
                    selected="variant-b1",
                    child=Surface("variant-b1", values=leaf_values),
                ),
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Context derivation
# ---------------------------------------------------------------------------

class TestDeriveContext:
    def test_pass_through_without_mapping(self) -> None:
        node = SequenceNode("n", action=lambda _ctx: None)
        parent = object()
        assert derive_context(node, parent, scope("n")) is parent

    def test_deterministic(self) -> None:
        node = SequenceNode(
            "n",
            fields=(Field("x", parse=int),),
            action=lambda _ctx: None,
            input_context=GlobalCtx,
            output_context=ACtx,
            context=lambda parent, s: ACtx(parent, s.x),
        )
        parent = GlobalCtx(Config(), False)
        first = derive_context(node, parent, scope("n", x=3))
        second = derive_context(node, parent, scope("n", x=3))
        assert first == second == ACtx(parent, 3)

    def test_wrong_type_is_structural(self) -> None:
        node = SequenceNode(
            "n",
            action=lambda _ctx: None,
            output_context=ACtx,
            context=lambda parent, s: "not a context",
        )
        with pytest.raises(TreeDefinitionError, match="must be ACtx, got str"):
            derive_context(node, None, scope("n"))


# ---------------------------------------------------------------------------
# Full walks
# ---------------------------------------------------------------------------

class TestWalk:
    def test_all_flags_reach_leaf_with_derived_context(self, scenario: Any) -> None:
        prompter = ScriptedPrompter()
        result = run_tree(scenario.tree, _surface_a(), Config(), prompter=prompter)
        assert result.exit_code == 0
        assert scenario.calls == [LeafCtx(x=1, y=2)]
        assert prompter.prompts == []
        assert not result.prompted

    def test_steps_record_every_committed_node(self, scenario: Any) -> None:
        result = run_tree(scenario.tree, _surface_a(), Config(), interactive=False)
        assert [step.node_id for step in result.steps] == [
            "root", "top", "node-a", "choice-b", "variant-b1",
        ]
        assert result.steps[2].scope == scope("node-a", x=1)

    def test_omitted_leaf_field_prompted_once(self, scenario: Any) -> None:
        prompter = ScriptedPrompter(["5"])
        result = run_tree(scenario.tree, _surface_a(y=None), Config(), prompter=prompter)
        assert prompter.prompts == ["value of y?"]
        assert scenario.calls == [LeafCtx(x=1, y=5)]
        assert result.prompted
        assert result.steps[-1].prompted

    def test_fully_interactive_walk(self, scenario: Any) -> None:
        prompter = ScriptedPrompter(["node-a", "4", "variant-b2", "hello"])
        run_tree(scenario.tree, None, Config(), prompter=prompter)
        assert prompter.prompts == [
            "Choose a command", "value of x?", "Choose a B variant", "value of z?",
        ]
        assert scenario.calls == [ACtx(GlobalCtx(Config(), False), 4)]

    def test_unselected_variant_never_visited(self, scenario: Any) -> None:
        prompter = ScriptedPrompter(["other"])
        result = run_tree(scenario.tree, None, Config(), prompter=prompter)
        assert [step.node_id for step in result.steps] == ["root", "top", "other"]
        assert prompter.prompts == ["Choose a command"]

    def test_surface_for_other_variant_is_ignored(self, scenario: Any) -> None:
        surface = Surface(
            "root",
            child=Surface("top", selected="other", child=Surface("other")),
        )
        prompter = ScriptedPrompter()
        run_tree(scenario.tree, surface, Config(), prompter=prompter)
        assert scenario.calls == [GlobalCtx(Config(), False)]

    def test_walker_can_be_reused(self, scenario: Any) -> None:
        walker = TreeWalker(scenario.tree, interactive=False)
        walker.walk(_surface_a(y=2), Config())
        walker.walk(_surface_a(y=3), Config())
        assert scenario.calls == [LeafCtx(1, 2), LeafCtx(1, 3)]
        assert len(walker.steps) == 5


# ---------------------------------------------------------------------------
# Errors along the path
# ---------------------------------------------------------------------------

class TestWalkErrors:
    def test_validation_failure_aborts_before_descending(self, scenario: Any) -> None:
        walker = TreeWalker(scenario.tree, interactive=False)
        with pytest.raises(ValidationError, match="x must be below 100") as exc_info:
            walker.walk(_surface_a(x=150), Config())
        assert exc_info.value.path == ("root", "top", "node-a")
        assert exc_info.value.fields == ("x",)
        assert [step.node_id for step in walker.steps] == ["root", "top"]
        assert scenario.calls == []

    def test_interactive_validation_retry_keeps_ancestors(self, scenario: Any) -> None:
        prompter = ScriptedPrompter(["99"])
        walker = TreeWalker(scenario.tree, prompter=prompter)
        walker.walk(_surface_a(x=150), Config())
        assert prompter.defaults == ["150"]
        assert walker.steps[0].scope == scope("root", verbose=True)
        assert scenario.calls == [LeafCtx(x=99, y=2)]

    def test_missing_value_reports_path(self, scenario: Any) -> None:
        with pytest.raises(MissingArgumentError, match="--y") as exc_info:
            run_tree(scenario.tree, _surface_a(y=None), Config(), interactive=False)
        assert exc_info.value.location == "root > top > node-a > choice-b > variant-b1"

    def test_missing_choice_reports_path(self, scenario: Any) -> None:
        surface = Surface("root", values={"verbose": False})
        with pytest.raises(MissingArgumentError) as exc_info:
            run_tree(scenario.tree, surface, Config(), interactive=False)
        assert exc_info.value.path == ("root", "top")

    def test_context_of_wrong_type_fails_at_node(self) -> None:
        tree = CommandTree(
            "root",
            [
                SequenceNode(
                    "root",
                    child=NamedArg("go", "leaf"),
                    output_context=int,
                    context=lambda parent, s: "oops",
                ),
                SequenceNode("leaf", action=lambda _ctx: None, input_context=int),
            ],
        )
        with pytest.raises(TreeDefinitionError) as exc_info:
            run_tree(tree, None, None, interactive=False)
        assert exc_info.value.path == ("root",)


# ---------------------------------------------------------------------------
# Leaf actions
# ---------------------------------------------------------------------------

def _single_leaf(action: Any) -> CommandTree:
    return CommandTree("leaf", [SequenceNode("leaf", action=action)])


class TestLeafAction:
    def test_none_means_success(self) -> None:
        result = run_tree(_single_leaf(lambda _ctx: None), None, None, interactive=False)
        assert result.exit_code == 0

    def test_int_result_is_exit_code(self) -> None:
        result = run_tree(_single_leaf(lambda _ctx: 3), None, None, interactive=False)
        assert result.exit_code == 3

    def test_receives_root_context(self) -> None:
        seen: list[Any] = []
        run_tree(_single_leaf(seen.append), None, "ctx", interactive=False)
        assert seen == ["ctx"]

    def test_leaf_error_gets_path(self) -> None:
        def fail(_ctx: Any) -> None:
            raise LeafActionError("boom")

        with pytest.raises(LeafActionError) as exc_info:
            run_tree(_single_leaf(fail), None, None, interactive=False)
        assert exc_info.value.path == ("leaf",)

    def test_foreign_exception_propagates_unchanged(self) -> None:
        def fail(_ctx: Any) -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            run_tree(_single_leaf(fail), None, None, interactive=False)

    def test_keyboard_interrupt_propagates(self) -> None:
        def interrupt(_ctx: Any) -> None:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            run_tree(_single_leaf(interrupt), None, None, interactive=False)
