"""Tests for the argparse command-line surface (cli/surface.py)."""

from __future__ import annotations

import argparse
from typing import Any

import pytest

from cmdtree.cli.surface import build_parser, parse_surface
from cmdtree.core.nodes import ChoiceNode, Field, FieldKind, SequenceNode, Subcommand, Variant
from cmdtree.core.tree import CommandTree
from cmdtree.exceptions import ArgumentParseError, TreeDefinitionError
from support import SCENARIO_A_ARGV


def _leaf_tree(*fields: Field) -> CommandTree:
    return CommandTree("leaf", [SequenceNode("leaf", fields=fields, action=lambda _ctx: None)])


# ---------------------------------------------------------------------------
# Parsing into surfaces
# ---------------------------------------------------------------------------

class TestParseSurface:
    def test_full_path(self, scenario: Any) -> None:
        surface = parse_surface(scenario.tree, SCENARIO_A_ARGV)
        assert surface.node_id == "root"
        assert dict(surface.values) == {"verbose": True}

        top = surface.child
        assert top is not None and top.selected == "node-a"
        node_a = top.child
        assert node_a is not None and dict(node_a.values) == {"x": 1}
        choice_b = node_a.child
        assert choice_b is not None and choice_b.selected == "variant-b1"
        leaf = choice_b.child
        assert leaf is not None and dict(leaf.values) == {"y": 2}

    def test_empty_argv_supplies_nothing(self, scenario: Any) -> None:
        surface = parse_surface(scenario.tree, [])
        assert dict(surface.values) == {}
        top = surface.child
        assert top is not None
        assert top.selected is None
        assert top.child is None

    def test_omitted_keyword_stops_surface(self, scenario: Any) -> None:
        surface = parse_surface(scenario.tree, ["node-a", "--x", "3"])
        node_a = surface.child.child  # type: ignore[union-attr]
        assert node_a is not None
        assert dict(node_a.values) == {"x": 3}
        assert node_a.child is None

    def test_unknown_variant(self, scenario: Any) -> None:
        with pytest.raises(ArgumentParseError, match="invalid choice"):
            parse_surface(scenario.tree, ["node-z"])

    def test_bad_value_names_field(self, scenario: Any) -> None:
        argv = ["node-a", "--x=1", "choice-b", "variant-b1", "--y=abc"]
        with pytest.raises(ArgumentParseError, match="invalid y value: 'abc'") as exc_info:
            parse_surface(scenario.tree, argv, prog="prog")
        assert exc_info.value.hint is not None
        assert "--help" in exc_info.value.hint

    def test_unknown_option(self, scenario: Any) -> None:
        with pytest.raises(ArgumentParseError, match="unrecognized arguments"):
            parse_surface(scenario.tree, ["--nope"])


# ---------------------------------------------------------------------------
# Field kinds
# ---------------------------------------------------------------------------

class TestFieldKinds:
    def test_flag_field(self) -> None:
        tree = _leaf_tree(Field("dry_run", kind=FieldKind.FLAG))
        assert dict(parse_surface(tree, ["--dry-run"]).values) == {"dry_run": True}
        assert dict(parse_surface(tree, []).values) == {}

    def test_positional_field(self) -> None:
        tree = _leaf_tree(Field("path", positional=True))
        assert dict(parse_surface(tree, ["a.txt"]).values) == {"path": "a.txt"}
        assert dict(parse_surface(tree, []).values) == {}

    def test_field_choices(self) -> None:
        tree = _leaf_tree(Field("color", choices=("red", "blue")))
        assert dict(parse_surface(tree, ["--color", "red"]).values) == {"color": "red"}
        with pytest.raises(ArgumentParseError, match="invalid choice: 'green'"):
            parse_surface(tree, ["--color", "green"])

    def test_help_exits_cleanly(self, scenario: Any, capsys: Any) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_surface(scenario.tree, ["node-a", "--help"], prog="prog")
        assert exc_info.value.code == 0
        assert "--x X" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Parser construction
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_same_field_name_on_different_nodes(self) -> None:
        tree = CommandTree(
            "root",
            [
                SequenceNode("root", fields=(Field("name"),), child=Subcommand("pick")),
                ChoiceNode("pick", "pick", (Variant("leaf", "leaf", "leaf"),)),
                SequenceNode("leaf", fields=(Field("name"),), action=lambda _ctx: None),
            ],
        )
        surface = parse_surface(tree, ["--name", "outer", "leaf", "--name", "inner"])
        assert surface.values["name"] == "outer"
        assert surface.child.child.values["name"] == "inner"  # type: ignore[union-attr]

    def test_conflicting_options(self) -> None:
        tree = _leaf_tree(Field("help"))
        with pytest.raises(TreeDefinitionError, match="Conflicting command-line options"):
            build_parser(tree)

    def test_parser_is_argparse(self, scenario: Any) -> None:
        assert isinstance(build_parser(scenario.tree), argparse.ArgumentParser)
