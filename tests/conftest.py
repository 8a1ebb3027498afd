"""Shared pytest fixtures and configuration for the cmdtree test suite.

Guidelines
----------
* No real terminal interaction — prompts go through ``ScriptedPrompter``.
* questionary and Rich are mocked or hidden when a test targets them.
* Core tests must be pure — no side effects.
"""

from __future__ import annotations

from typing import Any

import pytest

from support import Scenario, build_scenario_tree


@pytest.fixture
def scenario() -> Scenario:
    calls: list[Any] = []
    return Scenario(tree=build_scenario_tree(calls), calls=calls)
