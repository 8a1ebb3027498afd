"""Interactive prompts for the CLI layer.

This module is responsible for:

* Asking for one line of text via questionary, pre-filled when a
  suggestion exists.
* Presenting a selection list via questionary arrow keys.
* Rendering parse and validation problems through the Rich console.

It satisfies :class:`~cmdtree.core.protocols.Prompter`; the core layer
never imports it.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from cmdtree.cli.console import console, escape
from cmdtree.exceptions import InputCancelledError, MissingDependencyError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


_CANCEL_HINT = "Answer the prompt, or pass the value as a flag to skip it."


class QuestionaryPrompter:
    """Blocking terminal prompter backed by questionary.

    ``.ask()`` returns ``None`` when the user presses Ctrl+C or Esc; that
    is reported as :class:`InputCancelledError`.
    """

    def text(self, message: str, *, default: str | None = None) -> str:
        questionary = _import_questionary()
        answer: str | None = questionary.text(message, default=default or "").ask()
        if answer is None:
            raise InputCancelledError("Input cancelled.", hint=_CANCEL_HINT)
        return answer

    def select(self, message: str, choices: Sequence[tuple[str, str]]) -> str:
        questionary = _import_questionary()

        # Each title maps back to the value handed to the resolver.
        options = [
            questionary.Choice(title=title, value=value)
            for title, value in choices
        ]
        selected: str | None = questionary.select(
            message,
            choices=options,
            use_arrow_keys=True,
            use_shortcuts=False,
        ).ask()
        if selected is None:
            raise InputCancelledError("No option selected.", hint=_CANCEL_HINT)
        return selected

    def error(self, message: str) -> None:
        console.print(f"[bold red]Error:[/bold red] {escape(message)}")
