"""Protocols (interfaces) consumed by the core layer.

These define the contracts that the CLI layer (or tests) must satisfy.
Core code depends ONLY on these protocols — never on a concrete
terminal library — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol


class Prompter(Protocol):
    """Contract for the blocking, line-oriented interactive input source.

    Implementations raise :class:`~cmdtree.exceptions.InputCancelledError`
    when the user dismisses a prompt, and let ``KeyboardInterrupt``
    propagate untouched.
    """

    def text(self, message: str, *, default: str | None = None) -> str:
        """Ask for one line of text, pre-filled with *default* when given."""
        ...  # pragma: no cover

    def select(self, message: str, choices: Sequence[tuple[str, str]]) -> str:
        """Ask the user to pick one of ``(title, value)`` *choices*.

        Returns the ``value`` of the chosen entry.
        """
        ...  # pragma: no cover

    def error(self, message: str) -> None:
        """Surface a parse or validation problem before re-prompting."""
        ...  # pragma: no cover


class LeafAction(Protocol):
    """Contract for the external action run at the end of a path.

    The action receives the fully derived context.  Returning ``None``
    means success; an ``int`` is used as the process exit code.
    """

    def __call__(self, context: Any) -> int | None:
        ...  # pragma: no cover
