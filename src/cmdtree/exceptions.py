"""Custom exception hierarchy for cmdtree.

All exceptions raised by the tree machinery inherit from
:class:`CmdTreeError`.  Errors raised while walking the tree carry the
``path`` of node ids leading to the failing node so the user can see
which step of the chain went wrong.

Hierarchy
---------
CmdTreeError
├── TreeDefinitionError
├── ArgumentParseError
│   └── MissingArgumentError
├── ValidationError
├── LeafActionError
├── InputCancelledError
├── MissingDependencyError
└── ConfigError
"""

from __future__ import annotations

from collections.abc import Sequence


class CmdTreeError(Exception):
    """Base exception for all cmdtree errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        path: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""
        self.path: tuple[str, ...] = tuple(path)
        """Node ids from the root down to the node that failed."""

    def at(self, path: Sequence[str]) -> CmdTreeError:
        """Record *path* unless a deeper location was already recorded."""
        if not self.path:
            self.path = tuple(path)
        return self

    @property
    def location(self) -> str:
        """Human-readable ``root > child > leaf`` rendering of :attr:`path`."""
        return " > ".join(self.path)


# --- Tree definition -------------------------------------------------------

class TreeDefinitionError(CmdTreeError):
    """Raised when a command tree is malformed."""


# --- Parsing ---------------------------------------------------------------

class ArgumentParseError(CmdTreeError):
    """Raised when a supplied argument cannot be parsed or dispatched."""


class MissingArgumentError(ArgumentParseError):
    """Raised when a required value is absent and prompting is disabled."""


# --- Validation ------------------------------------------------------------

class ValidationError(CmdTreeError):
    """Raised when a parsed value violates a semantic constraint.

    ``fields`` names the offending fields.  An empty tuple means the
    whole node is at fault.
    """

    def __init__(
        self,
        message: str,
        *,
        fields: Sequence[str] = (),
        hint: str | None = None,
        path: Sequence[str] = (),
    ) -> None:
        super().__init__(message, hint=hint, path=path)
        self.fields: tuple[str, ...] = tuple(fields)


# --- Leaf actions ----------------------------------------------------------

class LeafActionError(CmdTreeError):
    """Raised by a leaf action to report a domain failure."""


# --- Interaction -----------------------------------------------------------

class InputCancelledError(CmdTreeError):
    """Raised when the user dismisses a prompt instead of answering."""


# --- Environment / configuration -------------------------------------------

class MissingDependencyError(CmdTreeError):
    """Raised when an optional UI dependency is not installed."""


class ConfigError(CmdTreeError):
    """Raised when the settings file cannot be read or is malformed."""
