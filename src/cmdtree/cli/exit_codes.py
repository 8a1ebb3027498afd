"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit — the leaf action completed without error."""

GENERAL_ERROR: int = 1
"""A known CmdTreeError (leaf failure, config, environment) was caught."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

USAGE_ERROR: int = 64
"""Parse-level error: bad flag value, unknown choice, missing argument (EX_USAGE)."""

VALIDATION_ERROR: int = 65
"""A value failed a semantic constraint in non-interactive mode (EX_DATAERR)."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C or dismissed a prompt.  POSIX convention (128 + SIGINT=2)."""
