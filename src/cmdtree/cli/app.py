"""CLI application entry point and error boundary for cmdtree.

This module is the **sole error boundary** for the entire application.
It catches :class:`~cmdtree.exceptions.CmdTreeError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No tree logic lives here — parsing is delegated to ``cli.surface`` and
  the walk to ``core.walker``.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from cmdtree.cli import exit_codes
from cmdtree.cli.console import console, escape
from cmdtree.cli.surface import (
    RaisingArgumentParser,
    add_tree_arguments,
    surface_from_namespace,
)
from cmdtree.config import Settings, load_settings
from cmdtree.core.protocols import Prompter
from cmdtree.core.replay import to_cli_args
from cmdtree.core.tree import CommandTree
from cmdtree.core.walker import TreeWalker
from cmdtree.exceptions import (
    ArgumentParseError,
    CmdTreeError,
    InputCancelledError,
    ValidationError,
)
from cmdtree.logging import configure_logging
from cmdtree.version import __version__

logger = logging.getLogger(__name__)

PROG: str = "cmdtree"

_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser(tree: CommandTree, prog: str) -> argparse.ArgumentParser:
    """Construct the top-level parser: global options, then the tree."""
    parser = RaisingArgumentParser(
        prog=prog,
        description="Fill a command tree from flags or interactive prompts.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        dest="_config",
        type=Path,
        default=None,
        metavar="PATH",
        help="YAML settings file (default: $CMDTREE_CONFIG).",
    )
    parser.add_argument(
        "--log-level",
        dest="_log_level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default=None,
        help="Logging verbosity on stderr.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--interactive",
        dest="_interactive",
        action="store_true",
        default=None,
        help="Always prompt for missing values.",
    )
    mode.add_argument(
        "--non-interactive",
        dest="_interactive",
        action="store_false",
        default=None,
        help="Never prompt; missing or invalid values are errors.",
    )
    add_tree_arguments(parser, tree)
    return parser


def _resolve_interactive(flag: bool | None, settings: Settings) -> bool:
    """Flag > settings > whether stdin is a terminal."""
    if flag is not None:
        return flag
    if settings.interactive == "always":
        return True
    if settings.interactive == "never":
        return False
    return sys.stdin.isatty()


def _print_command(prog: str, tree: CommandTree, walker: TreeWalker) -> None:
    """Show the fully-scripted equivalent of the committed steps."""
    if not walker.steps:
        return
    command = shlex.join([prog, *to_cli_args(tree, walker.steps)])
    console.print(
        "\nHere is your console command if you need to script it or re-run:\n"
        f"    [yellow]{escape(command)}[/yellow]\n"
    )


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    tree: CommandTree | None = None,
    root_context: Any = None,
    prompter: Prompter | None = None,
    interactive: bool | None = None,
    prog: str = PROG,
) -> int:
    """Parse *argv*, walk the tree to a leaf and return the exit code.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.
    tree:
        Command tree to run.  Defaults to the bundled sample tree.
    root_context:
        Context handed to the root node.  Defaults to the loaded
        :class:`~cmdtree.config.Settings`.
    prompter:
        Interactive input source.  Defaults to questionary.
    interactive:
        Force the mode; otherwise flags, settings and the terminal decide.

    Returns
    -------
    int
        OS process exit code.
    """
    if tree is None:
        from cmdtree.cli.demo import build_demo_tree

        tree = build_demo_tree()

    parser = _build_parser(tree, prog)
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))

    settings = load_settings(args._config)
    configure_logging(args._log_level or settings.log_level)
    if root_context is None:
        root_context = settings

    if interactive is None:
        interactive = _resolve_interactive(args._interactive, settings)
    if interactive and prompter is None:
        from cmdtree.cli.prompter import QuestionaryPrompter

        prompter = QuestionaryPrompter()

    surface = surface_from_namespace(tree, args)
    walker = TreeWalker(tree, prompter=prompter, interactive=interactive)
    logger.debug("Walking %r (interactive=%s)", tree.root, interactive)

    try:
        result = walker.walk(surface, root_context)
    except InputCancelledError:
        raise
    except CmdTreeError:
        if interactive and settings.show_command:
            _print_command(prog, tree, walker)
        raise

    if result.prompted and settings.show_command:
        _print_command(prog, tree, walker)
    return result.exit_code


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def exit_code_for(exc: CmdTreeError) -> int:
    """Map a known error to its process exit code."""
    if isinstance(exc, InputCancelledError):
        return exit_codes.KEYBOARD_INTERRUPT
    if isinstance(exc, ArgumentParseError):
        return exit_codes.USAGE_ERROR
    if isinstance(exc, ValidationError):
        return exit_codes.VALIDATION_ERROR
    return exit_codes.GENERAL_ERROR


def cli(**kwargs: Any) -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.  Keyword arguments
    are forwarded to :func:`main` so applications can serve their own
    tree through the same boundary.
    """
    try:
        code = main(**kwargs)
        sys.exit(code)
    except CmdTreeError as exc:
        if exc.path:
            console.print(f"[dim]at {escape(exc.location)}[/dim]")
        console.print(f"[bold red]Error:[/bold red] {escape(exc.message)}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_code_for(exc))
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
