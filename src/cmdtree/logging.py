"""Logging bootstrap used by the CLI entry point.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the process entry point.
"""

from __future__ import annotations

import logging

LOG_FORMAT: str = "%(name)s | %(message)s"


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Configure the root logger once.

    Uses ``rich.logging.RichHandler`` on stderr when Rich is installed,
    plain ``logging.basicConfig`` otherwise.  Existing handlers are kept
    so embedding applications are not disrupted.

    Usage example
    -------------
        configure_logging("DEBUG")
        logging.getLogger(__name__).debug("hello")
    """
    if isinstance(level, str):
        level = level.upper()

    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        logging.basicConfig(level=level, format="%(levelname)s | " + LOG_FORMAT)
        return

    from cmdtree.cli.console import get_rich_console

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[RichHandler(console=get_rich_console(), show_path=False)],
    )
