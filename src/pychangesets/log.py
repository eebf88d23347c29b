"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route pychangesets log records to a rich handler on stderr.

    Args:
        verbose: Show debug records, including external command output.
        console: Console to write to. Defaults to a new stderr console.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        show_time=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("pychangesets")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
