"""
Logging setup for the mxm-branchgraph CLI.

Library modules only create loggers under ``mxm.branchgraph``; handlers are
installed here, once, by the CLI. Diagnostics go to stderr so that stdout
carries nothing but the rendered graph.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["LOG_ENV", "level_for", "setup_logging"]

LOG_ENV = "MXM_BRANCHGRAPH_LOG"

_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG]


def level_for(verbosity: int) -> int:
    """
    Map a verbosity count to a logging level.

    -1 (quiet) -> ERROR, 0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
    """
    index = max(0, min(verbosity + 1, len(_LEVELS) - 1))
    return _LEVELS[index]


def setup_logging(verbosity: int = 0) -> logging.Logger:
    """
    Attach a stderr Rich handler to the ``mxm.branchgraph`` logger.

    The environment variable ``MXM_BRANCHGRAPH_LOG`` (e.g. ``debug``) takes
    precedence over `verbosity`. Calling this again replaces the handler.
    """
    level = level_for(verbosity)
    override = os.environ.get(LOG_ENV, "").strip().upper()
    if override:
        named = logging.getLevelName(override)
        if isinstance(named, int):
            level = named

    logger = logging.getLogger("mxm.branchgraph")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
