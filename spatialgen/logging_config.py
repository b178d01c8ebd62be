"""Logging setup for spatialgen.

Library modules obtain loggers through get_logger(); the command line
front end calls setup_logging() once to attach a rich console handler.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "spatialgen"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the spatialgen namespace.

    Args:
        name: Module name, usually __name__.

    Returns:
        Logger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: int = logging.WARNING, console: Optional[Console] = None
) -> logging.Logger:
    """Attach a rich handler to the spatialgen root logger.

    Calling this repeatedly replaces the handler instead of stacking them.

    Args:
        level: Logging level for spatialgen loggers.
        console: Console to log to; defaults to stderr.

    Returns:
        The configured root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=level <= logging.DEBUG,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    return logger
