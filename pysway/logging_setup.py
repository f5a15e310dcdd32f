"""Logging for pysway.

Library modules log to children of the ``pysway`` logger (``pysway.ipc``,
``pysway.config``...) and leave handlers to the application: the package
logger only carries a `NullHandler`, so a caught `ChannelError` prints
nothing unless logging was configured.

`init_logger` is the command line setup: colored messages on stderr and an
optional log file, verbose when ``--debug`` is given or ``DEBUG`` is set.
"""

import logging
import os
from collections.abc import Mapping

from .ansi import LogStyles, make_style, should_colorize

__all__ = [
    "PACKAGE_LOGGER",
    "ScreenFormatter",
    "debug_requested",
    "get_logger",
    "init_logger",
]

PACKAGE_LOGGER = "pysway"

FILE_FORMAT = r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"
SCREEN_FORMAT = r"%(message)s"
VERBOSE_SCREEN_FORMAT = r"%(name)15s - %(message)s // %(filename)s:%(lineno)d"


def debug_requested(environ: Mapping[str, str] | None = None) -> bool:
    """Tell if the DEBUG environment variable asks for frame level logs."""
    if environ is None:
        environ = os.environ
    return bool(environ.get("DEBUG"))


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Return the package logger or one of its children.

    `name` is relative to the package: ``get_logger("ipc")`` is ``pysway.ipc``.
    Handlers, level and propagation are left alone.
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


class ScreenFormatter(logging.Formatter):
    """Terminal formatter, coloring warnings and errors."""

    _LEVEL_STYLES = {
        logging.WARNING: LogStyles.WARNING,
        logging.ERROR: LogStyles.ERROR,
        logging.CRITICAL: LogStyles.CRITICAL,
    }

    def __init__(self, verbose: bool = False, color: bool = False) -> None:
        super().__init__(VERBOSE_SCREEN_FORMAT if verbose else SCREEN_FORMAT)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        style = self._LEVEL_STYLES.get(record.levelno) if self.color else None
        if style is None:
            return text
        prefix, suffix = make_style(*style)
        return prefix + text + suffix


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            continue
        logger.removeHandler(handler)
        handler.close()


def init_logger(filename: str | None = None, force_debug: bool = False) -> logging.Logger:
    """Send the package logs to stderr, and to `filename` if given.

    Handlers installed by a previous call are closed and replaced.

    Args:
        filename: log file, appended to
        force_debug: log every frame even if DEBUG is not set

    Returns:
        the package logger
    """
    verbose = force_debug or debug_requested()
    logger = get_logger()
    _drop_handlers(logger)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenFormatter(verbose, should_colorize(stream_handler.stream)))
    logger.addHandler(stream_handler)
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.debug("Logging initialized%s", f" (also to {filename})" if filename else "")
    return logger
