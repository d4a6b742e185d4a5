"""Logging setup for the flotilla CLI."""

from __future__ import annotations

import logging
import sys

from flotilla.logging.formatters import ScopeFormatter, StreamRoutingFilter
from flotilla.logging.handlers import LOG_FILE_FORMAT, DatedFileHandler

QUIET_LOGGERS = ("botocore", "boto3", "urllib3")


def setup_logging(
    level: str = "info",
    file_logging: bool = False,
    directory: str | None = None,
) -> None:
    """Install console handlers and, optionally, the dated file handler.

    Records below WARNING go to stdout and the rest to stderr, each prefixed
    with its region and target scope.

    Parameters
    ----------
    level : str
        Root log level name
    file_logging : bool
        Also write to ``flotilla-YYYY-MM-DD.log``
    directory : str | None
        Directory for the log file, required when ``file_logging`` is set
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(ScopeFormatter("%(message)s"))
    stdout_handler.addFilter(StreamRoutingFilter("stdout"))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(ScopeFormatter("%(message)s"))
    stderr_handler.addFilter(StreamRoutingFilter("stderr"))

    handlers: list[logging.Handler] = [stdout_handler, stderr_handler]

    if file_logging and directory:
        file_handler = DatedFileHandler(directory)
        file_handler.setFormatter(ScopeFormatter(LOG_FILE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = [
    "DatedFileHandler",
    "ScopeFormatter",
    "StreamRoutingFilter",
    "setup_logging",
]
