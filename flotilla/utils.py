"""Utility functions for flotilla."""

import logging
import sys
from typing import Any

from flotilla.constants import DEFAULT_NAME_COLUMN_WIDTH, MAX_OUTPUT_PREVIEW_LENGTH

SECONDS_PER_MINUTE = 60


def format_duration(seconds: float) -> str:
    """Format a duration for summaries.

    Parameters
    ----------
    seconds : float
        Duration in seconds

    Returns
    -------
    str
        ``"850ms"`` below one second, ``"12.3s"`` below a minute,
        ``"2m 5s"`` otherwise
    """
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"

    if seconds < SECONDS_PER_MINUTE:
        return f"{seconds:.1f}s"

    minutes, remainder = divmod(int(seconds), SECONDS_PER_MINUTE)
    return f"{minutes}m {remainder}s"


def log_and_print_error(message: str, *args: Any) -> None:
    """Log error message and print to stderr.

    Parameters
    ----------
    message : str
        Error message with optional format placeholders
    *args : Any
        Format arguments for message
    """
    logging.error(message, *args)
    formatted_msg = message % args if args else message
    print(f"Error: {formatted_msg}", file=sys.stderr)


def truncate_name(name: str, max_width: int = DEFAULT_NAME_COLUMN_WIDTH) -> str:
    """Truncate name to fit in column width.

    Parameters
    ----------
    name : str
        Name to truncate
    max_width : int
        Maximum width for name (default: DEFAULT_NAME_COLUMN_WIDTH)

    Returns
    -------
    str
        Truncated name with ellipsis if exceeds max_width, otherwise original name
    """
    if len(name) > max_width:
        return name[: max_width - 3] + "..."

    return name


def preview_output(text: str, max_length: int = MAX_OUTPUT_PREVIEW_LENGTH) -> str:
    """Collapse command output to one line for summaries."""
    collapsed = " ".join(text.split())
    return truncate_name(collapsed, max_length)
