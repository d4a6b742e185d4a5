"""Logging formatters and filters for console output."""

import logging


class ScopeFormatter(logging.Formatter):
    """Logging formatter that prepends the region and target of a record.

    Records logged with ``extra={"region": ..., "target": ...}`` are
    prefixed with ``[region/target]``, records with only a region with
    ``[region]``. Concurrent workers interleave their lines, so the prefix
    is what ties a line to its target.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with scope prefix if present.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message with optional scope prefix
        """
        msg = super().format(record)
        region = getattr(record, "region", None)
        target = getattr(record, "target", None)

        if region and target:
            return f"[{region}/{target}] {msg}"
        elif region:
            return f"[{region}] {msg}"
        elif target:
            return f"[{target}] {msg}"

        return msg


class StreamRoutingFilter(logging.Filter):
    """Route records to stdout or stderr by level.

    Parameters
    ----------
    stream : str
        ``"stdout"`` accepts records below WARNING, ``"stderr"`` accepts
        WARNING and above
    """

    def __init__(self, stream: str) -> None:
        super().__init__()
        if stream not in ("stdout", "stderr"):
            raise ValueError(f"stream must be 'stdout' or 'stderr', got: {stream}")
        self.stream = stream

    def filter(self, record: logging.LogRecord) -> bool:
        if self.stream == "stdout":
            return record.levelno < logging.WARNING
        return record.levelno >= logging.WARNING
