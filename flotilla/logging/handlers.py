"""Dated log file handler."""

import logging
from datetime import date
from pathlib import Path

LOG_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"


def log_file_path(directory: str, today: date | None = None) -> Path:
    """Return ``<directory>/flotilla-YYYY-MM-DD.log``."""
    today = today or date.today()
    return Path(directory).expanduser() / f"flotilla-{today.isoformat()}.log"


class DatedFileHandler(logging.FileHandler):
    """File handler appending to one log file per day.

    Parameters
    ----------
    directory : str
        Directory holding the log files, created if missing
    today : date | None
        Date used for the file name, defaults to the current date
    """

    def __init__(self, directory: str, today: date | None = None) -> None:
        path = log_file_path(directory, today)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(path, encoding="utf-8")
