"""Logging configuration for the MTP music sync application.

Console output is short and colored when attached to a terminal. The log
file records the thread name as well, since device calls that race against
a timeout run on helper threads.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional, Sequence, TextIO

CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(location)-22s %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
FILE_FORMAT = (
    "%(asctime)s %(levelname)-8s [%(threadName)s] %(location)s - %(message)s"
)
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

THIRD_PARTY_LOGGERS: Sequence[str] = ("mutagen", "asyncio", "concurrent.futures")


class LocationFormatter(logging.Formatter):
    """Formatter that adds a ``file:line`` location field."""

    def format(self, record: Any) -> str:
        """Format log record with combined location field."""
        record.location = f"{record.filename}:{record.lineno}"
        return super().format(record)


class ColoredFormatter(LocationFormatter):
    """Console formatter coloring the level name.

    The record is restored after formatting so that handlers formatting the
    same record later see the plain level name.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, *args: Any, use_color: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record: Any) -> str:
        """Format log record, coloring the padded level name."""
        levelname = record.levelname
        padded = f"{levelname:<8}"
        color = self.COLORS.get(levelname)
        record.levelname = (
            f"{color}{padded}{self.RESET}" if self.use_color and color else padded
        )
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Set up application logging on the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file
        console_output: Whether to log to stderr
        max_file_size: Size in bytes at which the log file is rotated
        backup_count: Number of rotated files to keep
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if console_output:
        stream = sys.stderr
        console_handler = logging.StreamHandler(stream)
        console_handler.setFormatter(
            ColoredFormatter(
                fmt=CONSOLE_FORMAT,
                datefmt=CONSOLE_DATEFMT,
                use_color=_is_terminal(stream),
            )
        )
        root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            LocationFormatter(fmt=FILE_FORMAT, datefmt=FILE_DATEFMT)
        )
        root_logger.addHandler(file_handler)

    for handler in root_logger.handlers:
        handler.setLevel(numeric_level)

    logging.getLogger(__name__).debug(
        "Logging initialized (level %s, file %s)", log_level, log_file or "none"
    )


def configure_third_party_loggers(level: int = logging.WARNING) -> None:
    """Raise the level of chatty library loggers."""
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)
