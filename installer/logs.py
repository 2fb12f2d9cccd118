"""Operator-facing logging configuration for installer runs."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Final, TextIO

SUCCESS_LEVEL: Final[int] = 25
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

_LOG_FORMAT: Final[str] = "[%(levelname)s] %(message)s"
_FILE_LOG_FORMAT: Final[str] = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"


class Colors:
    """Color constants for terminal output."""

    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    RED = "\033[0;31m"
    BLUE = "\033[0;34m"
    RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    """Formatter that colors the level marker for interactive terminals."""

    _LEVEL_COLORS: Final[dict[int, str]] = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.BLUE,
        SUCCESS_LEVEL: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self._LEVEL_COLORS.get(record.levelno, "")
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{color}[{record.levelname}]{Colors.RESET} {message}"


def logs_configure(
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the `installer` logger hierarchy for one run.

    Args:
        verbose: Emit DEBUG records when True.
        log_file: Optional file receiving timestamped records.
        stream: Console stream, defaults to stderr.

    Returns:
        logging.Logger: Configured package logger.

    Raises:
        OSError: Raised when the log file cannot be opened.
    """

    package_logger = logging.getLogger("installer")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_stream = stream or sys.stderr
    console_handler = logging.StreamHandler(console_stream)
    if console_stream.isatty():
        console_handler.setFormatter(ColorFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    package_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_LOG_FORMAT, _FILE_DATE_FORMAT))
        package_logger.addHandler(file_handler)

    return package_logger


def logs_success(logger: logging.Logger, message: str, *args: object) -> None:
    """Log one record at the SUCCESS level."""

    logger.log(SUCCESS_LEVEL, message, *args)
