"""
Logging setup shared by the dashboard modules.

Everything logs under the ``heart_explorer`` logger: one line per record on
stdout (colored when stdout is a terminal), optionally mirrored to a file.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

PACKAGE_LOGGER = "heart_explorer"

FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class ConsoleFormatter(logging.Formatter):
    """``[utc-time] LEVEL [logger] message``, level-colored on a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="seconds")
        line = f"[{stamp}] {record.levelname:8} [{record.name}] {record.getMessage()}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        if self.color and record.levelno in self.LEVEL_COLORS:
            line = f"{self.LEVEL_COLORS[record.levelno]}{line}{self.RESET}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Streamlit re-executes the page script on every interaction, so the
    handlers are rebuilt each time instead of stacking up.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Also append records to this file when set

    Returns:
        logging.Logger: The configured ``heart_explorer`` logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter(color=sys.stdout.isatty()))
    package_logger.addHandler(console)

    if log_file:
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setFormatter(logging.Formatter(FILE_FORMAT))
        package_logger.addHandler(to_file)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass ``__name__``)."""
    return logging.getLogger(name)
