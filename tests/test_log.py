"""
Unit Tests for the logging setup.
"""
import logging

import pytest

from heart_explorer.log import ConsoleFormatter, get_logger, setup_logging


@pytest.fixture
def package_logger():
    """Restore the package logger after a test reconfigures it."""
    logger = logging.getLogger("heart_explorer")
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    for handler in handlers:
        logger.addHandler(handler)


class TestSetupLogging:

    def test_level_and_single_console_handler(self, package_logger):
        setup_logging("debug")
        setup_logging("WARNING")
        assert package_logger.level == logging.WARNING
        assert len(package_logger.handlers) == 1
        assert isinstance(package_logger.handlers[0].formatter, ConsoleFormatter)

    def test_unknown_level_falls_back_to_info(self, package_logger):
        setup_logging("chatty")
        assert package_logger.level == logging.INFO

    def test_log_file(self, package_logger, tmp_path):
        path = tmp_path / "heart.log"
        setup_logging("INFO", log_file=str(path))
        assert len(package_logger.handlers) == 2

        get_logger("heart_explorer.ingest").info("Read 40 records from data/heart.csv")
        for handler in package_logger.handlers:
            handler.flush()

        line = path.read_text(encoding="utf-8").strip()
        assert "| INFO | heart_explorer.ingest | Read 40 records" in line


class TestConsoleFormatter:

    def _record(self, level=logging.WARNING):
        return logging.LogRecord("heart_explorer.router", level, __file__, 1,
                                 "Rejected input", None, None)

    def test_plain(self):
        line = ConsoleFormatter().format(self._record())
        assert line.endswith("WARNING  [heart_explorer.router] Rejected input")
        assert "\033[" not in line

    def test_colored(self):
        line = ConsoleFormatter(color=True).format(self._record())
        assert line.startswith("\033[33m")
        assert line.endswith("\033[0m")
