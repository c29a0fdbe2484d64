"""Tests for structured logging system."""

import pytest
import logging
import tempfile
from pathlib import Path

from langfy.utils.logging import (
    ColoredFormatter,
    Logger,
    PlainFormatter,
    configure_logging,
    get_logger,
    module_logger,
    reset_logger,
)
from langfy.utils.colors import Colors


def make_record(level=logging.INFO, msg='Test message'):
    return logging.LogRecord(
        name='test',
        level=level,
        pathname='',
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None
    )


class TestFormatters:
    """Test cases for ColoredFormatter and PlainFormatter."""

    def test_format_without_colors(self):
        """Formatter without colors should return plain text."""
        formatter = ColoredFormatter(fmt='%(message)s', use_colors=False)
        result = formatter.format(make_record())
        assert result == 'Test message'
        assert Colors.OKGREEN not in result

    def test_format_with_colors(self):
        """Formatter with colors should include ANSI codes."""
        formatter = ColoredFormatter(fmt='%(message)s', use_colors=True)
        result = formatter.format(make_record())
        assert Colors.OKGREEN in result
        assert Colors.ENDC in result

    def test_different_levels_have_different_colors(self):
        """Different log levels should use different colors."""
        formatter = ColoredFormatter(fmt='%(message)s', use_colors=True)

        levels = [
            (logging.DEBUG, Colors.OKCYAN),
            (logging.INFO, Colors.OKGREEN),
            (logging.WARNING, Colors.WARNING),
            (logging.ERROR, Colors.FAIL),
        ]

        for level, expected_color in levels:
            result = formatter.format(make_record(level, 'Test'))
            assert expected_color in result, f"Level {level} should use color {expected_color}"

    def test_plain_formatter_strips_ansi(self):
        result = PlainFormatter().format(make_record(msg=f"{Colors.FAIL}boom{Colors.ENDC}"))
        assert '\033[' not in result
        assert '[INFO] test: boom' in result


class TestLogger:
    """Test cases for Logger class."""

    def setup_method(self):
        """Reset logger before each test."""
        reset_logger()

    def teardown_method(self):
        """Clean up after each test."""
        reset_logger()

    def test_singleton_pattern(self):
        """Logger should be a singleton."""
        assert Logger() is Logger()

    def test_get_logger_returns_same_instance(self):
        assert get_logger() is get_logger()

    def test_configure_verbose(self):
        """Verbose mode should set DEBUG level."""
        configure_logging(verbose=True)
        assert get_logger()._console_handler.level == logging.DEBUG

    def test_configure_quiet(self):
        """Quiet mode should set WARNING level."""
        configure_logging(quiet=True)
        assert get_logger()._console_handler.level == logging.WARNING

    def test_configure_default(self):
        """Default mode should set INFO level."""
        configure_logging()
        assert get_logger()._console_handler.level == logging.INFO

    def test_module_logger_is_child(self):
        """Module loggers hang below the langfy logger."""
        assert module_logger('scanner').name == 'langfy.scanner'

    def test_module_messages_reach_console(self, capfd):
        configure_logging(use_colors=False)
        module_logger('scanner').info("Scanned 3 files")
        captured = capfd.readouterr()
        assert "Scanned 3 files" in captured.out

    def test_debug_hidden_by_default(self, capfd):
        configure_logging()
        module_logger('cli').debug("Debug message")
        assert "Debug message" not in capfd.readouterr().out

    def test_debug_shown_when_verbose(self, capfd):
        configure_logging(verbose=True)
        module_logger('cli').debug("Debug message")
        assert "Debug message" in capfd.readouterr().out

    def test_quiet_keeps_warnings(self, capfd):
        configure_logging(quiet=True)
        logger = module_logger('cli')
        logger.info("Info message")
        logger.warning("Warning message")
        out = capfd.readouterr().out
        assert "Info message" not in out
        assert "Warning message" in out

    def test_error_method(self, capfd):
        configure_logging()
        module_logger('cli').error("Error message")
        assert "Error message" in capfd.readouterr().out

    def test_reconfigure_replaces_console_handler(self):
        configure_logging()
        configure_logging(verbose=True)
        handlers = logging.getLogger('langfy').handlers
        assert len(handlers) == 1


class TestFileLogging:
    """Test cases for file logging functionality."""

    def setup_method(self):
        reset_logger()

    def teardown_method(self):
        reset_logger()

    def test_log_file_format(self):
        """File log should have timestamp and level, and no colors."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / 'logs' / 'langfy.log'
            configure_logging(log_file=log_file)
            logger = get_logger()

            module_logger('cli').info("Test message")
            module_logger('orchestrator').warning("Warning message")
            logger._file_handler.flush()
            logger._file_handler.close()

            content = log_file.read_text(encoding='utf-8')
            assert "[INFO] langfy.cli: Test message" in content
            assert "[WARNING] langfy.orchestrator: Warning message" in content
            assert '\033[' not in content

    def test_file_receives_debug(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / 'langfy.log'
            configure_logging(log_file=log_file)
            logger = get_logger()

            module_logger('orchestrator').debug("Chunk details")
            logger._file_handler.close()

            assert "Chunk details" in log_file.read_text(encoding='utf-8')


class TestResetLogger:
    """Test cases for reset_logger function."""

    def test_reset_clears_instance(self):
        get_logger()
        reset_logger()
        from langfy.utils import logging as log_module
        assert log_module._logger is None
        assert Logger._initialized is False

    def test_reset_removes_handlers(self):
        get_logger()
        reset_logger()
        assert logging.getLogger('langfy').handlers == []


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
