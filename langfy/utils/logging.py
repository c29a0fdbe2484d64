"""Structured logging for langfy.

Library modules obtain a child of the ``langfy`` logger through
:func:`module_logger` and never print. The CLI calls :func:`configure_logging`
once to attach console (and optionally file) handlers.
"""

import logging
import sys
from typing import Optional
from pathlib import Path
from .colors import Colors

ROOT_LOGGER_NAME = 'langfy'


class ColoredFormatter(logging.Formatter):
    """
    Formatter that adds ANSI colors to console output.

    File handlers use a plain formatter so log files stay free of color codes.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.OKCYAN,
        logging.INFO: Colors.OKGREEN,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.FAIL,
        logging.CRITICAL: Colors.FAIL + Colors.BOLD,
    }

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize the formatter.

        Args:
            fmt: Format string for log messages
            use_colors: Whether to use ANSI colors
        """
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if enabled."""
        message = super().format(record)

        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelno, '')
            message = f"{color}{message}{Colors.ENDC}"

        return message


class PlainFormatter(logging.Formatter):
    """Timestamped formatter that strips ANSI codes from messages."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        return Colors.strip(super().format(record))


class Logger:
    """
    Process-wide logger configuration for langfy.

    Provides:
    - Console output with colors
    - File output (optional)
    - Different verbosity levels
    """

    _instance: Optional['Logger'] = None
    _initialized: bool = False

    def __new__(cls) -> 'Logger':
        """Singleton pattern to ensure single logger instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the logger (only once due to singleton)."""
        if Logger._initialized:
            return

        self._logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._logger.setLevel(logging.DEBUG)
        self._logger.handlers = []

        self._console_handler = self._create_console_handler()
        self._logger.addHandler(self._console_handler)

        self._file_handler: Optional[logging.FileHandler] = None

        Logger._initialized = True

    def _create_console_handler(
        self,
        level: int = logging.INFO,
        use_colors: bool = True
    ) -> logging.StreamHandler:
        """
        Create a console handler with optional colors.

        Args:
            level: Minimum log level for console output
            use_colors: Whether to use ANSI colors

        Returns:
            Configured StreamHandler
        """
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(ColoredFormatter(fmt='%(message)s', use_colors=use_colors))
        return handler

    def _create_file_handler(
        self,
        file_path: Path,
        level: int = logging.DEBUG
    ) -> logging.FileHandler:
        """
        Create a file handler for logging to file.

        Args:
            file_path: Path to log file
            level: Minimum log level for file output

        Returns:
            Configured FileHandler
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(file_path, encoding='utf-8')
        handler.setLevel(level)
        handler.setFormatter(PlainFormatter())
        return handler

    def configure(
        self,
        verbose: bool = False,
        quiet: bool = False,
        log_file: Optional[Path] = None,
        use_colors: bool = True
    ) -> None:
        """
        Configure the logger settings.

        Args:
            verbose: Enable verbose (DEBUG) console output
            quiet: Enable quiet mode (WARNING+ only)
            log_file: Optional file path for logging
            use_colors: Whether to use colors in console
        """
        if quiet:
            console_level = logging.WARNING
        elif verbose:
            console_level = logging.DEBUG
        else:
            console_level = logging.INFO

        self._logger.removeHandler(self._console_handler)
        self._console_handler = self._create_console_handler(
            level=console_level,
            use_colors=use_colors
        )
        self._logger.addHandler(self._console_handler)

        if log_file:
            if self._file_handler:
                self._logger.removeHandler(self._file_handler)
                self._file_handler.close()
            self._file_handler = self._create_file_handler(log_file)
            self._logger.addHandler(self._file_handler)


# Global logger instance
_logger: Optional[Logger] = None


def module_logger(name: str) -> logging.Logger:
    """Return the ``langfy.<name>`` logger without configuring handlers."""
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')


def get_logger() -> Logger:
    """
    Get the global logger instance.

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
    use_colors: bool = True
) -> None:
    """
    Configure the global logger.

    Args:
        verbose: Enable verbose (DEBUG) console output
        quiet: Enable quiet mode (WARNING+ only)
        log_file: Optional file path for logging
        use_colors: Whether to use colors in console
    """
    get_logger().configure(
        verbose=verbose,
        quiet=quiet,
        log_file=log_file,
        use_colors=use_colors
    )


def reset_logger() -> None:
    """Reset the global logger (mainly for testing)."""
    global _logger
    if _logger is not None:
        for handler in _logger._logger.handlers[:]:
            handler.close()
            _logger._logger.removeHandler(handler)
        _logger._logger.setLevel(logging.NOTSET)
    _logger = None
    Logger._instance = None
    Logger._initialized = False
