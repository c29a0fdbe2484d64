"""ANSI color codes for terminal output."""

import os
import re
import sys

_ANSI_ESCAPE = re.compile(r'\033\[[0-9;]*m')


class Colors:
    """ANSI color codes for langfy terminal output.

    Coloring is disabled when ``NO_COLOR`` is set or stdout is not a TTY.
    """

    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    enabled = 'NO_COLOR' not in os.environ and sys.stdout.isatty()

    @classmethod
    def _wrap(cls, code: str, text: str) -> str:
        if not cls.enabled:
            return text
        return f"{code}{text}{cls.ENDC}"

    @classmethod
    def success(cls, text: str) -> str:
        """Return text in green color."""
        return cls._wrap(cls.OKGREEN, text)

    @classmethod
    def error(cls, text: str) -> str:
        """Return text in red color."""
        return cls._wrap(cls.FAIL, text)

    @classmethod
    def warning(cls, text: str) -> str:
        """Return text in yellow color."""
        return cls._wrap(cls.WARNING, text)

    @classmethod
    def info(cls, text: str) -> str:
        """Return text in cyan color."""
        return cls._wrap(cls.OKCYAN, text)

    @classmethod
    def bold(cls, text: str) -> str:
        """Return text in bold."""
        return cls._wrap(cls.BOLD, text)

    @classmethod
    def dim(cls, text: str) -> str:
        return cls._wrap(cls.DIM, text)

    @staticmethod
    def strip(text: str) -> str:
        """Remove ANSI escape sequences from text."""
        return _ANSI_ESCAPE.sub('', text)
