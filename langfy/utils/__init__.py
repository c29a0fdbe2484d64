"""Utility modules."""

from .colors import Colors
from .logging import configure_logging, module_logger
from .progress import ProgressEvent, ProgressReporter, TqdmProgress
from .retry import call_with_retry, chunked
from .validators import is_valid_language_code, split_language_list

__all__ = [
    'Colors',
    'configure_logging',
    'module_logger',
    'ProgressEvent',
    'ProgressReporter',
    'TqdmProgress',
    'call_with_retry',
    'chunked',
    'is_valid_language_code',
    'split_language_list',
]
