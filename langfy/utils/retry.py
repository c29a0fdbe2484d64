"""Linear backoff helpers shared by the translator client and orchestrator."""

import time
from typing import Callable, Iterator, List, Sequence, Tuple, Type, TypeVar

from .logging import module_logger

T = TypeVar('T')

logger = module_logger('retry')

Sleeper = Callable[[float], None]


def linear_delay(retry_delay: float, attempt: int) -> float:
    """Delay before the next try: ``retry_delay * attempt`` seconds."""
    return max(retry_delay, 0) * attempt


def call_with_retry(
    func: Callable[[], T],
    default: T,
    max_attempts: int = 3,
    retry_delay: float = 2.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Sleeper = time.sleep,
    description: str = 'call',
) -> T:
    """
    Run ``func`` up to ``max_attempts`` times with linear backoff.

    Exceptions listed in ``retry_on`` are treated as transient. When every
    attempt fails the last error is logged and ``default`` is returned, so
    callers never see the exception.

    Args:
        func: Zero-argument callable to run
        default: Value returned once attempts are exhausted
        max_attempts: Total number of attempts (at least one is made)
        retry_delay: Base delay in seconds; attempt ``n`` waits ``retry_delay * n``
        retry_on: Exception types that trigger a retry
        sleep: Sleep function (injectable for tests)
        description: Label used in log messages

    Returns:
        The result of ``func`` or ``default``
    """
    attempts = max(1, max_attempts)
    last_error = None

    for attempt in range(1, attempts + 1):
        try:
            return func()
        except retry_on as e:
            last_error = e
            logger.debug(f"{description} failed (attempt {attempt}/{attempts}): {e}")
            if attempt < attempts:
                sleep(linear_delay(retry_delay, attempt))

    logger.error(f"{description} failed after {attempts} attempts: {last_error}")
    return default


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
