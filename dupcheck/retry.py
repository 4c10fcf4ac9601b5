"""
Retry with exponential backoff for candidate-pool requests.

Network hiccups and short outages of the hosted database API are common
enough that a single failed request should not fail the duplicate check.
"""

import functools
import time
from typing import Callable, Optional, Tuple, Type

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Multiplier applied to the delay after each attempt
        exceptions: Exception types that may be retried
        should_retry: Optional predicate; a caught exception for which it
            returns False is re-raised immediately
        on_retry: Optional callback(attempt, exception, delay)
        sleep: Sleep function (replaced in tests)

    Example:
        @exponential_backoff(max_retries=2, exceptions=(requests.Timeout,))
        def fetch(url):
            return requests.get(url, timeout=10)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if should_retry is not None and not should_retry(e):
                        raise
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}"
                        ) from e
                    current_delay = min(delay, max_delay)
                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)
                    sleep(current_delay)
                    delay *= exponential_base
        return wrapper
    return decorator


def should_retry_http_status(status_code: int) -> bool:
    """True for timeouts, rate limiting and server errors."""
    return status_code in RETRYABLE_STATUS_CODES
