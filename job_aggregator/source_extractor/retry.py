"""Retry logic for career-site requests with exponential backoff.

Career sites drop connections, time out, and answer 429/503 under load. The
decorators here retry those transient failures a few times before letting the
error reach the adapter, which turns it into a source-level failure.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

import requests

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


class RetryableStatusError(requests.exceptions.HTTPError):
    """Non-2xx response worth retrying (429 Too Many Requests, 5xx)."""


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (ConnectionError, TimeoutError),
) -> Callable[[F], F]:
    """Decorator to retry a function with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        initial_delay: Initial delay in seconds before first retry (default: 1.0)
        backoff_factor: Multiplier for delay after each retry (default: 2.0)
                       delay = initial_delay * (backoff_factor ** attempt)
        exceptions: Tuple of exception types to catch and retry (default: ConnectionError, TimeoutError)

    Returns:
        Decorated function that will retry on failure

    Example:
        @retry_with_backoff(max_retries=2, initial_delay=0.5)
        def fetch_page():
            response = requests.get("https://recrute.example.com/jobs")
            return response.text

    Backoff calculation (initial_delay=1.0, backoff_factor=2.0):
        Attempt 1: No delay (first try)
        Attempt 2: Wait 1 second  (1.0 * 2^0)
        Attempt 3: Wait 2 seconds (1.0 * 2^1)
        Attempt 4: Wait 4 seconds (1.0 * 2^2)
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    # Don't sleep after the last attempt
                    if attempt < max_retries:
                        delay = initial_delay * (backoff_factor**attempt)

                        logger.warning(
                            "Function %s failed (attempt %d/%d): %s. Retrying in %.1f seconds...",
                            func.__name__,
                            attempt + 1,
                            max_retries + 1,
                            e,
                            delay,
                            extra={
                                "function": func.__name__,
                                "retry_attempt": attempt + 1,
                                "max_retries": max_retries + 1,
                                "delay_seconds": delay,
                                "exception_type": type(e).__name__,
                            },
                        )

                        time.sleep(delay)
                    else:
                        logger.error(
                            "Function %s failed after %d attempts",
                            func.__name__,
                            max_retries + 1,
                            extra={
                                "function": func.__name__,
                                "total_attempts": max_retries + 1,
                                "exception_type": type(e).__name__,
                            },
                        )

            raise last_exception  # type: ignore

        return wrapper  # type: ignore

    return decorator


def retry_http_call(max_retries: int = 2, initial_delay: float = 1.0) -> Callable[[F], F]:
    """Convenience decorator for HTTP requests made with ``requests``.

    Retries connection errors, timeouts and RetryableStatusError (429/5xx).
    Other HTTP errors (404, 403...) are permanent and raised immediately.

    Args:
        max_retries: Maximum number of retry attempts (default: 2)
        initial_delay: Delay before the first retry in seconds (default: 1.0)

    Returns:
        Decorated function
    """
    return retry_with_backoff(
        max_retries=max_retries,
        initial_delay=initial_delay,
        backoff_factor=2.0,
        exceptions=(
            requests.exceptions.ConnectionError,
            requests.exceptions.Timeout,
            RetryableStatusError,
            ConnectionError,
            TimeoutError,
        ),
    )
