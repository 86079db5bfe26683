"""
Retry with exponential backoff for transient backend errors

Used around connection acquisition only. A commit batch is never retried
automatically: a failed batch is handed back to the operator unchanged.

Usage:
    from utils.retry import retry_transient

    @retry_transient(max_retries=3, base_delay=0.5)
    def connect(dsn):
        return psycopg2.connect(dsn)
"""

import logging
import random
import time
from functools import wraps
from typing import Any, Callable

logger = logging.getLogger(__name__)

TRANSIENT_PATTERNS = (
    "connection refused",
    "connection reset",
    "could not connect",
    "server closed the connection",
    "timeout",
    "timed out",
    "too many connections",
    "the database system is starting up",
    "broken pipe",
)

TRANSIENT_TYPE_NAMES = (
    "connectionerror",
    "timeouterror",
    "operationalerror",
    "interfaceerror",
)


def is_transient_error(exception: Exception) -> bool:
    """
    Decide whether an error is worth retrying.

    Connection and timeout failures are transient; syntax errors and
    constraint violations are not.
    """
    if type(exception).__name__.lower() in TRANSIENT_TYPE_NAMES:
        return True

    message = str(exception).lower()
    return any(pattern in message for pattern in TRANSIENT_PATTERNS)


def compute_delay(attempt: int, base_delay: float, max_delay: float, jitter: bool) -> float:
    """Backoff delay before retry number ``attempt`` (0-based)."""
    delay = min(base_delay * (2.0 ** attempt), max_delay)
    if jitter:
        delay += random.uniform(-delay * 0.25, delay * 0.25)
    return max(0.05, delay)


def retry_transient(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    jitter: bool = True,
    is_retryable: Callable[[Exception], bool] = is_transient_error,
    on_retry: Callable[[int, Exception, float], None] | None = None,
):
    """
    Decorator that retries a call on transient errors

    Args:
        max_retries: Retries after the first attempt
        base_delay: Initial delay in seconds
        max_delay: Upper bound for a single delay
        jitter: Spread delays by +/-25%
        is_retryable: Predicate classifying exceptions
        on_retry: Callback(attempt, exception, delay) invoked before sleeping

    Returns:
        Decorated function
    """
    def decorator(func: Callable) -> Callable:
        func_name = getattr(func, "__name__", "function")

        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not is_retryable(e):
                        logger.error(f"Non-retryable error in {func_name}: {type(e).__name__}: {e}")
                        raise

                    if attempt == max_retries:
                        logger.error(
                            f"Max retries ({max_retries}) exceeded for {func_name}: "
                            f"{type(e).__name__}: {e}"
                        )
                        raise

                    delay = compute_delay(attempt, base_delay, max_delay, jitter)
                    logger.warning(
                        f"Attempt {attempt + 1}/{max_retries + 1} failed for {func_name}: "
                        f"{type(e).__name__}: {e}. Retrying in {delay:.2f}s..."
                    )

                    if on_retry:
                        on_retry(attempt + 1, e, delay)

                    time.sleep(delay)

            raise RuntimeError(f"Unexpected exit from retry loop in {func_name}")

        return wrapper
    return decorator
