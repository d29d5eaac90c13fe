"""Retry decorator with exponential backoff for network calls.

Usage:
    from utils.retry import retry

    @retry(max_attempts=3, delay=2.0, exceptions=(NetworkError,))
    def fetch_thread(uri):
        return client.get_post_thread(uri=uri)
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

logger = logging.getLogger(__name__)


def retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    logger_name: str | None = None,
) -> Callable:
    """Decorator to retry a function with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        delay: Initial delay between attempts in seconds (default: 1.0)
        backoff: Multiplier for delay after each failed attempt (default: 2.0)
        exceptions: Exception types that trigger a retry; anything else propagates at once
        logger_name: Optional logger name for custom logging

    Returns:
        Decorated function that re-raises the last error once attempts run out
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            log = logging.getLogger(logger_name) if logger_name else logger
            current_delay = delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_attempts:
                        log.error(
                            "Function %s failed after %d attempts. Last error: %s",
                            func.__name__,
                            max_attempts,
                            e,
                        )
                        raise

                    log.warning(
                        "Attempt %d/%d failed for %s: %s. Retrying in %.1fs...",
                        attempt,
                        max_attempts,
                        func.__name__,
                        e,
                        current_delay,
                    )
                    time.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator
