"""Retry helper for flaky remote operations."""

from typing import Callable, Optional
import functools
import logging
import time

logger = logging.getLogger(__name__)


def with_retry(
    max_attempts: int = 3,
    delay: float = 3.0,
    backoff_factor: float = 1.0,
    retry_condition: Optional[Callable[[Exception], bool]] = None,
) -> Callable:
    """
    Decorator to retry function calls after a delay.

    The delay is fixed unless ``backoff_factor`` is raised above 1.0. After
    the last attempt the most recent exception propagates unchanged.

    Args:
        max_attempts: Total number of attempts, including the first one
        delay: Delay between attempts in seconds
        backoff_factor: Factor to multiply delay by after each failed attempt
        retry_condition: Optional condition to determine if retry should be attempted

    Returns:
        Decorated function with retry capability
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if retry_condition and not retry_condition(e):
                        raise

                    if attempt < max_attempts - 1:
                        logger.warning(f"Attempt {attempt + 1} failed, retrying in {current_delay}s: {e}")
                        time.sleep(current_delay)
                        current_delay *= backoff_factor
                    else:
                        logger.error(f"All {max_attempts} attempts failed: {e}")
                        raise

        return wrapper

    return decorator
