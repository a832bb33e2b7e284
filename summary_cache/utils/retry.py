"""
Retry logic with exponential backoff for throttled store calls.
"""

import time
import random
import logging
from functools import wraps
from typing import Callable, TypeVar, Any

from ..data_access.exceptions import RetryableError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 2.0,
    jitter: bool = True
):
    """
    Decorator for retrying operations with exponential backoff.

    Only RetryableError is retried; every other exception propagates on the
    first attempt. Delays stay short because callers are request handlers
    answering within a Lambda invocation.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Initial delay in seconds (default: 0.1)
        max_delay: Maximum delay in seconds (default: 2.0)
        jitter: Whether to add random jitter to delay (default: True)

    Returns:
        Decorated function that retries on RetryableError

    Example:
        @retry_with_backoff(max_retries=3)
        def put_lock():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries + 1):
                try:
                    result = func(*args, **kwargs)

                    if attempt > 0:
                        logger.info(
                            f"Operation succeeded after {attempt} retries",
                            extra={'function': func.__name__, 'attempt': attempt}
                        )

                    return result

                except RetryableError as e:
                    if attempt == max_retries:
                        logger.error(
                            f"Operation failed after {max_retries} retries",
                            extra={'function': func.__name__, 'error': str(e)}
                        )
                        raise

                    delay = min(base_delay * (2 ** attempt), max_delay)
                    if jitter:
                        delay += random.uniform(0, 0.1 * delay)

                    logger.warning(
                        f"Retry attempt {attempt + 1}/{max_retries} after {delay:.2f}s",
                        extra={
                            'function': func.__name__,
                            'attempt': attempt + 1,
                            'delay_seconds': delay,
                            'error': str(e)
                        }
                    )

                    time.sleep(delay)

            # unreachable: the last attempt either returns or raises
            raise RuntimeError(f"{func.__name__} exhausted retries")

        return wrapper
    return decorator
