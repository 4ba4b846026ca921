"""Retry helpers with exponential backoff and jitter."""

import functools
import logging
import random
import time
from collections.abc import Callable
from typing import ParamSpec, TypeVar

logger = logging.getLogger(__name__)

P = ParamSpec('P')
T = TypeVar('T')


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt`` (0-based): doubling, capped, +/-50% jitter."""
    delay = min(base_delay * (2 ** attempt), max_delay)
    jitter = random.uniform(-0.5, 0.5) * delay
    return max(0.0, delay + jitter)


def retry_call(
    func: Callable[..., T],
    *args,
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    operation_name: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
    **kwargs
) -> T:
    """Call func, retrying on the given exceptions.

    The last exception propagates once ``max_retries`` retries are spent.
    """
    for attempt in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except exceptions as e:
            if attempt == max_retries:
                logger.error(f"{operation_name} failed after {max_retries} retries: {e}")
                raise

            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.info(
                f"{operation_name} attempt {attempt + 1}/{max_retries + 1} "
                f"failed: {e}. Retrying in {delay:.2f}s..."
            )
            sleep(delay)

    raise RuntimeError(f"{operation_name} failed unexpectedly")


def with_retry(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    operation_name: str = "operation"
):
    """Decorator form of retry_call.

    Example:
        @with_retry(max_retries=3, exceptions=(sqlite3.OperationalError,),
                    operation_name="custom mood write")
        def _execute_write(self, ...):
            ...
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return retry_call(
                func,
                *args,
                max_retries=max_retries,
                base_delay=base_delay,
                max_delay=max_delay,
                exceptions=exceptions,
                operation_name=operation_name,
                **kwargs,
            )
        return wrapper
    return decorator
