"""Retry helper for LLM API calls."""

import functools
import random
import re
import time
from typing import Any, Callable, Iterator, Optional, TypeVar

from aiscript.core.logging import get_logger

T = TypeVar("T")

logger = get_logger("aiscript.retry")

# Status codes and phrases that mean the request itself is wrong; repeating it cannot help
PERMANENT_ERROR = re.compile(r"\b(400|401|403|404)\b|unauthori[sz]ed|invalid api key|permission denied", re.IGNORECASE)


def is_transient_error(error: BaseException) -> bool:
    """True unless the error reports a rejected request (bad key, unknown model, malformed input)."""
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status == 408 or status == 429 or status >= 500
    return not PERMANENT_ERROR.search(str(error))


def backoff_delays(
    initial_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> Iterator[float]:
    """Endless sequence of sleep times: initial_delay * base**n, capped, plus up to 10% jitter."""
    delay = initial_delay
    while True:
        yield delay + delay * 0.1 * random.random() if jitter else delay
        delay = min(delay * exponential_base, max_delay)


def retry_with_exponential_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    should_retry: Callable[[BaseException], bool] = is_transient_error,
    logger_instance: Optional[Any] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for retrying function calls with exponential backoff.

    Args:
        max_retries: Maximum number of retries after the first attempt
        initial_delay: Initial delay in seconds before first retry
        max_delay: Maximum delay in seconds between retries
        exponential_base: Base for exponential backoff calculation
        jitter: If True, add up to 10% random jitter to each delay
        retryable_exceptions: Exception types that may trigger a retry
        should_retry: Predicate on a caught exception; False re-raises it at once
        logger_instance: Optional logger instance for logging retries

    Returns:
        Decorator function
    """
    log = logger_instance or logger

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delays = backoff_delays(initial_delay, max_delay, exponential_base, jitter)
            attempt = 0
            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    if not should_retry(e):
                        log.warning(
                            f"{func.__name__} failed with a non-retryable error: {e}",
                            context={"function": func.__name__, "attempt": attempt},
                        )
                        raise
                    if attempt > max_retries:
                        log.error(
                            f"All {attempt} attempts failed for {func.__name__}",
                            context={"function": func.__name__, "max_retries": max_retries, "error": str(e)},
                        )
                        raise

                    delay = next(delays)
                    log.warning(
                        f"Attempt {attempt}/{max_retries + 1} failed: {e}. Retrying in {delay:.2f}s...",
                        context={"function": func.__name__, "attempt": attempt, "delay": delay},
                    )
                    time.sleep(delay)

        return wrapper

    return decorator
