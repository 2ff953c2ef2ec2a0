"""Retry logic with exponential backoff and jitter

Implements smart retry logic that:
1. Only retries transient errors (timeouts, rate limits, 5xx errors)
2. Uses exponential backoff with jitter to prevent thundering herd
3. Gives up after max retries to avoid infinite loops
"""

import asyncio
import random
import logging
from typing import Callable, Any, TypeVar
from functools import wraps
import httpx

from learnquest.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Retry configuration
MAX_RETRIES = 3
BASE_DELAY = 1.0  # seconds
MAX_DELAY = 30.0  # seconds
JITTER = 0.1  # 10% random jitter

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def is_retryable_error(exc: Exception) -> bool:
    """
    Determine if error is transient and should be retried.

    Retryable errors:
    - Network timeouts and connection failures
    - HTTP 429 (rate limit)
    - HTTP 500/502/503/504 (server errors)
    - ExternalServiceError wrapping one of the above

    Non-retryable errors:
    - HTTP 400/401/403/404 (client errors)
    - Anything else

    Args:
        exc: The exception to check

    Returns:
        True if error should be retried, False otherwise
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES

    if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError)):
        return True

    if isinstance(exc, ExternalServiceError):
        if exc.cause is not None:
            return is_retryable_error(exc.cause)
        return exc.status_code in RETRYABLE_STATUS_CODES

    # Default: don't retry unknown errors
    return False


def calculate_backoff(attempt: int, base_delay: float = BASE_DELAY) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Formula: delay = min(base_delay * (2 ** attempt), MAX_DELAY) + jitter
    Jitter is random value between -10% and +10% of delay

    Args:
        attempt: The retry attempt number (0-indexed)
        base_delay: Delay of the first retry

    Returns:
        Delay in seconds

    Example:
        Attempt 0: ~1s
        Attempt 1: ~2s
        Attempt 2: ~4s
    """
    delay = min(base_delay * (2 ** attempt), MAX_DELAY)

    jitter_amount = random.uniform(-JITTER * delay, JITTER * delay)
    final_delay = delay + jitter_amount

    return max(final_delay, 0.0)


async def retry_with_backoff(
    func: Callable[..., T],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    **kwargs: Any
) -> T:
    """
    Retry async function with exponential backoff.

    Only retries transient errors. Gives up after max_retries attempts.

    Args:
        func: Async function to retry
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Delay before the first retry in seconds
        *args, **kwargs: Arguments to pass to func

    Returns:
        Result from func

    Raises:
        Last exception if all retries exhausted or non-retryable error

    Example:
        profile = await retry_with_backoff(store.get_profile, max_retries=3)
    """
    name = getattr(func, "__name__", repr(func))

    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if attempt == max_retries:
                if max_retries:
                    logger.error(f"[RETRY] All {max_retries} retries exhausted for {name}")
                raise

            if not is_retryable_error(e):
                logger.warning(
                    f"[RETRY] Non-retryable error for {name}: "
                    f"{type(e).__name__}: {e}"
                )
                raise

            backoff = calculate_backoff(attempt, base_delay)

            logger.info(
                f"[RETRY] Attempt {attempt + 1}/{max_retries} for {name} "
                f"after {backoff:.2f}s (error: {type(e).__name__})"
            )

            await asyncio.sleep(backoff)

    raise RuntimeError("Retry logic failed unexpectedly")


def with_retry(max_retries: int = MAX_RETRIES, base_delay: float = BASE_DELAY) -> Callable:
    """
    Decorator to add retry logic to async functions.

    Example:
        @with_retry(max_retries=3)
        async def fetch():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_with_backoff(func, *args, max_retries=max_retries, base_delay=base_delay, **kwargs)
        return wrapper
    return decorator
