"""Retry utilities for async operations.

Provides exponential backoff retry logic for transient failures.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

# Default retry configuration
DEFAULT_ATTEMPTS = 2
DEFAULT_BASE_DELAY = 0.2  # seconds


def calculate_delay(attempt: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Return the backoff before retrying after ``attempt`` (zero-indexed)."""
    return base_delay * (2**attempt)


async def with_retry[T](
    fn: Callable[[], Awaitable[T]],
    attempts: int = DEFAULT_ATTEMPTS,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    base_delay: float = DEFAULT_BASE_DELAY,
) -> T:
    """Execute async function with exponential backoff retry.

    Args:
        fn: Async function to execute (typically a lambda or partial)
        attempts: Maximum number of attempts
        exceptions: Tuple of exception types to catch and retry
        base_delay: Base delay in seconds for exponential backoff

    Returns:
        Result from successful function execution

    Raises:
        The last exception if all attempts fail

    Example:
        response = await with_retry(
            lambda: client.post(url, json=payload),
            attempts=3,
            exceptions=(httpx.RequestError,),
        )
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: Exception | None = None

    for attempt in range(attempts):
        try:
            return await fn()
        except exceptions as e:
            last_error = e
            if attempt < attempts - 1:
                delay = calculate_delay(attempt, base_delay)
                logger.debug(
                    "Attempt %s/%s failed (%s), retrying in %.2fs",
                    attempt + 1,
                    attempts,
                    type(e).__name__,
                    delay,
                )
                await asyncio.sleep(delay)

    raise last_error  # type: ignore[misc]
