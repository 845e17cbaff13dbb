"""Retry utilities with exponential backoff and jitter.

Usage:
    @with_retry(max_attempts=3, retry_on=(httpx.TransportError,))
    async def query():
        return await client.post("/api/ANALYTICS/QUERY", json=body)

Plain functions are retried with ``time.sleep``; coroutine functions are
retried with ``asyncio.sleep`` so the event loop is never blocked.
"""

import asyncio
import inspect
import logging
import random
import time
from functools import wraps
from typing import Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int,
    initial_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    """Delay before retry number *attempt* (1-based)."""
    delay = min(initial_delay * (exponential_base ** (attempt - 1)), max_delay)
    if jitter:
        delay *= 0.5 + random.random()
    return delay


def with_retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    reraise_on: Tuple[Type[Exception], ...] = (),
):
    """Retry decorator with exponential backoff and jitter.

    Args:
        max_attempts: Maximum number of attempts (including first try)
        initial_delay: Starting delay in seconds (doubled each retry)
        max_delay: Cap on delay duration
        exponential_base: Multiplier for each retry (typically 2.0)
        jitter: Add randomness to prevent thundering herd
        retry_on: Exception types that trigger retry
        reraise_on: Exception types that abort immediately (no retry)

    Returns:
        Decorated function (sync or async, matching the input) that retries
        on failure.
    """

    def _next_delay(func: Callable, attempt: int, exc: Exception) -> Optional[float]:
        name = getattr(func, "__name__", "unknown")
        if attempt >= max_attempts:
            logger.error(
                "Max retries (%d) exceeded for %s: %s", max_attempts, name, exc
            )
            return None
        delay = backoff_delay(attempt, initial_delay, max_delay, exponential_base, jitter)
        logger.warning(
            "Retry %d/%d for %s after %.2fs: %s",
            attempt,
            max_attempts,
            name,
            delay,
            exc,
        )
        return delay

    def decorator(func: Callable):
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                attempt = 0
                while True:
                    try:
                        return await func(*args, **kwargs)
                    except reraise_on:
                        raise
                    except retry_on as exc:
                        attempt += 1
                        delay = _next_delay(func, attempt, exc)
                        if delay is None:
                            raise
                        await asyncio.sleep(delay)

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except reraise_on:
                    raise
                except retry_on as exc:
                    attempt += 1
                    delay = _next_delay(func, attempt, exc)
                    if delay is None:
                        raise
                    time.sleep(delay)

        return wrapper

    return decorator
