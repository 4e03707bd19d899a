"""
Retry with exponential backoff for row store calls.

Store calls are blocking (gspread), so each attempt runs in a worker
thread. Only StoreErrors marked retryable (429, 5xx, dropped connections)
are retried; everything else propagates on the first failure.
"""
import asyncio
from typing import Any, Awaitable, Callable, Optional

import config
from sheets.store_errors import StoreError
from utils.logger import get_logger


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before retrying after the given (1-based) failed attempt."""
    return base_delay * (2 ** (attempt - 1))


async def call_with_retry(
    func: Callable[..., Any],
    *args,
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    **kwargs,
) -> Any:
    """
    Run a blocking store call off the event loop, retrying transient failures.

    Args:
        func: Blocking callable
        max_attempts: Total attempts including the first (default from config)
        base_delay: Seconds before the first retry; doubles each time
        sleep: Awaitable sleep, injectable for tests

    Raises:
        StoreError: the last error once attempts are exhausted, or the first
            non-retryable one
    """
    max_attempts = config.STORE_MAX_ATTEMPTS if max_attempts is None else max_attempts
    base_delay = config.STORE_RETRY_BASE_DELAY_SECONDS if base_delay is None else base_delay
    max_attempts = max(1, max_attempts)

    attempt = 1
    while True:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except StoreError as e:
            if not e.retryable or attempt >= max_attempts:
                raise
            delay = backoff_delay(attempt, base_delay)
            get_logger().warning(
                f"{getattr(func, '__name__', 'store call')} failed ({e}); "
                f"retry {attempt}/{max_attempts - 1} in {delay:.1f}s",
                component="Retry"
            )
            await sleep(delay)
            attempt += 1
