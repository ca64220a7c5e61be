"""Bounded exponential backoff for calls to rate-limited services."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from hirescore.core.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_MARKERS = ("rate limit", "rate-limit", "ratelimit", "too many requests")


def is_rate_limit_error(error: BaseException) -> bool:
    """Check whether an error signals a transient rate limit."""
    if isinstance(error, RateLimitedError):
        return True
    if getattr(error, "status_code", None) == 429:
        return True
    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class RetryPolicy:
    """Retry an async operation on retryable errors with doubling delays.

    The delay before retry ``n`` (0-based) is ``base_delay * 2**n``. Errors
    rejected by ``is_retryable`` propagate immediately; once ``max_attempts``
    attempts have failed the last error propagates.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        is_retryable: Callable[[BaseException], bool] = is_rate_limit_error,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.is_retryable = is_retryable

    def delay_for(self, attempt: int) -> float:
        """Return the wait before the retry following ``attempt``."""
        return self.base_delay * (2**attempt)

    async def run(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
        on_retry: Callable[[int, float, BaseException], None] | None = None,
        **kwargs: Any,
    ) -> T:
        """Execute ``operation(*args, **kwargs)`` under this policy."""
        attempt = 0
        while True:
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                if not self.is_retryable(e):
                    raise
                if attempt + 1 >= self.max_attempts:
                    logger.error(
                        f"Giving up after {self.max_attempts} rate-limited attempts: {e}"
                    )
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    f"Rate limited. Retry {attempt + 1}/{self.max_attempts - 1} "
                    f"after {delay:.2f}s: {e}"
                )
                if on_retry is not None:
                    on_retry(attempt, delay, e)
                await asyncio.sleep(delay)
                attempt += 1


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> T:
    """Run a zero-argument coroutine factory with the default rate-limit policy."""
    return await RetryPolicy(max_attempts=max_attempts, base_delay=base_delay).run(
        operation
    )
