"""Retry-with-backoff for transient provider failures.

WHY: Hosted transcription APIs drop connections, time out, and return
the occasional 5xx. One retry usually succeeds; an unbounded loop would
hang an upload request forever.

HOW: Call the coroutine factory up to max_attempts times. On a transient
failure wait base_delay * 2**attempt seconds (1s, 2s, 4s with the
defaults) and try again. When attempts run out raise ProviderUnavailable.

RULES:
- Transient: httpx.TransportError (connect/read/timeout) and 5xx responses
- Not transient: 4xx ProviderAPIError (bad key, rate limit, bad request)
  propagates immediately
- The last failure's message is carried in ProviderUnavailable
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

from caption_studio.core.errors import ProviderAPIError, ProviderUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, ProviderAPIError):
        return exc.status_code >= 500
    return False


async def retry_with_backoff(
    call: Callable[[], Awaitable[T]],
    provider: str,
    max_attempts: int = 3,
    base_delay_s: float = 1.0,
) -> T:
    """Await call(), retrying transient failures with exponential backoff.

    Args:
        call: Zero-argument coroutine factory; invoked once per attempt.
        provider: Provider name for logs and the final error.
        max_attempts: Total number of calls, at least 1.
        base_delay_s: Delay before the second attempt; doubles each time.

    Raises:
        ProviderUnavailable: Every attempt failed transiently.
        ProviderAPIError: A non-transient API error (not retried).
    """
    max_attempts = max(1, max_attempts)
    for attempt in range(max_attempts):
        try:
            return await call()
        except (httpx.TransportError, ProviderAPIError) as exc:
            if not is_transient(exc):
                raise
            if attempt == max_attempts - 1:
                raise ProviderUnavailable(provider, max_attempts, str(exc) or type(exc).__name__)
            delay = base_delay_s * (2 ** attempt)
            logger.warning(
                "%s call failed (%s), retry %d/%d in %.1fs",
                provider, exc, attempt + 1, max_attempts - 1, delay,
            )
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")
