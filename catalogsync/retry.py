"""
Exponential-backoff retry for idempotent async reads.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from catalogsync.config import MAX_RETRIES, RETRY_BACKOFF, RETRY_DELAY_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    retries: int = MAX_RETRIES,
    delay: float = RETRY_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await operation(), retrying on failure.

    The operation is attempted at most retries + 1 times. Before each retry
    we wait `delay` seconds, and the delay grows by RETRY_BACKOFF each time.
    When retries are exhausted the last exception propagates unchanged.
    """
    while True:
        try:
            return await operation()
        except Exception as exc:
            if retries <= 0:
                raise
            logger.debug("Attempt failed (%s), retrying in %.3fs (%d left)", exc, delay, retries)
            await sleep(delay)
            retries -= 1
            delay *= RETRY_BACKOFF
