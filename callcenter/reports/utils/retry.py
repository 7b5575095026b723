"""Exponential-backoff retry for single page fetches."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "request",
) -> T:
    """Invoke operation, retrying on any error with doubling delays.

    The error kind is not inspected: upstream failures are typically rate
    limiting or transient network issues, so every error is retried until the
    attempt budget runs out. The wait before retry n (zero-based) is
    base_delay * 2**n.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        max_attempts: Total attempts including the first
        base_delay: Delay in seconds before the first retry
        sleep: Awaitable sleep function (injectable for tests)
        description: Label used in log records

    Returns:
        The operation's result on the first successful attempt

    Raises:
        Exception: The last attempt's error, unmodified
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= max_attempts - 1:
                logger.error(
                    "retry_exhausted",
                    extra={
                        "description": description,
                        "attempts": attempt + 1,
                        "error_type": type(e).__name__,
                        "error_message": str(e),
                    },
                )
                raise
            delay = base_delay * (2**attempt)
            logger.warning(
                "%s failed (%s); retrying in %.1fs",
                description,
                e,
                delay,
                extra={"attempt": attempt + 1, "max_attempts": max_attempts},
            )
            await sleep(delay)
            attempt += 1
