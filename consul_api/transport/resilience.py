"""Retry utilities for transport calls.

Retries connection failures and timeouts with exponential backoff.
HTTP error statuses are answers, not failures, and are never retried here.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

import aiohttp

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry with exponential backoff."""

    max_retries: int = 3
    backoff_base: float = 0.1  # seconds
    backoff_max: float = 5.0  # cap
    backoff_multiplier: float = 2.0
    retryable_exceptions: tuple[type[BaseException], ...] = (
        aiohttp.ClientConnectionError,
        asyncio.TimeoutError,
        ConnectionError,
    )

    def delay_for(self, attempt: int) -> float:
        """Backoff delay before retrying after the given (0-based) attempt."""
        return min(self.backoff_base * (self.backoff_multiplier**attempt), self.backoff_max)


async def retry_with_backoff(
    fn: Callable[..., Coroutine[Any, Any, T]],
    *args: Any,
    config: RetryConfig | None = None,
    context_msg: str = "",
    **kwargs: Any,
) -> T:
    """Execute an async function with retry and backoff.

    Args:
        fn: Async callable to execute
        *args: Positional args for fn
        config: Retry configuration (uses defaults if None)
        context_msg: Extra context for log messages (e.g. request path)
        **kwargs: Keyword args for fn

    Returns:
        Result of fn

    Raises:
        Exception: Last exception after all retries exhausted, or the first
            non-retryable one
    """
    cfg = config or RetryConfig()
    ctx = f" [{context_msg}]" if context_msg else ""

    for attempt in range(cfg.max_retries + 1):
        try:
            result = await fn(*args, **kwargs)
        except cfg.retryable_exceptions as exc:
            if attempt >= cfg.max_retries:
                logger.error(
                    "RETRY_EXHAUSTED: attempt=%d/%d%s: %s",
                    attempt + 1,
                    cfg.max_retries + 1,
                    ctx,
                    exc,
                )
                raise

            delay = cfg.delay_for(attempt)
            logger.warning(
                "RETRYING: attempt=%d/%d delay=%.2fs%s: %s",
                attempt + 1,
                cfg.max_retries + 1,
                delay,
                ctx,
                exc,
            )
            await asyncio.sleep(delay)
        else:
            if attempt > 0:
                logger.info(
                    "RETRY_RECOVERED: succeeded on attempt %d/%d%s",
                    attempt + 1,
                    cfg.max_retries + 1,
                    ctx,
                )
            return result

    # Unreachable, but satisfies type checker
    raise RuntimeError("retry_with_backoff exhausted without raising")  # pragma: no cover
