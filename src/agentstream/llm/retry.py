"""Backoff retries for one-shot backend calls.

Only ``LLMBackend.complete`` goes through here. A streaming round that fails
is reported to the session caller, who decides whether to start over.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_MESSAGE = re.compile(
    r"overloaded|rate.?limit|too many requests|"
    r"\b(?:429|500|502|503|504|529)\b|"
    r"service.?unavailable|server error|internal error|"
    r"connection.?error|timeout|timed out",
    re.IGNORECASE,
)

TRANSIENT_TYPE_HINTS = ("timeout", "connection", "overloaded", "ratelimit", "rate_limit")

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504, 529})


@dataclass
class RetryConfig:
    enabled: bool = True
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000

    def delays(self) -> Iterator[float]:
        """Seconds to wait before each retry: doubling, capped at max_delay_ms."""
        for attempt in range(self.max_retries):
            yield min(self.base_delay_ms * 2**attempt, self.max_delay_ms) / 1000


def _looks_transient(error: BaseException) -> bool:
    if getattr(error, "status_code", None) in RETRYABLE_STATUS_CODES:
        return True
    type_name = type(error).__name__.lower()
    if any(hint in type_name for hint in TRANSIENT_TYPE_HINTS):
        return True
    return TRANSIENT_MESSAGE.search(str(error)) is not None


def is_retryable_error(error: BaseException) -> bool:
    """Whether ``error``, or anything in its ``__cause__`` chain, is transient.

    Rate limits, overloaded or 5xx responses and connection failures or
    timeouts count as transient. Following the chain lets a TransportError
    raised ``from`` an SDK error be judged by that SDK error.
    """
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if _looks_transient(current):
            return True
        seen.add(id(current))
        current = current.__cause__
    return False


async def with_retry(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "backend call",
) -> T:
    """Await ``func()``, retrying transient failures with exponential backoff.

    Non-transient errors propagate immediately; once every retry is spent
    the last error propagates.
    """
    config = config or RetryConfig()
    if not config.enabled:
        return await func()

    schedule = config.delays()
    attempt = 1
    while True:
        try:
            return await func()
        except Exception as e:
            if not is_retryable_error(e):
                raise
            delay_s = next(schedule, None)
            if delay_s is None:
                logger.warning(
                    "retry_exhausted",
                    extra={
                        "operation": operation_name,
                        "attempts": attempt,
                        "error.type": type(e).__name__,
                        "error.message": str(e),
                    },
                )
                raise
            logger.info(
                "retry_attempt",
                extra={
                    "operation": operation_name,
                    "attempt": attempt,
                    "retry_delay_s": delay_s,
                    "error.type": type(e).__name__,
                },
            )
            await asyncio.sleep(delay_s)
            attempt += 1
