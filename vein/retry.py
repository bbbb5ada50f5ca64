"""Retrying of cache-database connections with configurable backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NON_RETRYABLE_MARKERS = (
    "authentication",
    "permission denied",
    "invalid",
    "malformed",
    "syntax error",
    "no such table",
    "does not exist",
)

_RETRYABLE_MARKERS = (
    "connection",
    "timeout",
    "refused",
    "too many",
    "busy",
    "locked",
    "unavailable",
    "network",
)

_GOLDEN_RATIO = 1.618


class BackoffStrategy(Enum):
    """How the delay between connection attempts grows."""

    EXPONENTIAL = "exponential"
    FIBONACCI = "fibonacci"
    CONSTANT = "constant"


@dataclass(frozen=True)
class RetryConfig:
    """Retry settings for connecting to the cache database."""

    enabled: bool
    max_attempts: int
    initial_backoff_ms: int
    max_backoff_secs: int
    backoff_strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    jitter_factor: float = 1.0

    @property
    def max_backoff_ms(self) -> int:
        return self.max_backoff_secs * 1000


def is_retryable_error(error: BaseException | str) -> bool:
    """Decide from the error message whether another attempt may succeed.

    Authentication, permission and schema problems are final; connection,
    timeout and contention problems, and anything unrecognised, are retried.
    """
    message = str(error).lower()
    if any(marker in message for marker in _NON_RETRYABLE_MARKERS):
        logger.debug("Non-retryable database error detected: %s", error)
        return False
    if any(marker in message for marker in _RETRYABLE_MARKERS):
        logger.debug("Retryable database error detected: %s", error)
        return True
    logger.debug("Unknown error type, treating as retryable: %s", error)
    return True


def next_backoff(current_ms: int, config: RetryConfig) -> int:
    """Delay in milliseconds to wait after a wait of ``current_ms``."""
    cap = config.max_backoff_ms
    if config.backoff_strategy is BackoffStrategy.EXPONENTIAL:
        return min(current_ms * 2, cap)
    if config.backoff_strategy is BackoffStrategy.FIBONACCI:
        return min(int(current_ms * _GOLDEN_RATIO), cap)
    return config.initial_backoff_ms


async def connect_with_retry(
    connect_fn: Callable[[], Awaitable[T]],
    retry_config: RetryConfig,
    db_type: str,
) -> T:
    """Await ``connect_fn()`` until it succeeds, retrying transient failures.

    The last error is re-raised when it is not retryable or when
    ``max_attempts`` attempts have failed.
    """
    if not retry_config.enabled:
        logger.debug("Retry disabled for %s, attempting single connection", db_type)
        return await connect_fn()

    attempt = 0
    backoff_ms = retry_config.initial_backoff_ms
    while True:
        attempt += 1
        try:
            result = await connect_fn()
        except Exception as err:
            if not is_retryable_error(err):
                logger.error(
                    "%s connection failed with non-retryable error after %d attempt(s): %s",
                    db_type,
                    attempt,
                    err,
                )
                raise
            if attempt >= retry_config.max_attempts:
                logger.error(
                    "%s connection failed after %d attempt(s): %s", db_type, attempt, err
                )
                raise
            logger.warning(
                "%s connection failed (attempt %d/%d), retrying in %d ms: %s",
                db_type,
                attempt,
                retry_config.max_attempts,
                backoff_ms,
                err,
            )
            await asyncio.sleep(backoff_ms / 1000.0)
            backoff_ms = next_backoff(backoff_ms, retry_config)
            continue
        if attempt > 1:
            logger.info("%s connection succeeded after %d attempts", db_type, attempt)
        return result