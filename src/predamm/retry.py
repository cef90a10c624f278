"""Retry for transient store failures (conflict, timeout). Exponential backoff."""

from __future__ import annotations

import time
from typing import Callable, TypeVar

import structlog

from predamm.errors import AmmError

log = structlog.get_logger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 0.05) -> float:
    """Delay in seconds before retry number `attempt` (0-based)."""
    return base_delay * (2 ** attempt)


def run_with_retry(
    fn: Callable[[], T],
    retries: int = 3,
    base_delay: float = 0.05,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call fn, retrying up to `retries` more times on retryable AmmErrors.
    Business errors (not found, insufficient balance, ...) propagate at once.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except AmmError as e:
            if not e.retryable or attempt >= retries:
                raise
            delay = backoff_delay(attempt, base_delay)
            log.info("transaction_retry", attempt=attempt + 1, delay_sec=delay, error=e.code)
            sleep(delay)
            attempt += 1
