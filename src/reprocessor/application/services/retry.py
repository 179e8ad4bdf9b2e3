"""Retry with exponential backoff and jitter around external calls."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

from ...domain.errors import NON_RETRYABLE_ERRORS
from ...domain.policy.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    func: Callable[[], T],
    policy: RetryPolicy,
    operation: str,
    sleep: Callable[[float], None] = time.sleep,
    rand: Callable[[], float] = random.random,
) -> T:
    """
    Call ``func`` until it succeeds or the policy's attempts run out.

    Not-found, permission, validation and depth errors are raised at once;
    retrying the same call cannot change their outcome. After the last
    attempt the final error is re-raised unchanged.

    Args:
        func: Zero-argument callable performing one external call
        policy: Attempt ceiling and backoff parameters
        operation: Short description used in log lines
        sleep: Sleep function (injectable for tests)
        rand: Random source in [0, 1) for jitter (injectable for tests)

    Returns:
        Result of the first successful call
    """
    last_error: Exception | None = None

    for attempt in range(policy.max_attempts):
        try:
            return func()
        except NON_RETRYABLE_ERRORS:
            raise
        except Exception as e:
            last_error = e

            if attempt < policy.max_attempts - 1:
                delay = policy.delay_for(attempt, rand())
                logger.warning(
                    f"{operation}: attempt {attempt + 1}/{policy.max_attempts} failed, "
                    f"retrying in {delay:.2f}s: {e}",
                    extra={
                        "operation": operation,
                        "attempt": attempt + 1,
                        "max_attempts": policy.max_attempts,
                        "error": str(e),
                    },
                )
                sleep(delay)
            else:
                logger.error(
                    f"{operation}: all {policy.max_attempts} attempts failed: {e}",
                    extra={"operation": operation, "max_attempts": policy.max_attempts},
                )

    assert last_error is not None
    raise last_error
