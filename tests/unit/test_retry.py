"""Unit tests for the retry wrapper."""

from __future__ import annotations

import logging
from unittest.mock import Mock

import pytest

from reprocessor.application.services.retry import call_with_retry
from reprocessor.domain.errors import (
    DepthExceeded,
    DownstreamUnavailable,
    EntityNotFound,
    PermissionDenied,
    ValidationError,
)
from reprocessor.domain.policy.retry_policy import RetryPolicy


def _flaky(failures: int, result: str = "ok"):
    """Callable that fails ``failures`` times before returning ``result``."""
    func = Mock(
        side_effect=[DownstreamUnavailable("entity_store", f"boom {i}") for i in range(failures)] + [result]
    )
    return func


def test_returns_first_success_without_sleeping():
    func = Mock(return_value=42)
    sleep = Mock()

    assert call_with_retry(func, RetryPolicy(), "op", sleep=sleep) == 42
    func.assert_called_once_with()
    sleep.assert_not_called()


def test_retries_until_success():
    """Test transient failures are retried with exponential delays."""
    func = _flaky(2)
    sleep = Mock()
    policy = RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=30.0, jitter=False)

    assert call_with_retry(func, policy, "op", sleep=sleep) == "ok"
    assert func.call_count == 3
    assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]


def test_exhaustion_reraises_last_error(caplog):
    """Test that after the last attempt the final error propagates unchanged."""
    errors = [DownstreamUnavailable("staging", f"boom {i}") for i in range(3)]
    func = Mock(side_effect=errors)
    sleep = Mock()

    with caplog.at_level(logging.WARNING):
        with pytest.raises(DownstreamUnavailable) as exc_info:
            call_with_retry(func, RetryPolicy(max_attempts=3, base_delay=0, max_delay=0), "stage x", sleep=sleep)

    assert exc_info.value is errors[-1]
    assert func.call_count == 3
    assert sleep.call_count == 2
    assert any("all 3 attempts failed" in r.message for r in caplog.records if r.levelno == logging.ERROR)
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2


@pytest.mark.parametrize(
    "error",
    [
        EntityNotFound("01K8TARGET".ljust(26, "0")),
        PermissionDenied("01K8TARGET".ljust(26, "0"), None, "no"),
        ValidationError("bad"),
        DepthExceeded("01K8TARGET".ljust(26, "0"), 100),
    ],
)
def test_non_retryable_errors_raise_immediately(error):
    """Test that retrying is skipped for errors a retry cannot fix."""
    func = Mock(side_effect=error)
    sleep = Mock()

    with pytest.raises(type(error)):
        call_with_retry(func, RetryPolicy(max_attempts=5), "op", sleep=sleep)

    func.assert_called_once_with()
    sleep.assert_not_called()


def test_single_attempt_policy_does_not_retry():
    func = _flaky(1)
    sleep = Mock()

    with pytest.raises(DownstreamUnavailable):
        call_with_retry(func, RetryPolicy(max_attempts=1), "op", sleep=sleep)

    func.assert_called_once_with()
    sleep.assert_not_called()


def test_jitter_uses_random_source():
    func = _flaky(1)
    sleep = Mock()
    policy = RetryPolicy(max_attempts=2, base_delay=2.0, max_delay=30.0, jitter=True)

    call_with_retry(func, policy, "op", sleep=sleep, rand=lambda: 0.0)

    sleep.assert_called_once_with(pytest.approx(1.5))
