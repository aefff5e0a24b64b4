from unittest.mock import MagicMock

import pytest

from recapify.resilience.exceptions import (
    OperationCancelledError,
    PollTimeoutError,
    RetryExhaustedError,
)
from recapify.resilience.retry import BackoffPolicy, poll_until, retry_call


class _Flaky(Exception):
    pass


def _token() -> MagicMock:
    token = MagicMock()
    token.raise_if_cancelled.return_value = None
    return token


class TestBackoffPolicy:
    def test_exponential_delays(self) -> None:
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=4)
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_delay_is_capped(self) -> None:
        policy = BackoffPolicy(initial_delay=2.0, max_attempts=10, max_delay=30.0)
        assert policy.delay_for(5) == 30.0

    def test_total_wait_sums_delays_between_attempts(self) -> None:
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=3)
        assert policy.total_wait() == 3.0

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError, match="max_attempts"):
            BackoffPolicy(initial_delay=1.0, max_attempts=0)

    def test_rejects_negative_delay(self) -> None:
        with pytest.raises(ValueError, match="initial_delay"):
            BackoffPolicy(initial_delay=-1.0, max_attempts=1)


class TestRetryCall:
    def test_returns_first_success(self) -> None:
        operation = MagicMock(return_value="ok")
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=3)

        result = retry_call(
            operation, policy, retry_on=(_Flaky,), description="op", cancel_token=_token()
        )

        assert result == "ok"
        operation.assert_called_once()

    def test_retries_then_succeeds_with_backoff(self) -> None:
        operation = MagicMock(side_effect=[_Flaky("a"), _Flaky("b"), "ok"])
        token = _token()
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=3)

        result = retry_call(
            operation, policy, retry_on=(_Flaky,), description="op", cancel_token=token
        )

        assert result == "ok"
        assert [c.args[0] for c in token.sleep.call_args_list] == [1.0, 2.0]

    def test_exhaustion_raises_with_attempt_count(self) -> None:
        operation = MagicMock(side_effect=_Flaky("down"))
        token = _token()
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=3)

        with pytest.raises(RetryExhaustedError) as exc_info:
            retry_call(
                operation, policy, retry_on=(_Flaky,), description="op", cancel_token=token
            )

        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, _Flaky)
        assert operation.call_count == 3
        assert token.sleep.call_count == 2

    def test_non_retryable_error_propagates_immediately(self) -> None:
        operation = MagicMock(side_effect=KeyError("fatal"))
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=3)

        with pytest.raises(KeyError):
            retry_call(
                operation, policy, retry_on=(_Flaky,), description="op", cancel_token=_token()
            )

        operation.assert_called_once()

    def test_cancellation_during_wait_stops_retrying(self) -> None:
        operation = MagicMock(side_effect=_Flaky("down"))
        token = _token()
        token.sleep.side_effect = OperationCancelledError("cancelled")
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=5)

        with pytest.raises(OperationCancelledError):
            retry_call(
                operation, policy, retry_on=(_Flaky,), description="op", cancel_token=token
            )

        operation.assert_called_once()


class TestPollUntil:
    def test_returns_when_done(self) -> None:
        fetch = MagicMock(side_effect=["processing", "processing", "done"])
        token = _token()
        policy = BackoffPolicy(initial_delay=2.0, max_attempts=5, max_delay=30.0)

        result = poll_until(
            fetch, lambda s: s == "done", policy, description="task", cancel_token=token
        )

        assert result == "done"
        assert [c.args[0] for c in token.sleep.call_args_list] == [2.0, 4.0]

    def test_times_out_after_max_polls(self) -> None:
        fetch = MagicMock(return_value="processing")
        token = _token()
        policy = BackoffPolicy(initial_delay=1.0, max_attempts=4)

        with pytest.raises(PollTimeoutError) as exc_info:
            poll_until(
                fetch, lambda s: s == "done", policy, description="task", cancel_token=token
            )

        assert exc_info.value.attempts == 4
        assert fetch.call_count == 4
        assert token.sleep.call_count == 3

    def test_terminal_error_from_predicate_propagates(self) -> None:
        def is_done(state: str) -> bool:
            if state == "failed":
                raise RuntimeError("task failed")
            return state == "done"

        policy = BackoffPolicy(initial_delay=0.0, max_attempts=3)
        with pytest.raises(RuntimeError, match="task failed"):
            poll_until(
                MagicMock(return_value="failed"),
                is_done,
                policy,
                description="task",
                cancel_token=_token(),
            )
