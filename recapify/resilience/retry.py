"""Backoff policies and the generic retry / poll helpers built on them."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from recapify.logging.logger import Log
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.resilience.exceptions import PollTimeoutError, RetryExhaustedError

T = TypeVar("T")


@dataclass(frozen=True)
class BackoffPolicy:
    """Capped exponential backoff.

    `delay_for(n)` is the wait after the n-th failed attempt (1-based).
    """

    initial_delay: float
    max_attempts: int
    multiplier: float = 2.0
    max_delay: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must not be negative")

    def delay_for(self, attempt: int) -> float:
        delay = self.initial_delay * (self.multiplier ** (attempt - 1))
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay

    def total_wait(self) -> float:
        """Upper bound of time spent sleeping across all attempts."""
        return sum(self.delay_for(n) for n in range(1, self.max_attempts))

    def wait_strategy(self) -> wait_exponential:
        return wait_exponential(
            multiplier=self.initial_delay,
            exp_base=self.multiplier,
            max=self.max_delay if self.max_delay is not None else float("inf"),
        )


def _retrying(policy: BackoffPolicy, cancel_token: CancellationToken, **kwargs: Any) -> Retrying:
    # Waits go through the token so a cancel interrupts the backoff.
    return Retrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait_strategy(),
        sleep=cancel_token.sleep,
        **kwargs,
    )


def retry_call(
    operation: Callable[[], T],
    policy: BackoffPolicy,
    *,
    retry_on: tuple[type[BaseException], ...],
    description: str,
    cancel_token: CancellationToken = NEVER_CANCELLED,
) -> T:
    """Run `operation`, retrying on `retry_on` exceptions with `policy` backoff.

    Exceptions outside `retry_on` propagate immediately.

    Raises:
        RetryExhaustedError: after `policy.max_attempts` retryable failures.
        OperationCancelledError: if cancelled before or between attempts.
    """

    def log_retry(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        Log.warning(
            f"{description} attempt {state.attempt_number}/{policy.max_attempts} "
            f"failed: {error}; retrying in {delay:.1f}s"
        )

    def attempt() -> T:
        cancel_token.raise_if_cancelled()
        return operation()

    retrying = _retrying(
        policy,
        cancel_token,
        retry=retry_if_exception_type(retry_on),
        before_sleep=log_retry,
    )
    try:
        return retrying(attempt)
    except RetryError as exc:
        last_error = exc.last_attempt.exception()
        attempts = exc.last_attempt.attempt_number
        raise RetryExhaustedError(
            f"{description} failed after {attempts} attempts: {last_error}",
            attempts=attempts,
            last_error=last_error,
        ) from last_error


def poll_until(
    fetch: Callable[[], T],
    is_done: Callable[[T], bool],
    policy: BackoffPolicy,
    *,
    description: str,
    cancel_token: CancellationToken = NEVER_CANCELLED,
) -> T:
    """Call `fetch` until `is_done` accepts its result.

    Terminal failures are signalled by `fetch` or `is_done` raising.

    Raises:
        PollTimeoutError: if the condition is unmet after `policy.max_attempts` fetches.
        OperationCancelledError: if cancelled between fetches.
    """

    def log_poll(state: RetryCallState) -> None:
        delay = state.next_action.sleep if state.next_action else 0.0
        Log.debug(
            f"{description} not ready (poll {state.attempt_number}); "
            f"next poll in {delay:.1f}s"
        )

    def attempt() -> T:
        cancel_token.raise_if_cancelled()
        return fetch()

    retrying = _retrying(
        policy,
        cancel_token,
        retry=retry_if_result(lambda result: not is_done(result)),
        before_sleep=log_poll,
    )
    try:
        return retrying(attempt)
    except RetryError as exc:
        raise PollTimeoutError(
            f"{description} not ready after {policy.max_attempts} polls",
            attempts=policy.max_attempts,
        ) from exc
