class OperationCancelledError(Exception):
    """Raised when a cancellation token fires while an operation waits."""


class RetryExhaustedError(Exception):
    """Raised when every attempt allowed by a retry policy has failed."""

    def __init__(self, message: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class PollTimeoutError(Exception):
    """Raised when a polled condition is still unmet after the last attempt."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
