class SummarizationError(Exception):
    """Raised when summarization fails."""


class ModelUnavailableError(SummarizationError):
    """Raised when the model backend cannot be reached, times out, or errors."""


class InputTooLargeError(SummarizationError):
    """Raised when the backend rejects the input size and no truncation applied."""


class MalformedModelResponseError(SummarizationError):
    """Raised when the model output cannot be coerced to a string. Never retried."""
