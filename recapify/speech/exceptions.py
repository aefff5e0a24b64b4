class SpeechSynthesisError(Exception):
    """Raised when speech synthesis fails."""


class TransientSpeechError(SpeechSynthesisError):
    """Raised for network errors, rate limits, and backend 5xx. Retryable."""


class EndpointMismatchError(SpeechSynthesisError):
    """Raised when the endpoint redirects in a loop or its API version is gone."""


class SpeechTaskFailedError(SpeechSynthesisError):
    """Raised when an asynchronous synthesis task reports failure."""


class SpeechTimeoutError(SpeechSynthesisError):
    """Raised when an asynchronous synthesis task never completes."""
