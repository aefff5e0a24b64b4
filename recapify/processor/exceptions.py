class ProcessorError(Exception):
    """Base exception for all pipeline-related errors."""


class InputError(ProcessorError):
    """Raised for a bad file, unsupported type, or missing required field."""


class DocumentNotFoundError(ProcessorError):
    """Raised when a document cannot be found in the database."""


class SummaryNotFoundError(ProcessorError):
    """Raised when a document has no summary yet."""


class StateConflictError(ProcessorError):
    """Raised when a document is in the wrong state for the requested operation."""


class NothingToRetryError(StateConflictError):
    """Raised when a failed document has no raw file or cached text left to retry with."""


class BackendFailureError(ProcessorError):
    """Raised when an external backend failed for good during the current attempt."""
