class ExtractionError(Exception):
    """Base exception for text extraction failures."""


class UnsupportedFormatError(ExtractionError):
    """Raised when no extractor handles the declared MIME type."""


class CorruptFileError(ExtractionError):
    """Raised when the file cannot be parsed or yields no text."""


class ExtractionBackendError(ExtractionError):
    """Raised when a remote extraction backend fails or times out."""
