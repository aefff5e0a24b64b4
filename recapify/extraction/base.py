from abc import ABC, abstractmethod


class BaseTextExtractor(ABC):
    """Contract for all text extraction adapters."""

    @abstractmethod
    def extract(self, file_bytes: bytes) -> str:
        """Extract plain text from raw file bytes.

        Args:
            file_bytes: Raw uploaded file content.

        Returns:
            Extracted text as a single normalized string.

        Raises:
            CorruptFileError: if the file cannot be parsed.
            ExtractionBackendError: if a remote backend fails.
        """
