from recapify.extraction.base import BaseTextExtractor
from recapify.extraction.exceptions import CorruptFileError, UnsupportedFormatError
from recapify.logging.logger import Log


class TextExtractor:
    """Routes raw bytes to the adapter registered for their MIME type."""

    def __init__(self, adapters: dict[str, BaseTextExtractor]) -> None:
        self._adapters = {mime.lower(): adapter for mime, adapter in adapters.items()}

    @property
    def supported_types(self) -> list[str]:
        return sorted(self._adapters)

    def extract(self, file_bytes: bytes, mime_type: str) -> str:
        """Extract UTF-8 text from an uploaded file.

        Raises:
            UnsupportedFormatError: if no adapter handles `mime_type`.
            CorruptFileError: if the file cannot be parsed or has no text.
            ExtractionBackendError: if a remote backend fails.
        """
        normalized = mime_type.split(";", 1)[0].strip().lower()
        adapter = self._adapters.get(normalized)
        if adapter is None:
            raise UnsupportedFormatError(
                f"Unsupported file type '{mime_type}'. Supported: {self.supported_types}"
            )
        if not file_bytes:
            raise CorruptFileError("File is empty")

        text = adapter.extract(file_bytes)
        if not text:
            raise CorruptFileError("Failed to extract text from document")
        Log.debug(f"Extracted {len(text)} chars using {type(adapter).__name__}")
        return text
