from recapify.extraction.base import BaseTextExtractor
from recapify.extraction.exceptions import CorruptFileError


class PlainTextAdapter(BaseTextExtractor):
    """Decodes text/plain uploads as UTF-8."""

    def extract(self, file_bytes: bytes) -> str:
        try:
            return file_bytes.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise CorruptFileError(f"File is not valid UTF-8 text: {exc}") from exc
