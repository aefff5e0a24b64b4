import io

import pdfplumber

from recapify.extraction.base import BaseTextExtractor
from recapify.extraction.exceptions import CorruptFileError


class PdfPlumberAdapter(BaseTextExtractor):
    """Extracts text from PDF using pdfplumber."""

    def extract(self, file_bytes: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise CorruptFileError(f"pdfplumber could not read the PDF: {exc}") from exc
        return "\n".join(pages).strip()
