import pymupdf

from recapify.extraction.base import BaseTextExtractor
from recapify.extraction.exceptions import CorruptFileError


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def extract(self, file_bytes: bytes) -> str:
        try:
            with pymupdf.open(stream=file_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise CorruptFileError(f"pymupdf could not read the PDF: {exc}") from exc
        return "\n".join(pages).strip()
