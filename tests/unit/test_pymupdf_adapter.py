import pytest

from recapify.extraction.exceptions import CorruptFileError
from recapify.extraction.pymupdf_adapter import PyMuPdfAdapter


class TestPyMuPdfAdapter:
    def test_extract_returns_text(self, sample_pdf_bytes: bytes) -> None:
        result = PyMuPdfAdapter().extract(sample_pdf_bytes)
        assert "Hello PDF World" in result

    def test_extract_multi_page(self, multi_page_pdf_bytes: bytes) -> None:
        result = PyMuPdfAdapter().extract(multi_page_pdf_bytes)
        assert "Page one content" in result
        assert "Page two content" in result

    def test_extract_empty_pdf_returns_empty_string(self, empty_pdf_bytes: bytes) -> None:
        assert PyMuPdfAdapter().extract(empty_pdf_bytes) == ""

    def test_extract_raises_on_invalid_bytes(self) -> None:
        with pytest.raises(CorruptFileError):
            PyMuPdfAdapter().extract(b"not a pdf")
