import pytest

from recapify.extraction.exceptions import CorruptFileError
from recapify.extraction.pdfplumber_adapter import PdfPlumberAdapter


class TestPdfPlumberAdapter:
    def test_extract_returns_text(self, sample_pdf_bytes: bytes) -> None:
        adapter = PdfPlumberAdapter()
        result = adapter.extract(sample_pdf_bytes)
        assert isinstance(result, str)
        assert "Hello PDF World" in result

    def test_extract_multi_page(self, multi_page_pdf_bytes: bytes) -> None:
        adapter = PdfPlumberAdapter()
        result = adapter.extract(multi_page_pdf_bytes)
        assert "Page one content" in result
        assert "Page two content" in result

    def test_extract_ten_pages_in_order(self, ten_page_pdf_bytes: bytes) -> None:
        result = PdfPlumberAdapter().extract(ten_page_pdf_bytes)
        assert result.index("Page 1 ") < result.index("Page 10 ")

    def test_extract_empty_pdf_returns_empty_string(self, empty_pdf_bytes: bytes) -> None:
        adapter = PdfPlumberAdapter()
        result = adapter.extract(empty_pdf_bytes)
        assert result == ""

    def test_extract_raises_on_invalid_bytes(self) -> None:
        adapter = PdfPlumberAdapter()
        with pytest.raises(CorruptFileError):
            adapter.extract(b"not a pdf")

    def test_extract_result_is_stripped(self, sample_pdf_bytes: bytes) -> None:
        adapter = PdfPlumberAdapter()
        result = adapter.extract(sample_pdf_bytes)
        assert result == result.strip()
