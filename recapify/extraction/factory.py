from typing import ClassVar

from recapify.config.settings import Settings
from recapify.extraction.base import BaseTextExtractor
from recapify.extraction.extractor import TextExtractor
from recapify.extraction.ocr_space_adapter import OcrSpaceAdapter
from recapify.extraction.pdfplumber_adapter import PdfPlumberAdapter
from recapify.extraction.plain_text_adapter import PlainTextAdapter
from recapify.extraction.pymupdf_adapter import PyMuPdfAdapter


class TextExtractorFactory:
    """Creates the text extractor with the configured PDF engine."""

    PDF_ENGINES: ClassVar[tuple[str, ...]] = ("pdfplumber", "pymupdf", "ocr_space")

    @classmethod
    def create(cls, settings: Settings) -> TextExtractor:
        return TextExtractor(
            {
                "application/pdf": cls._create_pdf_adapter(settings),
                "text/plain": PlainTextAdapter(),
            }
        )

    @classmethod
    def _create_pdf_adapter(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.extraction_engine.lower()
        if engine == "pdfplumber":
            return PdfPlumberAdapter()
        if engine == "pymupdf":
            return PyMuPdfAdapter()
        if engine == "ocr_space":
            return OcrSpaceAdapter(
                api_key=settings.ocr_space_api_key,
                url=settings.ocr_space_url,
                timeout_seconds=settings.extraction_timeout_seconds,
            )
        raise ValueError(
            f"Unknown extraction engine '{engine}'. Choose from: {list(cls.PDF_ENGINES)}"
        )
