import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def ten_page_pdf_bytes() -> bytes:
    """Generate a ten-page PDF with a sentence of text on every page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for page in range(1, 11):
        c.drawString(72, 720, f"Page {page} discusses topic number {page}.")
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def corrupted_pdf_bytes() -> bytes:
    """Bytes that claim to be a PDF but cannot be parsed."""
    return b"%PDF-1.4\nthis is not really a pdf\x00\xff\xfe"
