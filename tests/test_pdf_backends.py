"""Unit tests for the default PDF collaborators.

Tests cover:
- pdfplumber text layer reading
- PyMuPDF rasterization
- Rasterizer selection from configuration
"""

import logging
from pathlib import Path

import fitz
import pytest

from config import ConfigurationManager
from invoice_capture.input_handler.pdf_processor import (
    PDFProcessor,
    Pdf2ImageRasterizer,
    PdfPlumberTextReader,
    PyMuPDFRasterizer
)


@pytest.fixture
def pdf_bytes() -> bytes:
    """A two-page PDF with a text layer on the first page only."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Invoice 9165009", fontsize=12)
    doc.new_page()
    data = doc.tobytes()
    doc.close()
    return data


def use_rasterizer(tmp_path: Path, name: str) -> None:
    settings = tmp_path / "settings.yaml"
    settings.write_text(f"input:\n  pdf:\n    rasterizer: {name}\n", encoding='utf-8')
    ConfigurationManager(str(settings))


def test_text_reader(pdf_bytes: bytes) -> None:
    """Test per-page text and fragment counts."""
    pages = PdfPlumberTextReader().read_pages(pdf_bytes)

    assert len(pages) == 2
    assert "Invoice 9165009" in pages[0].text
    assert pages[0].fragment_count == 2
    assert pages[1].fragment_count == 0


def test_pymupdf_rasterizer(pdf_bytes: bytes) -> None:
    """Test that every page is rendered at the requested scale."""
    images = list(PyMuPDFRasterizer().rasterize(pdf_bytes, 2.0))

    assert len(images) == 2
    assert all(image.mode == 'RGB' for image in images)
    # A4/Letter width at 72 DPI is about 600 points
    assert images[0].width > 1000


def test_default_rasterizer() -> None:
    """Test that PyMuPDF is the default rasterizer."""
    assert isinstance(PDFProcessor().rasterizer, PyMuPDFRasterizer)


def test_configured_rasterizer(tmp_path: Path) -> None:
    """Test selecting pdf2image through settings."""
    use_rasterizer(tmp_path, "pdf2image")

    assert isinstance(PDFProcessor().rasterizer, Pdf2ImageRasterizer)


def test_unknown_rasterizer(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that an unknown name falls back to PyMuPDF with a warning."""
    use_rasterizer(tmp_path, "ghostscript")

    with caplog.at_level(logging.WARNING):
        rasterizer = PDFProcessor().rasterizer

    assert isinstance(rasterizer, PyMuPDFRasterizer)
    assert "Unknown rasterizer 'ghostscript'" in caplog.text
