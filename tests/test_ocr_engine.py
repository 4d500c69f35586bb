"""Unit tests for the OCR engine.

Tests cover:
- Backend selection and lazy initialization
- Recognition through pytesseract (patched)
- Error translation
"""

from unittest.mock import patch

import pytest
import pytesseract
from PIL import Image

from invoice_capture.ocr_engine import OCREngine
from invoice_capture.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError


@pytest.fixture
def page() -> Image.Image:
    """A small grayscale page image."""
    return Image.new('L', (40, 20), color=255)


@pytest.fixture
def tesseract():
    """Patch the pytesseract calls the backend makes."""
    with patch.object(pytesseract, 'get_tesseract_version', return_value="5.3.0"), \
            patch.object(pytesseract, 'image_to_string', return_value="  Invoice 9165009\n") as to_string:
        yield to_string


def test_backend_is_lazy() -> None:
    """Test that construction does not touch Tesseract."""
    with patch.object(pytesseract, 'get_tesseract_version') as version:
        engine = OCREngine()

    version.assert_not_called()
    assert engine.backend_name == "tesseract"
    assert engine.language == "eng"


def test_recognize(tesseract, page: Image.Image) -> None:
    """Test text, language and configuration passed to Tesseract."""
    text = OCREngine().recognize(page, "deu")

    assert text == "Invoice 9165009"
    args, kwargs = tesseract.call_args
    assert args[0].mode == 'RGB'
    assert kwargs['lang'] == "deu"
    assert kwargs['config'] == "--psm 3 --oem 3"


def test_default_language(tesseract, page: Image.Image) -> None:
    """Test that the engine language is used when none is given."""
    OCREngine(language="fra").recognize(page)

    assert tesseract.call_args.kwargs['lang'] == "fra"


def test_invalid_image() -> None:
    """Test that non-images are rejected."""
    with pytest.raises(OCRProcessingError):
        OCREngine().recognize(b"not an image")


def test_unknown_backend(page: Image.Image) -> None:
    """Test that an unsupported backend name is reported on first use."""
    engine = OCREngine(backend="easyocr")

    with pytest.raises(OCREngineNotAvailableError):
        engine.recognize(page)


def test_tesseract_missing(page: Image.Image) -> None:
    """Test that a missing Tesseract binary is reported."""
    missing = pytesseract.TesseractNotFoundError()
    with patch.object(pytesseract, 'get_tesseract_version', side_effect=missing):
        with pytest.raises(OCREngineNotAvailableError):
            OCREngine().recognize(page)


def test_tesseract_failure(tesseract, page: Image.Image) -> None:
    """Test that Tesseract errors become OCRProcessingError."""
    tesseract.side_effect = pytesseract.TesseractError(1, "bad image")

    with pytest.raises(OCRProcessingError):
        OCREngine().recognize(page)
