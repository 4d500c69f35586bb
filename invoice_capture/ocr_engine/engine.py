"""
Main OCR Engine Module.

This module provides the OCREngine class, the `recognize(image, language)`
collaborator used by the text acquisition pipeline for scanned PDFs and
image uploads.

The engine is constructed explicitly and passed to whoever needs it; the
backend itself is created on first use so that documents with a text
layer never require Tesseract to be installed.

Usage:
    from invoice_capture.ocr_engine import OCREngine

    engine = OCREngine()
    text = engine.recognize(image, "eng")

Author: ML Engineering Team
"""

from typing import Optional

from PIL import Image

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    OCR engine providing a unified `recognize()` interface.

    Supported Backends:
        - tesseract: Tesseract OCR via pytesseract

    Attributes:
        backend_name: Name of the configured OCR backend
        language: Default recognition language

    Example:
        >>> engine = OCREngine()
        >>> text = engine.recognize(page_image, "eng")
    """

    SUPPORTED_BACKENDS = ['tesseract']

    def __init__(self, backend: Optional[str] = None, language: Optional[str] = None) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: OCR backend to use. If None, uses configuration.
            language: Default language code. If None, uses configuration.
        """
        self.backend_name = backend or get_config("ocr.engine", "tesseract")
        if self.backend_name == "pytesseract":
            self.backend_name = "tesseract"

        self.language = language or get_config("ocr.language", "eng")
        self._backend = None

        logger.debug(f"OCR Engine configured with backend: {self.backend_name}")

    @property
    def backend(self) -> TesseractBackend:
        """
        The initialized backend, created on first access.

        Raises:
            OCREngineNotAvailableError: If the backend cannot be used.
        """
        if self._backend is None:
            if self.backend_name not in self.SUPPORTED_BACKENDS:
                raise OCREngineNotAvailableError(self.backend_name)
            self._backend = TesseractBackend()
            logger.info(f"OCR Engine initialized with backend: {self.backend_name}")
        return self._backend

    def recognize(self, image: Image.Image, language: Optional[str] = None) -> str:
        """
        Recognize the text on one page image.

        Args:
            image: PIL Image of the page.
            language: Language code; engine default when None.

        Returns:
            Recognized text (may be empty).

        Raises:
            OCREngineNotAvailableError: If the backend is unavailable.
            OCRProcessingError: If recognition of this image fails.
        """
        if not isinstance(image, Image.Image):
            raise OCRProcessingError("unknown", "Invalid image input")

        return self.backend.get_raw_text(image, language or self.language)
