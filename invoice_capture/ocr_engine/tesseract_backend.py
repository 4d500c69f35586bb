"""
Tesseract OCR Backend.

This module provides OCR functionality using Tesseract (pytesseract).
The capture engine only needs plain text per page, so the backend
exposes `get_raw_text()`; layout analysis is left to the field
extraction cascade.

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package

Author: ML Engineering Team
"""

import time
from typing import Optional

import pytesseract
from PIL import Image

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError

# Initialize module logger
logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Uses pytesseract to recognize text in page images. Tesseract must be
    installed on the system for this to work.

    Attributes:
        language: Default Tesseract language code (e.g., "eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract configuration

    Example:
        >>> backend = TesseractBackend()
        >>> text = backend.get_raw_text(image)
    """

    name = "tesseract"

    def __init__(self) -> None:
        """Initialize the Tesseract backend with configuration."""
        self.language = get_config("ocr.language", "eng")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check that the Tesseract binary is reachable.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            ) from e

        logger.info(f"Tesseract version: {version}")

    def _build_config(self) -> str:
        """
        Build Tesseract configuration string.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def get_raw_text(self, image: Image.Image, language: Optional[str] = None) -> str:
        """
        Recognize the text content of a page image.

        Args:
            image: PIL Image to process.
            language: Tesseract language code; backend default when None.

        Returns:
            Recognized text, stripped.

        Raises:
            OCRProcessingError: If Tesseract fails on this image.
        """
        start_time = time.time()

        if image.mode != 'RGB':
            image = image.convert('RGB')

        try:
            text = pytesseract.image_to_string(
                image,
                lang=language or self.language,
                config=self._build_config()
            )
        except (pytesseract.TesseractError, RuntimeError) as e:
            logger.error(f"Text extraction failed: {e}")
            raise OCRProcessingError("image", str(e)) from e

        logger.debug(
            f"Tesseract recognized {len(text.strip())} characters "
            f"({time.time() - start_time:.2f}s)"
        )
        return text.strip()
