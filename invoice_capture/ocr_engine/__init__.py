"""
OCR Engine Module for the Invoice Capture Engine.

This module provides text recognition for image-based documents:
    - Scanned PDF pages (after rasterization)
    - Uploaded PNG/JPEG images

Author: ML Engineering Team
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend

__all__ = [
    'OCREngine',
    'TesseractBackend'
]
