"""
Invoice Capture Engine - Source Package.

Heuristic extraction of invoice and remittance data from PDFs, scans,
spreadsheets, email and plain text. Each module has a single
responsibility.

Modules:
    - input_handler: Channel classification and text acquisition
    - ocr_engine: Tesseract OCR for scans and images
    - extraction: Templates, field rules and line-item strategies
    - postprocessor: Money/date normalization, validation, aggregation
    - output_handler: Excel, CSV and JSON export
    - engine: The ExtractionEngine entry point

Architecture:
    Classify → Acquire text → Recognize template
        → Fields + Line items → Aggregate → Export
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

from .engine import ExtractionEngine
from .extraction import ExtractedRecord, LineItem

__all__ = [
    'ExtractionEngine',
    'ExtractedRecord',
    'LineItem',
]
