"""
Input Handler Module.

This module handles channel classification and text acquisition:
PDF text layers (with OCR fallback for scans), flattened spreadsheets,
text/email documents and image uploads.

Components:
    - InputHandler: Main interface for loading and acquiring documents
    - PDFProcessor: Text layer extraction and OCR fallback
    - SpreadsheetProcessor: Worksheet flattening to delimited text
    - TextProcessor: Text, email and Outlook message decoding
    - ImageProcessor: Image preparation for OCR
"""

from .channel import Channel, classify_channel, supported_extensions
from .document import AcquiredText, AcquisitionMethod, SourceDocument
from .handler import InputHandler
from .image_processor import ImageProcessor
from .pdf_processor import (
    PageText,
    PDFProcessor,
    Pdf2ImageRasterizer,
    PdfPlumberTextReader,
    PyMuPDFRasterizer
)
from .spreadsheet_processor import PandasSpreadsheetReader, SpreadsheetProcessor
from .text_processor import TextProcessor

__all__ = [
    'Channel',
    'classify_channel',
    'supported_extensions',
    'AcquiredText',
    'AcquisitionMethod',
    'SourceDocument',
    'InputHandler',
    'ImageProcessor',
    'PageText',
    'PDFProcessor',
    'Pdf2ImageRasterizer',
    'PdfPlumberTextReader',
    'PyMuPDFRasterizer',
    'PandasSpreadsheetReader',
    'SpreadsheetProcessor',
    'TextProcessor',
]
