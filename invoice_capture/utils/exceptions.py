"""
Custom Exceptions Module.

This module defines all custom exceptions raised by the invoice capture
engine. Every fatal outcome of `ExtractionEngine.extract()` is one of
these, so callers can catch `ExtractionError` and still tell a bad file
type apart from an unreadable scan.

Exception Hierarchy:
    ExtractionError (base)
    ├── InputError
    │   ├── UnsupportedChannelError
    │   └── AcquisitionFailedError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   ├── OCRProcessingError
    │   └── ScannedDocumentUnreadableError
    ├── NoDataExtractedError
    └── OutputError
        └── ExportError

Each exception carries `suggestions`: short remediation hints that a
presentation layer can show to the operator.
"""

from typing import List, Optional


class ExtractionError(Exception):
    """
    Base exception for all invoice capture errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
        suggestions: Operator-facing remediation hints.
    """

    default_suggestions: List[str] = []

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None,
        suggestions: Optional[List[str]] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
            suggestions: Remediation hints; class defaults when omitted.
        """
        self.message = message
        self.details = details or {}
        self.suggestions = list(suggestions) if suggestions else list(self.default_suggestions)
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(ExtractionError):
    """Base exception for input classification and acquisition errors."""
    pass


class UnsupportedChannelError(InputError):
    """
    Raised when neither the extension nor the media type maps to a channel.

    Example:
        >>> raise UnsupportedChannelError("report.docx", None, ["pdf", "csv"])
    """

    default_suggestions = [
        "Upload a PDF, spreadsheet (XLSX, XLS, CSV), text/email or image (PNG, JPG) file",
        "Convert the document to PDF before uploading",
    ]

    def __init__(
        self,
        filename: str,
        media_type: Optional[str] = None,
        supported_extensions: Optional[List[str]] = None
    ):
        message = f"Unsupported file type: '{filename}'"
        details = {
            "filename": filename,
            "media_type": media_type,
            "supported_extensions": supported_extensions or [],
        }
        super().__init__(message, details)


class AcquisitionFailedError(InputError):
    """Raised when a backend cannot read the PDF, spreadsheet or text bytes."""

    default_suggestions = [
        "Check that the file is not corrupted or password protected",
        "Re-export the document and try again",
    ]

    def __init__(self, filename: str, reason: Optional[str] = None):
        message = f"Could not read document: {filename}"
        details = {"filename": filename, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(ExtractionError):
    """Base exception for OCR-related errors."""
    pass


class OCREngineNotAvailableError(OCRError):
    """Raised when the configured OCR engine is not available."""

    default_suggestions = [
        "Install Tesseract OCR and make sure it is on PATH",
    ]

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(OCRError):
    """Raised when OCR of a single page fails."""

    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"OCR processing failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


class ScannedDocumentUnreadableError(OCRError):
    """
    Raised when an image-based document yields no usable OCR text.

    Remediation differs from a parse failure: the operator should rescan,
    not reformat.
    """

    default_suggestions = [
        "Ensure the scan is clear and not blurry",
        "Try scanning at a higher resolution (300 DPI recommended)",
        "Make sure the document is not upside down or rotated",
    ]

    def __init__(self, filename: str, reason: Optional[str] = None):
        message = f"Scanned document could not be read: {filename}"
        details = {"filename": filename, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION OUTCOME
# =============================================================================

class NoDataExtractedError(ExtractionError):
    """
    Parsing completed but found no line items and no header fields.

    Non-fatal by default: the engine flags the record instead. Raised
    only when the engine runs in strict mode.
    """

    default_suggestions = [
        "Check that the document is an invoice or remittance advice",
        "Enter the invoice details manually",
    ]

    def __init__(self, source: str):
        message = f"No invoice data found in: {source}"
        details = {"source": source}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(ExtractionError):
    """Base exception for export errors."""
    pass


class ExportError(OutputError):
    """Raised when writing records to XLSX/CSV/JSON fails."""

    def __init__(self, filepath: str, reason: Optional[str] = None):
        message = f"Failed to export records to: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# Export all exceptions
__all__ = [
    'ExtractionError',
    'InputError',
    'UnsupportedChannelError',
    'AcquisitionFailedError',
    'OCRError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'ScannedDocumentUnreadableError',
    'NoDataExtractedError',
    'OutputError',
    'ExportError',
]
