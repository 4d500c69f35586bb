"""
Main Input Handler Module.

This module provides the InputHandler class, the single entry point for
turning an uploaded file into plain text. It classifies the file into a
channel and delegates acquisition to the matching processor.

Usage:
    from invoice_capture.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load("remittance.xlsx")
    acquired = handler.acquire(document)

    # Batch loading
    documents = handler.load_batch("./invoices/")

Classes:
    InputHandler: Main class for classification and text acquisition

Author: ML Engineering Team
"""

from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from invoice_capture.ocr_engine import OCREngine
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.helpers import format_file_size, visible_length
from invoice_capture.utils.exceptions import (
    AcquisitionFailedError,
    InputError,
    ScannedDocumentUnreadableError
)

from .channel import Channel, classify_channel, supported_extensions
from .document import AcquiredText, AcquisitionMethod, SourceDocument
from .image_processor import ImageProcessor
from .pdf_processor import PDFProcessor
from .spreadsheet_processor import SpreadsheetProcessor
from .text_processor import TextProcessor


# Initialize module logger
logger = get_logger(__name__)


class InputHandler:
    """
    Main input handler for invoice documents.

    Collaborators (text-layer reader, rasterizer, OCR engine and
    spreadsheet reader) are injected so tests can replace them; any left
    as None is built from configuration.

    Attributes:
        max_file_size: Upload size limit in bytes
        pdf_processor: Processor for the pdf channel
        spreadsheet_processor: Processor for the spreadsheet channel
        text_processor: Processor for the text channel
        image_processor: Processor for the image channel

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load_bytes(data, "invoice.pdf", "application/pdf")
        >>> handler.acquire(document).acquisition_method
        <AcquisitionMethod.TEXT_LAYER: 'text-layer'>
    """

    def __init__(
        self,
        text_reader=None,
        rasterizer=None,
        ocr_engine: Optional[OCREngine] = None,
        spreadsheet_reader=None
    ) -> None:
        """
        Initialize the InputHandler.

        Args:
            text_reader: PDF text-layer reader.
            rasterizer: PDF page rasterizer.
            ocr_engine: OCR collaborator with `recognize(image, language)`.
            spreadsheet_reader: Spreadsheet flattener.
        """
        max_mb = get_config("input.max_file_size_mb", 10)
        self.max_file_size = int(max_mb * 1024 * 1024)
        self.language = get_config("ocr.language", "eng")

        self._ocr_engine = ocr_engine

        self.pdf_processor = PDFProcessor(
            text_reader=text_reader,
            rasterizer=rasterizer,
            ocr_engine=ocr_engine
        )
        self.spreadsheet_processor = SpreadsheetProcessor(reader=spreadsheet_reader)
        self.text_processor = TextProcessor()
        self.image_processor = ImageProcessor()

        logger.debug(f"InputHandler initialized (max size {format_file_size(self.max_file_size)})")

    @property
    def ocr_engine(self):
        if self._ocr_engine is None:
            self._ocr_engine = self.pdf_processor.ocr_engine
        return self._ocr_engine

    def validate_size(self, raw_bytes: bytes, filename: str) -> None:
        """
        Check the upload is neither empty nor above the size limit.

        Raises:
            AcquisitionFailedError: If the size check fails.
        """
        if not raw_bytes:
            raise AcquisitionFailedError(filename, "File is empty")

        if len(raw_bytes) > self.max_file_size:
            raise AcquisitionFailedError(
                filename,
                f"File size {format_file_size(len(raw_bytes))} exceeds limit "
                f"of {format_file_size(self.max_file_size)}"
            )

    def load_bytes(
        self,
        raw_bytes: bytes,
        filename: str,
        media_type: Optional[str] = None
    ) -> SourceDocument:
        """
        Wrap uploaded bytes in a classified SourceDocument.

        Raises:
            UnsupportedChannelError: If the file type is not accepted.
            AcquisitionFailedError: If the file is empty or too large.
        """
        channel = classify_channel(filename, media_type)
        self.validate_size(raw_bytes, filename)

        document = SourceDocument(
            raw_bytes=raw_bytes,
            filename=filename,
            channel=channel,
            media_type=media_type
        )
        logger.debug(f"Loaded {document}")
        return document

    def load(self, filepath: Union[str, Path], media_type: Optional[str] = None) -> SourceDocument:
        """
        Read a file from disk into a SourceDocument.

        Raises:
            InputError: If the path is not a readable file.
        """
        path = Path(filepath)
        logger.info(f"Loading file: {path}")

        if not path.is_file():
            raise InputError(f"File not found: {filepath}", {"filepath": str(filepath)})

        try:
            raw_bytes = path.read_bytes()
        except OSError as e:
            raise AcquisitionFailedError(path.name, str(e)) from e

        return self.load_bytes(raw_bytes, path.name, media_type)

    def load_batch(
        self,
        directory: Union[str, Path],
        recursive: bool = False
    ) -> List[Path]:
        """
        List every supported file in a directory.

        Args:
            directory: Directory containing invoice files.
            recursive: Whether to search subdirectories.

        Returns:
            Sorted list of file paths with a supported extension.
        """
        directory = Path(directory)

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}", {"directory": str(directory)})

        extensions = set(supported_extensions())
        pattern = "**/*" if recursive else "*"
        files = sorted(
            path for path in directory.glob(pattern)
            if path.is_file() and path.suffix.lower().lstrip('.') in extensions
        )

        logger.info(f"Found {len(files)} files to process in {directory}")
        return files

    def acquire(self, document: SourceDocument) -> AcquiredText:
        """
        Produce the plain text of a document via its channel.

        Args:
            document: Classified source document.

        Returns:
            AcquiredText recording the acquisition method.

        Raises:
            AcquisitionFailedError: If the backend cannot read the bytes.
            ScannedDocumentUnreadableError: If OCR yields no usable text.
        """
        if document.channel == Channel.PDF:
            acquired = self.pdf_processor.process(document)
        elif document.channel == Channel.SPREADSHEET:
            acquired = self.spreadsheet_processor.process(document)
        elif document.channel == Channel.IMAGE:
            acquired = self._acquire_image(document)
        else:
            acquired = self.text_processor.process(document)

        logger.info(
            f"Acquired {len(acquired.content)} characters from {document.filename} "
            f"via {acquired.acquisition_method.value}"
        )
        return acquired

    def _acquire_image(self, document: SourceDocument) -> AcquiredText:
        """OCR a single image upload."""
        logger.info(f"Processing image: {document.filename}")
        image = self.image_processor.load(document.raw_bytes, document.filename)

        try:
            text = self.ocr_engine.recognize(image, self.language)
        except Exception as e:
            logger.error(f"OCR failed on {document.filename}: {e}")
            raise ScannedDocumentUnreadableError(document.filename, str(e)) from e

        document.page_count = 1
        if visible_length(text) == 0:
            raise ScannedDocumentUnreadableError(document.filename, "OCR recognized no characters")

        return AcquiredText(content=text, acquisition_method=AcquisitionMethod.OCR)
