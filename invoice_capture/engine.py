"""
Extraction Engine Module.

This module provides the ExtractionEngine class, the programmatic entry
point of the capture pipeline:

    Channel Classifier → Text Acquisition → Template Recognizer
        → Field Extraction + Line-Item Extraction → Result Aggregator

Usage:
    from invoice_capture import ExtractionEngine

    engine = ExtractionEngine()
    record = engine.extract_file("remittance.pdf")
    print(record.to_json())

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Optional, Union

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.exceptions import NoDataExtractedError
from invoice_capture.input_handler import AcquiredText, AcquisitionMethod, InputHandler, SourceDocument
from invoice_capture.extraction import (
    ExtractedRecord,
    FieldExtractor,
    LineItemExtractor,
    TemplateRecognizer
)
from invoice_capture.postprocessor import LineItemValidator, PostProcessor

# Initialize module logger
logger = get_logger(__name__)


class ExtractionEngine:
    """
    Turns one document into one ExtractedRecord.

    All collaborators are injectable; the defaults are built from
    configuration. Calls are synchronous and share no per-document
    state, so one engine can process many documents in sequence.

    Attributes:
        input_handler: Channel classification and text acquisition
        recognizer: Vendor template recognizer
        field_extractor: Header field rule runner
        line_item_extractor: Line-item strategy runner
        post_processor: Result aggregator
        strict: Raise NoDataExtractedError instead of flagging the record

    Example:
        >>> engine = ExtractionEngine()
        >>> record = engine.extract_text("Invoice 9165009\\nTotal $3,431.58")
        >>> record.document_id, record.total_amount
        ('9165009', 3431.58)
    """

    def __init__(
        self,
        input_handler: Optional[InputHandler] = None,
        text_reader=None,
        rasterizer=None,
        ocr_engine=None,
        spreadsheet_reader=None,
        recognizer: Optional[TemplateRecognizer] = None,
        validator: Optional[LineItemValidator] = None,
        strict: Optional[bool] = None
    ) -> None:
        """
        Initialize the engine.

        Args:
            input_handler: Prebuilt InputHandler; when given, the four
                acquisition collaborators below are ignored.
            text_reader: PDF text-layer reader.
            rasterizer: PDF page rasterizer.
            ocr_engine: OCR collaborator with `recognize(image, language)`.
            spreadsheet_reader: Spreadsheet flattener.
            recognizer: Template recognizer.
            validator: Line-item tolerance validator.
            strict: Override for `extraction.strict`.
        """
        self.input_handler = input_handler or InputHandler(
            text_reader=text_reader,
            rasterizer=rasterizer,
            ocr_engine=ocr_engine,
            spreadsheet_reader=spreadsheet_reader
        )
        self.recognizer = recognizer or TemplateRecognizer()
        self.field_extractor = FieldExtractor()
        self.line_item_extractor = LineItemExtractor(validator)
        self.post_processor = PostProcessor()
        self.strict = strict if strict is not None else get_config("extraction.strict", False)

        logger.debug(f"ExtractionEngine initialized (strict={self.strict})")

    def extract(self, document: SourceDocument) -> ExtractedRecord:
        """
        Extract a record from a classified source document.

        Args:
            document: SourceDocument from `InputHandler.load()` / `load_bytes()`.

        Returns:
            ExtractedRecord; missing fields are empty, never None.

        Raises:
            AcquisitionFailedError: If the document bytes cannot be read.
            ScannedDocumentUnreadableError: If OCR yields no usable text.
            NoDataExtractedError: In strict mode, when nothing was found.
        """
        logger.info(f"Extracting: {document.filename}")
        acquired = self.input_handler.acquire(document)
        return self._extract_from_text(acquired, document.filename)

    def extract_file(self, filepath: Union[str, Path], media_type: Optional[str] = None) -> ExtractedRecord:
        """Load a file from disk and extract it."""
        return self.extract(self.input_handler.load(filepath, media_type))

    def extract_bytes(
        self,
        raw_bytes: bytes,
        filename: str,
        media_type: Optional[str] = None
    ) -> ExtractedRecord:
        """Extract an uploaded document held in memory."""
        return self.extract(self.input_handler.load_bytes(raw_bytes, filename, media_type))

    def extract_text(self, text: str, source_file: str = "") -> ExtractedRecord:
        """
        Extract a record from text that is already plain.

        Example:
            >>> engine.extract_text("NET 30").terms
            'NET 30'
        """
        acquired = AcquiredText(content=text, acquisition_method=AcquisitionMethod.RAW)
        return self._extract_from_text(acquired, source_file)

    def _extract_from_text(self, acquired: AcquiredText, source_file: str) -> ExtractedRecord:
        """Run recognition, field and line-item extraction, then aggregate."""
        text = acquired.content

        template = self.recognizer.recognize(text)
        fields = self.field_extractor.extract(text, template)
        line_items = self.line_item_extractor.extract(text, template)

        record = self.post_processor.aggregate(
            fields,
            line_items,
            template_name=template.name,
            acquired=acquired,
            source_file=source_file
        )

        if record.no_data_extracted:
            if self.strict:
                raise NoDataExtractedError(source_file or "text")
            logger.warning(f"No invoice data extracted from {source_file or 'text'}")

        logger.info(f"Extraction complete: {record}")
        return record
