"""
PDF Processor Module.

This module turns PDF bytes into plain text:
    - Digital PDFs: text layer extracted page by page with pdfplumber
    - Scanned PDFs: pages rasterized (PyMuPDF, or pdf2image/Poppler)
      and recognized with the OCR engine

A PDF is treated as scanned when its whole text layer has fewer than
`input.pdf.min_text_chars` visible characters or no text fragments at
all. Pages are always processed sequentially, in order.

Author: ML Engineering Team
"""

import io
from dataclasses import dataclass
from typing import Iterator, List, Optional

import fitz  # PyMuPDF
import pdfplumber
from pdf2image import convert_from_bytes, pdfinfo_from_bytes
from PIL import Image

from config import get_config
from invoice_capture.ocr_engine import OCREngine
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.helpers import visible_length
from invoice_capture.utils.exceptions import (
    AcquisitionFailedError,
    ExtractionError,
    OCREngineNotAvailableError,
    ScannedDocumentUnreadableError
)
from .document import AcquiredText, AcquisitionMethod, SourceDocument

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class PageText:
    """Text layer of one PDF page and the number of text fragments on it."""
    text: str
    fragment_count: int


class PdfPlumberTextReader:
    """
    PDF text-layer reader backed by pdfplumber.

    Example:
        >>> pages = PdfPlumberTextReader().read_pages(pdf_bytes)
        >>> pages[0].fragment_count
        212
    """

    def read_pages(self, raw_bytes: bytes) -> List[PageText]:
        """
        Read the text layer of every page.

        Args:
            raw_bytes: PDF file content.

        Returns:
            One PageText per page, in page order.
        """
        pages = []
        with pdfplumber.open(io.BytesIO(raw_bytes)) as pdf:
            for page in pdf.pages:
                words = page.extract_words()
                text = page.extract_text() or ""
                pages.append(PageText(text=text, fragment_count=len(words)))
        return pages


class PyMuPDFRasterizer:
    """Page rasterizer backed by PyMuPDF (fitz)."""

    def rasterize(self, raw_bytes: bytes, scale: float) -> Iterator[Image.Image]:
        """
        Render pages one at a time.

        Args:
            raw_bytes: PDF file content.
            scale: Magnification relative to 72 DPI.

        Yields:
            RGB PIL Images in page order.
        """
        doc = fitz.open(stream=raw_bytes, filetype="pdf")
        try:
            matrix = fitz.Matrix(scale, scale)
            for page in doc:
                pix = page.get_pixmap(matrix=matrix)
                image = Image.open(io.BytesIO(pix.tobytes("png")))
                yield image.convert('RGB') if image.mode != 'RGB' else image
        finally:
            doc.close()


class Pdf2ImageRasterizer:
    """Page rasterizer backed by pdf2image (Poppler)."""

    def rasterize(self, raw_bytes: bytes, scale: float) -> Iterator[Image.Image]:
        """
        Render pages one at a time.

        Args:
            raw_bytes: PDF file content.
            scale: Magnification relative to 72 DPI.

        Yields:
            RGB PIL Images in page order.
        """
        dpi = int(72 * scale)
        page_count = pdfinfo_from_bytes(raw_bytes).get('Pages', 1)

        for page_number in range(1, page_count + 1):
            images = convert_from_bytes(
                raw_bytes,
                dpi=dpi,
                first_page=page_number,
                last_page=page_number,
                fmt='png'
            )
            for image in images:
                yield image.convert('RGB') if image.mode != 'RGB' else image


RASTERIZERS = {
    'pymupdf': PyMuPDFRasterizer,
    'pdf2image': Pdf2ImageRasterizer,
}


class PDFProcessor:
    """
    Processor for PDF documents.

    Collaborators are injected; any left as None is built from
    configuration on first use.

    Attributes:
        min_text_chars: Visible-character threshold below which OCR runs
        render_scale: Rasterization magnification for OCR
        language: OCR language code
        page_separator: Marker placed between page texts

    Example:
        >>> processor = PDFProcessor(text_reader=reader, ocr_engine=engine)
        >>> acquired = processor.process(document)
        >>> acquired.acquisition_method
        <AcquisitionMethod.TEXT_LAYER: 'text-layer'>
    """

    def __init__(
        self,
        text_reader: Optional[PdfPlumberTextReader] = None,
        rasterizer: Optional[PyMuPDFRasterizer] = None,
        ocr_engine: Optional[OCREngine] = None
    ) -> None:
        """
        Initialize the PDF processor.

        Args:
            text_reader: Object with `read_pages(raw_bytes) -> List[PageText]`.
            rasterizer: Object with `rasterize(raw_bytes, scale) -> Iterator[Image]`.
            ocr_engine: Object with `recognize(image, language) -> str`.
        """
        self.min_text_chars = get_config("input.pdf.min_text_chars", 50)
        self.render_scale = get_config("input.pdf.render_scale", 2.0)
        self.language = get_config("ocr.language", "eng")
        self.page_separator = get_config("input.pdf.page_separator", "\n\n")
        self.rasterizer_name = get_config("input.pdf.rasterizer", "pymupdf")

        self._text_reader = text_reader
        self._rasterizer = rasterizer
        self._ocr_engine = ocr_engine

        logger.debug(
            f"PDFProcessor initialized (min_text_chars={self.min_text_chars}, "
            f"scale={self.render_scale}, rasterizer={self.rasterizer_name})"
        )

    @property
    def text_reader(self):
        if self._text_reader is None:
            self._text_reader = PdfPlumberTextReader()
        return self._text_reader

    @property
    def rasterizer(self):
        if self._rasterizer is None:
            rasterizer_cls = RASTERIZERS.get(self.rasterizer_name)
            if rasterizer_cls is None:
                logger.warning(
                    f"Unknown rasterizer '{self.rasterizer_name}', using pymupdf"
                )
                rasterizer_cls = PyMuPDFRasterizer
            self._rasterizer = rasterizer_cls()
        return self._rasterizer

    @property
    def ocr_engine(self):
        if self._ocr_engine is None:
            self._ocr_engine = OCREngine()
        return self._ocr_engine

    def process(self, document: SourceDocument) -> AcquiredText:
        """
        Acquire the text of a PDF document.

        Args:
            document: Source document on the pdf channel.

        Returns:
            AcquiredText from the text layer, or from OCR for scans.

        Raises:
            AcquisitionFailedError: If the PDF cannot be read.
            ScannedDocumentUnreadableError: If OCR yields no usable text.
        """
        logger.info(f"Processing PDF: {document.filename}")

        try:
            pages = self.text_reader.read_pages(document.raw_bytes)
        except Exception as e:
            logger.error(f"Could not read PDF text layer: {e}")
            raise AcquisitionFailedError(document.filename, str(e)) from e

        document.page_count = len(pages)

        if not self.needs_ocr(pages):
            logger.info(f"Using PDF text layer ({len(pages)} page(s))")
            return AcquiredText.from_pages(
                [page.text for page in pages],
                AcquisitionMethod.TEXT_LAYER,
                self.page_separator
            )

        logger.info("PDF appears to be scanned (minimal text layer), running OCR")
        return self._acquire_with_ocr(document)

    def needs_ocr(self, pages: List[PageText]) -> bool:
        """
        Decide whether a text layer is too thin to use.

        Args:
            pages: Text layer of every page.

        Returns:
            True when the joined text has fewer visible characters than
            the threshold or there are no text fragments at all.
        """
        fragments = sum(page.fragment_count for page in pages)
        characters = sum(visible_length(page.text) for page in pages)

        logger.debug(f"Text layer: {fragments} fragments, {characters} visible characters")
        return fragments == 0 or characters < self.min_text_chars

    def _acquire_with_ocr(self, document: SourceDocument) -> AcquiredText:
        """
        Rasterize and recognize every page, one after another.

        Raises:
            AcquisitionFailedError: If the pages cannot be rendered.
            ScannedDocumentUnreadableError: If OCR is unavailable or finds nothing.
        """
        page_texts = []
        try:
            images = self.rasterizer.rasterize(document.raw_bytes, self.render_scale)
            for page_number, image in enumerate(images, 1):
                page_texts.append(self._recognize_page(document, image, page_number))
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Could not rasterize PDF pages: {e}")
            raise AcquisitionFailedError(document.filename, str(e)) from e

        if page_texts:
            document.page_count = len(page_texts)

        recognized = sum(visible_length(text) for text in page_texts)
        if recognized == 0:
            raise ScannedDocumentUnreadableError(
                document.filename,
                "OCR recognized no characters"
            )

        logger.info(f"OCR complete: {recognized} characters from {len(page_texts)} page(s)")
        return AcquiredText.from_pages(page_texts, AcquisitionMethod.OCR, self.page_separator)

    def _recognize_page(self, document: SourceDocument, image: Image.Image, page_number: int) -> str:
        """
        OCR one page image; a failing page yields "".

        Raises:
            ScannedDocumentUnreadableError: If the OCR engine is not available.
        """
        logger.debug(f"Running OCR on page {page_number}")
        try:
            return self.ocr_engine.recognize(image, self.language)
        except OCREngineNotAvailableError as e:
            raise ScannedDocumentUnreadableError(document.filename, str(e)) from e
        except Exception as e:
            logger.error(f"OCR failed on page {page_number}: {e}")
            return ""
