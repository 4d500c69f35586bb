"""
Source and acquired document data classes.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .channel import Channel


class AcquisitionMethod(str, Enum):
    """How the plain text of a document was obtained."""

    TEXT_LAYER = "text-layer"
    OCR = "ocr"
    FLATTENED = "flattened"
    RAW = "raw"


@dataclass
class SourceDocument:
    """
    An uploaded document, held only for the duration of one extraction.

    Attributes:
        raw_bytes: File content
        filename: Original filename
        channel: Acquisition channel chosen by the classifier
        media_type: Declared MIME type, if any
        page_count: Number of pages, filled in during acquisition
    """
    raw_bytes: bytes
    filename: str
    channel: Channel
    media_type: Optional[str] = None
    page_count: int = 0

    @property
    def size_bytes(self) -> int:
        return len(self.raw_bytes)

    def __repr__(self) -> str:
        return (
            f"SourceDocument(filename='{self.filename}', "
            f"channel='{self.channel.value}', "
            f"size={self.size_bytes})"
        )


@dataclass(frozen=True)
class AcquiredText:
    """
    Plain text of a document, ready for extraction.

    Attributes:
        content: Full text; pages are separated by a blank line
        page_boundaries: Start offset of each page within content
        separator: Page-boundary marker between pages
        acquisition_method: How the text was obtained
    """
    content: str
    page_boundaries: Tuple[int, ...] = (0,)
    acquisition_method: AcquisitionMethod = AcquisitionMethod.RAW
    separator: str = "\n\n"

    @classmethod
    def from_pages(
        cls,
        pages,
        method: AcquisitionMethod,
        separator: str = "\n\n"
    ) -> 'AcquiredText':
        """
        Join page texts in order, recording where each page starts.

        Args:
            pages: Page texts in document order.
            method: Acquisition method to record.
            separator: Page-boundary marker placed between pages.
        """
        pages = list(pages)
        boundaries = []
        offset = 0
        for index, page in enumerate(pages):
            if index:
                offset += len(separator)
            boundaries.append(offset)
            offset += len(page)

        return cls(
            content=separator.join(pages),
            page_boundaries=tuple(boundaries) or (0,),
            acquisition_method=method,
            separator=separator
        )

    @property
    def page_count(self) -> int:
        return len(self.page_boundaries)

    def page_text(self, index: int) -> str:
        """Text of one page (0-based), without the separator."""
        start = self.page_boundaries[index]
        if index + 1 < len(self.page_boundaries):
            end = self.page_boundaries[index + 1]
            return self.content[start:end - len(self.separator)]
        return self.content[start:]
