"""
Main Post-Processor Module.

This module provides the PostProcessor class that merges extracted
header fields and line items into the final ExtractedRecord.

Operations:
    - Derive the total from line items when no explicit total was found
    - Fall back to the first line item for the description
    - Flag documents where nothing at all was extracted
    - Log a summary of the record

Author: ML Engineering Team
"""

from typing import Any, Dict, List, Optional

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.extraction.extraction_result import ExtractedRecord, LineItem

# Initialize module logger
logger = get_logger(__name__)


class PostProcessor:
    """
    Result aggregator for extracted invoice data.

    Attributes:
        description_max_length: Length limit for a description taken
            from the first line item

    Example:
        >>> processor = PostProcessor()
        >>> record = processor.aggregate(fields, items, "generic")
        >>> record.total_derived
        True
    """

    def __init__(self) -> None:
        """Initialize the post-processor with configuration."""
        self.description_max_length = get_config("extraction.description_max_length", 100)

    def aggregate(
        self,
        fields: Dict[str, Any],
        line_items: List[LineItem],
        template_name: str = "generic",
        acquired=None,
        source_file: str = ""
    ) -> ExtractedRecord:
        """
        Build the record for one document.

        Args:
            fields: Header field values from the FieldExtractor.
            line_items: Validated line items.
            template_name: Name of the template used.
            acquired: AcquiredText the fields came from, if any.
            source_file: Source filename.

        Returns:
            Frozen ExtractedRecord.
        """
        items = tuple(line_items)
        total_amount = float(fields.get('total_amount') or 0.0)
        total_derived = False

        if not total_amount and items:
            total_amount = round(sum(item.amount for item in items), 2)
            total_derived = True
            logger.debug(f"Total derived from {len(items)} line item(s): {total_amount:.2f}")

        description = fields.get('description') or ""
        if not description and items:
            description = items[0].description[:self.description_max_length]

        header = {name: fields.get(name) or "" for name in ExtractedRecord.HEADER_FIELDS}
        header['description'] = description

        no_data = not items and not total_amount and not any(header.values())

        record = ExtractedRecord(
            **header,
            line_items=items,
            total_amount=total_amount,
            notes=tuple(fields.get('notes') or ()),
            template=template_name,
            acquisition_method=acquired.acquisition_method.value if acquired else "",
            source_file=source_file,
            total_derived=total_derived,
            no_data_extracted=no_data
        )

        self._log_summary(record)
        return record

    def _log_summary(self, record: ExtractedRecord) -> None:
        """Log a one-line summary of the record."""
        found = len(record.HEADER_FIELDS) - len(record.missing_fields)
        logger.info(
            f"Aggregated record: {found}/{len(record.HEADER_FIELDS)} fields, "
            f"{len(record.line_items)} item(s), total {record.total_amount:.2f}"
            f"{' (derived)' if record.total_derived else ''}"
        )
        if record.missing_fields:
            logger.debug(f"Missing fields: {record.missing_fields}")
