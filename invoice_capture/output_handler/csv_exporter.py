"""
CSV Exporter Module.

Writes each record as a block of CSV rows: the header fields, a blank
row, a "Line Items" table and, when present, a "Comments" list.
Several records are separated by a blank row.

Author: ML Engineering Team
"""

import csv
from pathlib import Path
from typing import List, Union

from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.helpers import ensure_directory
from invoice_capture.utils.exceptions import ExportError
from invoice_capture.extraction.extraction_result import ExtractedRecord

# Initialize module logger
logger = get_logger(__name__)

HEADER_ROW = ['Supplier', 'Invoice ID', 'Invoice Date', 'Due Date', 'Net Terms',
              'Total Amount', 'Description']
LINE_ITEM_HEADER_ROW = ['Quantity', 'Description', 'Unit Price', 'Amount']


def record_rows(record: ExtractedRecord) -> List[List[str]]:
    """
    Lay out one record as CSV rows.

    Example:
        >>> record_rows(record)[0]
        ['Supplier', 'Invoice ID', 'Invoice Date', 'Due Date', 'Net Terms', 'Total Amount', 'Description']
    """
    rows = [
        HEADER_ROW,
        [
            record.counterparty_name,
            record.document_id,
            record.document_date,
            record.due_date,
            record.terms,
            f"{record.total_amount:.2f}",
            record.description,
        ],
        [],
        ['Line Items'],
        LINE_ITEM_HEADER_ROW,
    ]

    for item in record.line_items:
        rows.append([
            f"{item.quantity:g}",
            item.description,
            f"{item.unit_price:.2f}",
            f"{item.amount:.2f}",
        ])

    if record.notes:
        rows.append([])
        rows.append(['Comments'])
        rows.extend([note] for note in record.notes)

    return rows


class CsvExporter:
    """
    Exports extracted records to CSV.

    Example:
        >>> CsvExporter().export(records, "outputs/invoice_9165009.csv")
    """

    def export(
        self,
        records: Union[ExtractedRecord, List[ExtractedRecord]],
        filepath: Union[str, Path]
    ) -> str:
        """
        Write records to a CSV file.

        Raises:
            ExportError: If the file cannot be written.
        """
        if isinstance(records, ExtractedRecord):
            records = [records]

        filepath = Path(filepath)
        ensure_directory(filepath.parent)

        try:
            with open(filepath, 'w', newline='', encoding='utf-8') as handle:
                writer = csv.writer(handle, lineterminator='\n')
                for index, record in enumerate(records):
                    if index:
                        writer.writerow([])
                    writer.writerows(record_rows(record))
        except OSError as e:
            logger.error(f"CSV export failed: {e}")
            raise ExportError(str(filepath), str(e)) from e

        logger.info(f"CSV file saved: {filepath} ({len(records)} records)")
        return str(filepath)
