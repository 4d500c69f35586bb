"""
Excel Exporter Module.

This module provides Excel file generation for extracted records.
Uses openpyxl for modern Excel format support.

Features:
    - Formatted headers
    - Auto-column width
    - One row per record on the "Invoices" sheet
    - One row per line item on the "Line Items" sheet

Author: ML Engineering Team
"""

from pathlib import Path
from typing import List, Optional, Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.helpers import ensure_directory, generate_timestamp
from invoice_capture.utils.exceptions import ExportError
from invoice_capture.extraction.extraction_result import ExtractedRecord

# Initialize module logger
logger = get_logger(__name__)


class ExcelExporter:
    """
    Exports extracted records to Excel format.

    Attributes:
        output_dir: Directory for output files when no path is given
        invoice_sheet: Title of the record sheet
        line_item_sheet: Title of the line-item sheet

    Example:
        >>> exporter = ExcelExporter()
        >>> filepath = exporter.export(records, "outputs/capture.xlsx")
    """

    # Column definitions
    COLUMNS = [
        ('Supplier', 'counterparty_name'),
        ('Invoice ID', 'document_id'),
        ('Invoice Date', 'document_date'),
        ('Due Date', 'due_date'),
        ('Net Terms', 'terms'),
        ('Total Amount', 'total_amount'),
        ('Description', 'description'),
        ('Line Items', 'line_item_count'),
        ('Notes', 'notes'),
        ('Template', 'template'),
        ('Acquisition', 'acquisition_method'),
        ('Source File', 'source_file'),
    ]

    LINE_ITEM_COLUMNS = [
        ('Invoice ID', None),
        ('Quantity', 'quantity'),
        ('Description', 'description'),
        ('Unit Price', 'unit_price'),
        ('Amount', 'amount'),
        ('Date', 'date'),
        ('Reference', 'reference'),
        ('Unit', 'unit'),
        ('Discount', 'discount'),
    ]

    MONEY_FORMAT = '#,##0.00'

    def __init__(self) -> None:
        """Initialize the Excel exporter with configuration."""
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))
        self.invoice_sheet = get_config("output.excel.invoice_sheet", "Invoices")
        self.line_item_sheet = get_config("output.excel.line_item_sheet", "Line Items")

        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    def export(
        self,
        records: Union[ExtractedRecord, List[ExtractedRecord]],
        filepath: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Export records to an Excel file.

        Args:
            records: Single record or list of records to export.
            filepath: Output path. If None, a timestamped file in output_dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ExportError: If export fails.
        """
        if isinstance(records, ExtractedRecord):
            records = [records]

        filepath = Path(filepath) if filepath else self.output_dir / self.get_default_filename()
        ensure_directory(filepath.parent)

        try:
            workbook = Workbook()
            self._create_invoice_sheet(workbook, records)
            self._create_line_item_sheet(workbook, records)
            workbook.save(filepath)
        except (OSError, ValueError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ExportError(str(filepath), str(e)) from e

        logger.info(f"Excel file saved: {filepath} ({len(records)} records)")
        return str(filepath)

    def _style_header(self, sheet, headers: List[str], color: str) -> None:
        """Write a bold, filled, bordered header row and freeze it."""
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")
        thin = Side(style='thin')

        for col, header_name in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment
            cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)

        sheet.freeze_panes = 'A2'

    def _fit_columns(self, sheet, column_count: int) -> None:
        """Size each column to its longest value, capped at 50."""
        for col in range(1, column_count + 1):
            max_length = 0
            for row in range(1, sheet.max_row + 1):
                value = sheet.cell(row=row, column=col).value
                if value is not None:
                    max_length = max(max_length, len(str(value)))
            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 50)

    def _create_invoice_sheet(self, workbook, records: List[ExtractedRecord]) -> None:
        """One row per record."""
        sheet = workbook.active
        sheet.title = self.invoice_sheet
        self._style_header(sheet, [name for name, _ in self.COLUMNS], "4472C4")

        for row_num, record in enumerate(records, 2):
            flat = record.to_flat_dict()
            for col, (_, field_name) in enumerate(self.COLUMNS, 1):
                cell = sheet.cell(row=row_num, column=col, value=flat.get(field_name, ''))
                if field_name == 'total_amount':
                    cell.number_format = self.MONEY_FORMAT

        self._fit_columns(sheet, len(self.COLUMNS))

    def _create_line_item_sheet(self, workbook, records: List[ExtractedRecord]) -> None:
        """One row per line item, keyed by the record's document id."""
        sheet = workbook.create_sheet(title=self.line_item_sheet)
        self._style_header(sheet, [name for name, _ in self.LINE_ITEM_COLUMNS], "548235")

        row_num = 2
        for record in records:
            for item in record.line_items:
                values = item.to_dict()
                for col, (_, field_name) in enumerate(self.LINE_ITEM_COLUMNS, 1):
                    value = record.document_id if field_name is None else values[field_name]
                    cell = sheet.cell(row=row_num, column=col, value=value)
                    if field_name in ('unit_price', 'amount', 'discount'):
                        cell.number_format = self.MONEY_FORMAT
                row_num += 1

        self._fit_columns(sheet, len(self.LINE_ITEM_COLUMNS))

    def get_default_filename(self) -> str:
        """
        Generate a default filename with timestamp.

        Returns:
            Default filename string.
        """
        timestamp = generate_timestamp()
        pattern = get_config(
            "output.excel.filename_pattern",
            "invoice_capture_{timestamp}.xlsx"
        )
        return pattern.format(timestamp=timestamp)
