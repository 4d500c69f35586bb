"""
Spreadsheet Processor Module.

Flattens a worksheet into comma-delimited text so that spreadsheets go
through the same extraction cascade as PDFs and plain text. Row and
column adjacency is preserved: one CSV line per sheet row.

    - XLSX/XLS: first sheet read with pandas (openpyxl / xlrd engines)
    - CSV: already delimited, decoded and used as-is

Author: ML Engineering Team
"""

import csv
import io
import math
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.helpers import decode_text, get_file_extension
from invoice_capture.utils.exceptions import AcquisitionFailedError
from .document import AcquiredText, AcquisitionMethod, SourceDocument

# Initialize module logger
logger = get_logger(__name__)


def format_cell(value: Any) -> str:
    """
    Render one spreadsheet cell as text.

    Empty cells become "", date cells ISO dates, and integral floats
    lose their trailing ".0".
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if pd.isna(value):
            return ""
        if value.hour == value.minute == value.second == 0:
            return value.strftime('%Y-%m-%d')
        return value.isoformat(sep=' ')
    if isinstance(value, date):
        return value.isoformat()
    if pd.isna(value):
        return ""
    return str(value).strip()


class PandasSpreadsheetReader:
    """
    Spreadsheet reader backed by pandas.

    Example:
        >>> text = PandasSpreadsheetReader().flatten(xlsx_bytes, "remit.xlsx")
        >>> text.splitlines()[0]
        'Invoice,Amount,Date'
    """

    ENGINES = {
        'xlsx': 'openpyxl',
        'xls': 'xlrd',
    }

    def __init__(self, sheet_index: Optional[int] = None) -> None:
        self.sheet_index = sheet_index if sheet_index is not None else \
            get_config("input.spreadsheet.sheet_index", 0)

    def flatten(self, raw_bytes: bytes, filename: str) -> str:
        """
        Flatten the selected sheet to CSV text.

        Args:
            raw_bytes: Workbook content.
            filename: Original filename, used to pick the engine.

        Returns:
            Comma-delimited text, one line per row.
        """
        engine = self.ENGINES.get(get_file_extension(filename), 'openpyxl')

        frame = pd.read_excel(
            io.BytesIO(raw_bytes),
            sheet_name=self.sheet_index,
            header=None,
            dtype=object,
            engine=engine
        )

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        for row in frame.itertuples(index=False, name=None):
            cells = [format_cell(value) for value in row]
            while cells and not cells[-1]:
                cells.pop()
            writer.writerow(cells)

        return buffer.getvalue()


class SpreadsheetProcessor:
    """
    Processor for spreadsheet documents.

    Attributes:
        reader: Object with `flatten(raw_bytes, filename) -> str`.
    """

    def __init__(self, reader: Optional[PandasSpreadsheetReader] = None) -> None:
        self._reader = reader

    @property
    def reader(self):
        if self._reader is None:
            self._reader = PandasSpreadsheetReader()
        return self._reader

    def process(self, document: SourceDocument) -> AcquiredText:
        """
        Acquire the text of a spreadsheet document.

        Raises:
            AcquisitionFailedError: If the workbook cannot be read.
        """
        logger.info(f"Processing spreadsheet: {document.filename}")

        if get_file_extension(document.filename) == 'csv':
            content = decode_text(document.raw_bytes)
        else:
            try:
                content = self.reader.flatten(document.raw_bytes, document.filename)
            except Exception as e:
                logger.error(f"Could not read spreadsheet: {e}")
                raise AcquisitionFailedError(document.filename, str(e)) from e

        document.page_count = 1
        logger.debug(f"Flattened spreadsheet to {len(content.splitlines())} row(s)")
        return AcquiredText(content=content, acquisition_method=AcquisitionMethod.FLATTENED)
