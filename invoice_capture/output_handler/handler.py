"""
Main Output Handler Module.

This module provides the unified OutputHandler class that writes
records as Excel, CSV or JSON depending on the output file suffix.

Author: ML Engineering Team
"""

import json
from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.helpers import ensure_directory, generate_timestamp
from invoice_capture.utils.exceptions import ExportError
from invoice_capture.extraction.extraction_result import ExtractedRecord
from .csv_exporter import CsvExporter
from .excel_exporter import ExcelExporter

# Initialize module logger
logger = get_logger(__name__)


class OutputHandler:
    """
    Unified output handler for extracted records.

    Attributes:
        default_format: Format used when the output path is a directory

    Example:
        >>> handler = OutputHandler()
        >>> handler.save(records, "outputs/results.xlsx")
        'outputs/results.xlsx'
        >>> handler.save(records, "outputs/results.json")
        'outputs/results.json'
    """

    SUPPORTED_FORMATS = ('xlsx', 'csv', 'json')

    def __init__(self) -> None:
        """Initialize the output handler."""
        self.default_format = get_config("output.default_format", "xlsx")

        # Initialize exporters (lazy loading)
        self._excel_exporter = None
        self._csv_exporter = None

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    @property
    def csv_exporter(self) -> CsvExporter:
        """Get or create the CSV exporter."""
        if self._csv_exporter is None:
            self._csv_exporter = CsvExporter()
        return self._csv_exporter

    def resolve_path(self, output: Optional[Union[str, Path]]) -> Path:
        """
        Turn an output argument into a file path.

        A path without a suffix is treated as a directory and receives a
        timestamped file in the default format.
        """
        if output is None:
            output = get_config("paths.output_dir", "outputs")

        path = Path(output)
        if path.suffix:
            return path
        return path / f"invoice_capture_{generate_timestamp()}.{self.default_format}"

    def save(
        self,
        records: Union[ExtractedRecord, List[ExtractedRecord]],
        output: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Save records, choosing the format from the file suffix.

        Args:
            records: Single record or list of records.
            output: Output file or directory.

        Returns:
            Path of the written file.

        Raises:
            ExportError: If the format is unsupported or writing fails.
        """
        if isinstance(records, ExtractedRecord):
            records = [records]

        path = self.resolve_path(output)
        file_format = path.suffix.lower().lstrip('.')

        if file_format == 'xlsx':
            return self.excel_exporter.export(records, path)
        if file_format == 'csv':
            return self.csv_exporter.export(records, path)
        if file_format == 'json':
            return self.to_json(records, path)

        raise ExportError(
            str(path),
            f"Unsupported output format '{file_format}', use one of {list(self.SUPPORTED_FORMATS)}"
        )

    def to_json(self, records: List[ExtractedRecord], path: Path) -> str:
        """Write records as a JSON array."""
        ensure_directory(path.parent)
        try:
            with open(path, 'w', encoding='utf-8') as handle:
                json.dump([record.to_dict() for record in records], handle, indent=2)
        except OSError as e:
            logger.error(f"JSON export failed: {e}")
            raise ExportError(str(path), str(e)) from e

        logger.info(f"JSON file saved: {path} ({len(records)} records)")
        return str(path)
