"""
Output Handler Module.

This module handles export of extracted records.

Components:
    - OutputHandler: Unified interface, format chosen by file suffix
    - ExcelExporter: Styled XLSX workbook (openpyxl)
    - CsvExporter: Header, line-item and comment blocks as CSV
"""

from .csv_exporter import CsvExporter, record_rows
from .excel_exporter import ExcelExporter
from .handler import OutputHandler

__all__ = [
    'CsvExporter',
    'record_rows',
    'ExcelExporter',
    'OutputHandler',
]
