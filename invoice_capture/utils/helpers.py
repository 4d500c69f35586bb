"""
Helper Utilities Module.

Small functions shared by the acquisition and export stages: file
naming, byte decoding and the visible-character count that decides
whether a PDF text layer is usable.
"""

from datetime import datetime
from pathlib import Path
from typing import Union

SIZE_UNITS = ('B', 'KB', 'MB', 'GB')


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Create an export directory (and its parents) when missing.

    Example:
        >>> ensure_directory("outputs/2024-03")
        PosixPath('outputs/2024-03')
    """
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_file_extension(filename: Union[str, Path]) -> str:
    """
    Lower-case extension without the dot, "" when there is none.

    Example:
        >>> get_file_extension("Remittance.XLSX")
        'xlsx'
    """
    return Path(str(filename)).suffix.lower().lstrip('.')


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """Current local time for export file names."""
    return datetime.now().strftime(format_str)


def format_file_size(size_bytes: float) -> str:
    """
    Upload size for log and error messages.

    Example:
        >>> format_file_size(10 * 1024 * 1024)
        '10.0 MB'
    """
    for unit in SIZE_UNITS[:-1]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} {SIZE_UNITS[-1]}"


def decode_text(raw_bytes: bytes) -> str:
    """
    Decode document bytes as UTF-8, falling back to latin-1.

    A UTF-8 byte-order mark (common in CSV exports from Excel) is
    dropped. latin-1 maps every byte, so this never raises.
    """
    try:
        return raw_bytes.decode('utf-8-sig')
    except UnicodeDecodeError:
        return raw_bytes.decode('latin-1')


def visible_length(text: str) -> int:
    """Number of non-whitespace characters in text."""
    return sum(1 for char in text if not char.isspace())
