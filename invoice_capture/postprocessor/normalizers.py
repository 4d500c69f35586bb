"""
Data Normalizers Module.

This module provides normalization functions for:
    - Currency/amount values (parse_money, format_money)
    - Date formats (normalize_date)

Both normalizers are total: unparseable input yields the sentinel
(0.0 for money, "" for dates) instead of raising, because absent
values are routine in real invoices.

Author: ML Engineering Team
"""

import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser

from config import get_config
from invoice_capture.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


MONTH_ABBREVIATIONS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}

_MONTH_ALTERNATION = '|'.join(MONTH_ABBREVIATIONS)

# Spreadsheet day counts start at 1899-12-30 (Lotus 1900 leap-year bug included)
SPREADSHEET_EPOCH = date(1899, 12, 30)

# Digits with thousands/decimal separators once currency markers are gone
AMOUNT_PATTERN = re.compile(r'[+-]?(?:\d[\d,.]*|[.,]\d+)')


class AmountNormalizer:
    """
    Normalizes currency/amount strings to floats.

    Handles currency symbols and codes, thousands separators and
    European decimal commas ("1.234,56"). Money values are never
    negative: a negative figure, or text with letters between its
    digits, is not an amount.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.parse("$1,234.56")
        1234.56
        >>> normalizer.parse("€ 1.234,56")
        1234.56
        >>> normalizer.parse("n/a")
        0.0
    """

    # Currency symbols and codes to remove
    CURRENCY_SYMBOLS = ['$', '€', '£', '¥', '₹', '₽', '฿', '₫', '₴', '₦']
    CURRENCY_CODES = ['USD', 'EUR', 'GBP', 'JPY', 'INR', 'CAD', 'AUD', 'CNY', 'MXN']

    def __init__(self) -> None:
        """Initialize the amount normalizer with configuration."""
        self.currency_symbol = get_config("postprocessing.amount.currency_symbol", "$")

    def parse(self, raw: Any) -> float:
        """
        Parse an amount into a float rounded to cents.

        Args:
            raw: Amount string (e.g., "$1,234.56") or a number.

        Returns:
            Parsed value, or 0.0 when the input is not a non-negative number.
        """
        if raw is None or isinstance(raw, bool):
            return 0.0

        if isinstance(raw, (int, float)):
            return self._checked(float(raw), raw)

        amount_str = self._clean_amount_string(str(raw))
        if not AMOUNT_PATTERN.fullmatch(amount_str):
            if amount_str:
                logger.debug(f"Not an amount: {raw!r}")
            return 0.0

        amount_str = self._handle_european_format(amount_str)
        amount_str = amount_str.replace(',', '')

        try:
            value = float(amount_str)
        except ValueError:
            logger.debug(f"Could not parse amount: {raw!r}")
            return 0.0

        return self._checked(value, raw)

    def _checked(self, value: float, raw: Any) -> float:
        """Round to cents; infinities, NaN and negatives become 0.0."""
        if not math.isfinite(value):
            return 0.0
        if value < 0:
            logger.debug(f"Negative amount ignored: {raw!r}")
            return 0.0
        return round(value, 2)

    def format(self, value: float) -> str:
        """
        Format a value as 2-decimal currency text.

        Example:
            >>> AmountNormalizer().format(1234.5)
            "$1,234.50"
        """
        return f"{self.currency_symbol}{value:,.2f}"

    def _clean_amount_string(self, amount_str: str) -> str:
        """
        Strip whitespace and currency markers. Whatever else remains is
        left for AMOUNT_PATTERN to accept or reject.
        """
        amount_str = ''.join(amount_str.split())

        for symbol in self.CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, '')

        for code in self.CURRENCY_CODES:
            amount_str = re.sub(code, '', amount_str, flags=re.IGNORECASE)

        return amount_str

    def _handle_european_format(self, amount_str: str) -> str:
        """
        Convert European format (comma decimal) to US format (dot decimal).

        Only a single comma that follows the last dot and is followed by
        one or two digits is read as a decimal separator.
        """
        if amount_str.count(',') == 1:
            comma_pos = amount_str.rfind(',')
            dot_pos = amount_str.rfind('.')

            if comma_pos > dot_pos:
                after_comma = amount_str[comma_pos + 1:]
                if len(after_comma) <= 2 and after_comma.isdigit():
                    amount_str = amount_str.replace('.', '')
                    amount_str = amount_str.replace(',', '.')

        return amount_str


class DateNormalizer:
    """
    Normalizes date strings to ISO format (YYYY-MM-DD).

    Recognized inputs, tried in order:
        - spreadsheet serial day counts (e.g. 45292)
        - compact YYYYMMDD
        - year-month-day ("2024-01-02", "2024/1/2")
        - month/day/year with 2- or 4-digit year ("01/02/2024", "1-2-24")
        - day-month-year with a month abbreviation ("02Oct25", "2 October 2025")
        - month-name first ("October 2, 2025")

    Every candidate is checked against the calendar; anything else
    normalizes to the empty string.

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("02Oct25")
        "2025-10-02"
        >>> normalizer.normalize("13/45/99")
        ""
    """

    YMD_PATTERN = re.compile(r'\b(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})\b')
    MDY_PATTERN = re.compile(r'\b(\d{1,2})[-/.](\d{1,2})[-/.](\d{4}|\d{2})\b')
    DAY_MONTH_YEAR_PATTERN = re.compile(
        rf'\b(\d{{1,2}})[\s\-./]*({_MONTH_ALTERNATION})[a-z]*\.?[\s\-./,]*(\d{{4}}|\d{{2}})\b',
        re.IGNORECASE
    )
    MONTH_DAY_YEAR_PATTERN = re.compile(
        rf'\b(?:{_MONTH_ALTERNATION})[a-z]*\.?\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}\b',
        re.IGNORECASE
    )
    COMPACT_PATTERN = re.compile(r'(19|20)\d{2}(0[1-9]|1[0-2])(0[1-9]|[12]\d|3[01])')

    def __init__(self) -> None:
        """Initialize the date normalizer with configuration."""
        self.two_digit_year_pivot = get_config("postprocessing.date.two_digit_year_pivot", 50)
        self.serial_min = get_config("postprocessing.date.serial_min", 20000)
        self.serial_max = get_config("postprocessing.date.serial_max", 80000)

    def normalize(self, raw: Any) -> str:
        """
        Normalize a date value to YYYY-MM-DD.

        Args:
            raw: Date string, spreadsheet serial number, or date object.

        Returns:
            ISO date string, or "" when the value is not a valid date.
        """
        if raw is None or isinstance(raw, bool):
            return ""

        if isinstance(raw, date):
            return raw.strftime('%Y-%m-%d')

        if isinstance(raw, (int, float)):
            return self._from_serial(raw)

        text = ' '.join(str(raw).split())
        if not text:
            return ""

        if re.fullmatch(r'\d+(?:\.\d+)?', text):
            if self.COMPACT_PATTERN.fullmatch(text):
                return self._build(int(text[:4]), int(text[4:6]), int(text[6:]))
            return self._from_serial(float(text))

        for matcher in (
            self._match_year_month_day,
            self._match_month_day_year,
            self._match_day_month_year,
            self._match_month_name_first,
        ):
            normalized = matcher(text)
            if normalized:
                return normalized

        logger.debug(f"Could not parse date: {text!r}")
        return ""

    def _from_serial(self, value: float) -> str:
        """Convert a spreadsheet serial day count."""
        if not math.isfinite(value) or not self.serial_min <= value <= self.serial_max:
            return ""
        return (SPREADSHEET_EPOCH + timedelta(days=int(value))).strftime('%Y-%m-%d')

    def _match_year_month_day(self, text: str) -> str:
        match = self.YMD_PATTERN.search(text)
        if not match:
            return ""
        year, month, day = (int(part) for part in match.groups())
        return self._build(year, month, day)

    def _match_month_day_year(self, text: str) -> str:
        match = self.MDY_PATTERN.search(text)
        if not match:
            return ""
        month, day = int(match.group(1)), int(match.group(2))
        year = self._expand_year(match.group(3))

        normalized = self._build(year, month, day)
        if not normalized and month > 12 and day <= 12:
            # Day-first layouts such as 25/12/2024
            normalized = self._build(year, day, month)
        return normalized

    def _match_day_month_year(self, text: str) -> str:
        match = self.DAY_MONTH_YEAR_PATTERN.search(text)
        if not match:
            return ""
        day = int(match.group(1))
        month = MONTH_ABBREVIATIONS[match.group(2).lower()[:3]]
        year = self._expand_year(match.group(3))
        return self._build(year, month, day)

    def _match_month_name_first(self, text: str) -> str:
        match = self.MONTH_DAY_YEAR_PATTERN.search(text)
        if not match:
            return ""
        try:
            parsed = date_parser.parse(match.group(0))
        except (ValueError, OverflowError) as e:
            logger.debug(f"dateutil rejected {match.group(0)!r}: {e}")
            return ""
        return parsed.strftime('%Y-%m-%d')

    def _expand_year(self, year_text: str) -> int:
        """Map two-digit years onto 19xx/20xx around the pivot."""
        year = int(year_text)
        if len(year_text) == 2:
            year += 2000 if year <= self.two_digit_year_pivot else 1900
        return year

    @staticmethod
    def _build(year: int, month: int, day: int) -> str:
        try:
            return datetime(year, month, day).strftime('%Y-%m-%d')
        except ValueError:
            return ""


def parse_money(raw: Any) -> float:
    """
    Parse a money string into a float; non-numeric input yields 0.0.

    Example:
        >>> parse_money("$3,431.58")
        3431.58
    """
    return AmountNormalizer().parse(raw)


def format_money(value: float) -> str:
    """Format a value as currency text with two decimals."""
    return AmountNormalizer().format(value)


def normalize_date(raw: Any) -> str:
    """
    Normalize a date to YYYY-MM-DD; unrecognized input yields "".

    Example:
        >>> normalize_date("02Oct25")
        "2025-10-02"
    """
    return DateNormalizer().normalize(raw)


def parse_quantity(raw: Optional[str]) -> float:
    """Parse a quantity token such as "10", "2.5" or "1,000"."""
    if not raw:
        return 0.0
    try:
        return float(str(raw).replace(',', ''))
    except ValueError:
        return 0.0
