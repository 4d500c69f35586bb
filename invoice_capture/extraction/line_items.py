"""
Line-Item Extraction Module.

Line-item strategies are pure functions `lines -> List[LineItem]`.
A template lists them in priority order and the LineItemExtractor
folds over them: the first strategy that yields at least one item
passing tolerance validation wins.

Strategies:
    - delimited_table_strategy: comma-delimited header + rows
      (flattened spreadsheets, CSV remittances)
    - tabular_strategy: "qty [unit] description price [unit] amount"
    - description_first_strategy: product line, then qty/price/amount
      on the same or the following line
    - generic_fallback_strategy: leading quantity, description, one or
      two trailing amounts
    - remittance_row_strategy: "NNNNN MM/DD/YYYY [memo] amount discount paid"
    - orw_remittance_strategy: "NNNNN MM/DD/YY amount disc deduction net"

Narrative strategies skip header and footer lines; the table and
remittance strategies need those lines and see every line.

Author: ML Engineering Team
"""

import csv
import re
from typing import Dict, List, Optional

from invoice_capture.utils.logger import get_logger
from invoice_capture.postprocessor.normalizers import normalize_date, parse_money, parse_quantity
from invoice_capture.postprocessor.validators import LineItemValidator
from .extraction_result import LineItem
from .predicates import is_header_or_footer, looks_like_product_line

# Initialize module logger
logger = get_logger(__name__)

DESCRIPTION_LIMIT = 200
TABLE_HEADER_SCAN_LINES = 10

UNIT_TOKENS = (
    r'(?:pieces|piece|pcs|pc|each|ea|pounds|pound|lbs|lb|gallons|gallon|gal'
    r'|feet|foot|ft|boxes|box|bx|sets|set|hours|hrs|hr)'
)

PRICE = r'\$?([\d,]*\d\.\d{2,4})'
AMOUNT = r'\$?([\d,]*\d\.\d{2})'

TABULAR_ROW = re.compile(
    rf'^(?P<qty>\d[\d,]*(?:\.\d+)?)\s+(?:(?P<unit>{UNIT_TOKENS})\.?\s+)?'
    rf'(?P<desc>.*?[A-Za-z].*?)\s+\$?(?P<price>[\d,]*\d\.\d{{2,4}})\s+'
    rf'(?:(?P<price_unit>[A-Za-z]{{1,4}})\s+)?\$?(?P<amount>[\d,]*\d\.\d{{2}})$',
    re.IGNORECASE
)

QTY_PRICE_AMOUNT = re.compile(
    rf'(?:^|\s)(\d[\d,]*(?:\.\d+)?)\s+(?:\S+\s+)*?{PRICE}\s+{AMOUNT}\s*$'
)

FALLBACK_ROW = re.compile(
    rf'^(?P<qty>\d[\d,]*(?:\.\d+)?)\s+(?:(?P<unit>{UNIT_TOKENS})\.?\s+)?'
    r'(?P<desc>.*?[A-Za-z].*?)\s+\$?(?P<first>[\d,]*\d\.\d{2})'
    r'(?:\s+\$?(?P<second>[\d,]*\d\.\d{2}))?\s*$',
    re.IGNORECASE
)

REMITTANCE_ROW = re.compile(
    r'(?<!\d)(\d{5})\s+(\d{2}/\d{2}/\d{4})\s+(?:(.*?)\s+)?'
    r'\$?([\d,]+\.\d{2})\s+\$?([\d,]+\.\d{2})\s+\$?([\d,]+\.\d{2})'
)

ORW_ROW = re.compile(
    r'(?<!\d)(\d{5})\s+(\d{2}/\d{2}/\d{2})(?!\d)\s+([\d,]+\.\d{2})\s+'
    r'([\d.]+)\s+([\d.]+)\s+([\d,]+\.\d{2})'
)

# Header cell keywords per column, checked in this order
COLUMN_KEYWORDS = (
    ('discount', ('discount', 'disc')),
    ('date', ('date',)),
    ('paid', ('paid', 'net', 'payment')),
    ('price', ('price', 'rate')),
    ('quantity', ('qty', 'quantity')),
    ('amount', ('amount', 'total', 'gross', 'balance')),
    ('reference', ('invoice', 'inv', 'document', 'doc', 'ref', 'number', 'no')),
    ('description', ('description', 'desc', 'item', 'memo', 'detail')),
)


def split_lines(text: str) -> List[str]:
    """Split text into stripped, non-blank lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def candidate_lines(lines: List[str]) -> List[str]:
    """Drop header and footer lines."""
    return [line for line in lines if not is_header_or_footer(line)]


def _truncate(text: str) -> str:
    return ' '.join(text.split())[:DESCRIPTION_LIMIT]


# =============================================================================
# NARRATIVE STRATEGIES
# =============================================================================

def tabular_strategy(lines: List[str]) -> List[LineItem]:
    """
    Rows printed as "qty [unit] description unit_price [price-unit] amount".

    Example:
        >>> tabular_strategy(["10 EA STEEL SHEET 66.50 CW 665.00"])
        [LineItem(qty=10, desc='STEEL SHEET', price=66.50, amount=665.00)]
    """
    items = []
    for line in candidate_lines(lines):
        match = TABULAR_ROW.match(line)
        if not match:
            continue
        items.append(LineItem(
            quantity=parse_quantity(match.group('qty')),
            description=_truncate(match.group('desc')),
            unit_price=parse_money(match.group('price')),
            amount=parse_money(match.group('amount')),
            unit=(match.group('unit') or '').upper(),
        ))
    return items


def description_first_strategy(lines: List[str]) -> List[LineItem]:
    """
    A product-like line followed by its quantity, price and amount.

    The numbers are looked for on the next line first, then at the end
    of the product line itself.
    """
    lines = candidate_lines(lines)
    items = []
    index = 0

    while index < len(lines):
        line = lines[index]
        if not looks_like_product_line(line):
            index += 1
            continue

        next_line = lines[index + 1] if index + 1 < len(lines) else ""
        next_match = QTY_PRICE_AMOUNT.match(next_line) if next_line else None

        if next_match:
            description, match = line, next_match
            index += 2
        else:
            match = QTY_PRICE_AMOUNT.search(line)
            description = line[:match.start()] if match else line
            index += 1

        if match is None or not re.search(r'[A-Za-z]', description):
            continue

        quantity, unit_price, amount = match.groups()
        items.append(LineItem(
            quantity=parse_quantity(quantity),
            description=_truncate(description),
            unit_price=parse_money(unit_price),
            amount=parse_money(amount),
        ))
    return items


def generic_fallback_strategy(lines: List[str]) -> List[LineItem]:
    """
    Leading quantity, a description, then one or two money amounts.

    With two amounts they are unit price and amount; with one, the unit
    price is unknown (0.0).
    """
    items = []
    for line in candidate_lines(lines):
        match = FALLBACK_ROW.match(line)
        if not match:
            continue

        description = match.group('desc').strip()
        if len(description) < 3:
            continue

        if match.group('second'):
            unit_price = parse_money(match.group('first'))
            amount = parse_money(match.group('second'))
        else:
            unit_price = 0.0
            amount = parse_money(match.group('first'))

        items.append(LineItem(
            quantity=parse_quantity(match.group('qty')),
            description=_truncate(description),
            unit_price=unit_price,
            amount=amount,
            unit=(match.group('unit') or '').upper(),
        ))
    return items


# =============================================================================
# TABLE AND REMITTANCE STRATEGIES
# =============================================================================

def classify_columns(header: List[str]) -> Dict[str, int]:
    """
    Map column kinds onto header positions.

    Each header cell gets the first kind whose keyword it contains; for
    each kind only the leftmost column is kept.

    Example:
        >>> classify_columns(["Invoice", "Amount", "Date"])
        {'reference': 0, 'amount': 1, 'date': 2}
    """
    columns: Dict[str, int] = {}
    for position, cell in enumerate(header):
        words = re.findall(r'[a-z]+', cell.lower())
        if not words:
            continue
        for kind, keywords in COLUMN_KEYWORDS:
            if any(word.startswith(keyword) if len(keyword) > 3 else word == keyword
                   for word in words for keyword in keywords):
                columns.setdefault(kind, position)
                break
    return columns


def _find_header(rows: List[List[str]]) -> Optional[int]:
    for index, row in enumerate(rows[:TABLE_HEADER_SCAN_LINES]):
        if len(row) < 2:
            continue
        columns = classify_columns(row)
        if 'reference' in columns and ('amount' in columns or 'paid' in columns):
            return index
    return None


def _cell(row: List[str], columns: Dict[str, int], kind: str) -> str:
    position = columns.get(kind)
    if position is None or position >= len(row):
        return ""
    return row[position].strip()


def delimited_table_strategy(lines: List[str]) -> List[LineItem]:
    """
    Rows of a comma-delimited table with a recognizable header.

    The header must appear within the first rows and name a reference
    (invoice/document) column and an amount or paid column. The paid
    value is the row amount when present, otherwise the amount column.

    Example:
        >>> delimited_table_strategy(["Invoice,Amount,Date", "INV-1,$250.00,01/02/2024"])
        [LineItem(qty=1, desc='Invoice INV-1', price=250.00, amount=250.00)]
    """
    rows = [[cell.strip() for cell in row] for row in csv.reader(lines)]
    header_index = _find_header(rows)
    if header_index is None:
        return []

    columns = classify_columns(rows[header_index])
    logger.debug(f"Delimited table header at row {header_index}: {columns}")

    items = []
    for row in rows[header_index + 1:]:
        reference = _cell(row, columns, 'reference')
        if not reference or is_header_or_footer(reference):
            continue
        if row and row[0] and is_header_or_footer(row[0]):
            continue

        gross = parse_money(_cell(row, columns, 'amount'))
        paid = parse_money(_cell(row, columns, 'paid'))
        amount = paid or gross
        if amount <= 0:
            continue

        quantity = parse_quantity(_cell(row, columns, 'quantity')) or 1.0
        unit_price = parse_money(_cell(row, columns, 'price'))
        if not unit_price and quantity == 1.0:
            unit_price = amount

        items.append(LineItem(
            quantity=quantity,
            description=_truncate(_cell(row, columns, 'description') or f"Invoice {reference}"),
            unit_price=unit_price,
            amount=amount,
            date=normalize_date(_cell(row, columns, 'date')),
            reference=reference,
            discount=parse_money(_cell(row, columns, 'discount')),
        ))
    return items


def _remittance_item(reference: str, raw_date: str, paid: float,
                     discount: float, memo: str = "") -> LineItem:
    return LineItem(
        quantity=1.0,
        description=_truncate(memo) if memo else f"Invoice {reference}",
        unit_price=paid,
        amount=paid,
        date=normalize_date(raw_date),
        reference=reference,
        discount=discount,
    )


def remittance_row_strategy(lines: List[str]) -> List[LineItem]:
    """
    Remittance rows "NNNNN MM/DD/YYYY [memo] amount discount paid".

    Used for Meyer Distributing and Turn 5 remittance advice.
    """
    items = []
    for line in lines:
        for match in REMITTANCE_ROW.finditer(line):
            reference, raw_date, memo, _, discount, paid = match.groups()
            items.append(_remittance_item(
                reference, raw_date, parse_money(paid), parse_money(discount), memo or ""
            ))
    return items


def orw_remittance_strategy(lines: List[str]) -> List[LineItem]:
    """ORW USA rows: "NNNNN MM/DD/YY amount discounts deductions net"."""
    items = []
    for line in lines:
        for match in ORW_ROW.finditer(line):
            reference, raw_date, _, discounts, deductions, net = match.groups()
            items.append(_remittance_item(
                reference, raw_date, parse_money(net),
                round(parse_money(discounts) + parse_money(deductions), 2)
            ))
    return items


class LineItemExtractor:
    """
    Runs a template's line-item strategies, first success wins.

    Attributes:
        validator: LineItemValidator applying the tolerance rule.

    Example:
        >>> extractor = LineItemExtractor()
        >>> items = extractor.extract(text, template)
    """

    def __init__(self, validator: Optional[LineItemValidator] = None) -> None:
        self.validator = validator or LineItemValidator()

    def extract(self, text: str, template) -> List[LineItem]:
        """
        Extract validated line items.

        Args:
            text: Acquired document text.
            template: VendorTemplate supplying the strategy order.

        Returns:
            Items from the first strategy yielding a valid item; an
            empty list when none does.
        """
        lines = split_lines(text)

        for line_item_rule in template.line_item_rules:
            candidates = line_item_rule.strategy(lines)
            items = [item for item in candidates if self.validator.is_valid(item)]

            if items:
                logger.debug(
                    f"Strategy '{line_item_rule.name}' produced {len(items)} item(s) "
                    f"({len(candidates) - len(items)} discarded)"
                )
                return items

            if candidates:
                logger.debug(
                    f"Strategy '{line_item_rule.name}' items all failed validation"
                )

        return []
