"""
Named Predicates Module.

Small, independently testable checks used by the field rules and the
line-item strategies. Every function here is pure and works on a single
string (or a text and an offset into it).

Author: ML Engineering Team
"""

import re

DATE_LIKE = re.compile(
    r'^(?:\d{1,2}[/\-.]\d{1,2}(?:[/\-.]\d{2,4})?|\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2})$'
)
BARE_YEAR = re.compile(r'^(?:19|20)\d{2}$')

ADDRESS_LABEL = re.compile(
    r'\b(?:bill(?:ed)?\s*to|ship(?:ped)?\s*to|sold\s*to|deliver\s*to|customer)\b',
    re.IGNORECASE
)

COUNTERPARTY_BLACKLIST = (
    'invoice',
    'bill to',
    'ship to',
    'sold to',
    'payment',
    'total',
    'amount due',
    'customer',
    'vendor number',
    'remittance',
    'statement',
    'purchase order',
    'packing list',
)

ENTITY_SUFFIX = (
    r'(?:L\.?L\.?C|P\.?L\.?L\.?C|L\.?L\.?P|L\.?P|Inc|Corp|Co|Company|Ltd|Limited'
    r'|Corporation|Incorporated)'
)
ENTITY_SUFFIX_AT_END = re.compile(rf'\b{ENTITY_SUFFIX}\b\.?$', re.IGNORECASE)

COMPANY_HEADING = re.compile(r"^[A-Z][A-Z\s&,'.()-]+$")

STREET_OR_ZIP = re.compile(
    r'^\d+\s+\w+|\b[A-Z]{2}\s+\d{5}(?:-\d{4})?\b|\bP\.?\s?O\.?\s+Box\b',
    re.IGNORECASE
)

HEADER_FOOTER_START = re.compile(
    r'^(?:invoice|bill\s+to|ship\s+to|sold\s+to|sold\s+by|quantity|qty|description'
    r'|unit\s+price|amount|total|subtotal|sub-total|page|thank\s+you|terms'
    r'|payment|please|customer|item\s+(?:number|no\.?|#)|sales\s+tax|remit\s+to)'
    r'(?![a-z])',
    re.IGNORECASE
)
HEADER_FOOTER_ANYWHERE = re.compile(
    r'sub-?\s?total|amount\s+due|balance\s+due|\btotal\b',
    re.IGNORECASE
)

PRODUCT_WORDS = re.compile(
    r'\b(?:sheet|primer|black|joint|ring|lease|surcharge|freight|service|assembly'
    r'|labor|labour|part|kit|pipe|plate|beam|valve|fitting|installation|repair'
    r'|delivery|fee|rental)',
    re.IGNORECASE
)


def looks_like_date(value: str) -> bool:
    """True for values shaped like 12/31/2025, 12-31 or 2025-12-31."""
    return bool(DATE_LIKE.match(value.strip()))


def looks_like_bare_year(value: str) -> bool:
    """True for a lone four-digit year such as "2025"."""
    return bool(BARE_YEAR.match(value.strip()))


def is_valid_identifier_length(value: str, min_length: int = 4, max_length: int = 30) -> bool:
    """Document identifiers are between 4 and 30 characters long."""
    return min_length <= len(value.strip()) <= max_length


def has_digit(value: str) -> bool:
    return any(char.isdigit() for char in value)


def in_address_block(text: str, position: int, lookback: int = 2) -> bool:
    """
    Check whether an offset falls inside a customer address block.

    An address block starts at a bill-to, ship-to, sold-to, deliver-to
    or customer label. The labelled line and the `lookback` lines after
    it count as part of the block.

    Args:
        text: Full document text.
        position: Character offset of the match.
        lookback: How many lines after a label still belong to it.

    Example:
        >>> text = "Bill To:\\nACME HOLDINGS LLC\\n"
        >>> in_address_block(text, text.index("ACME"))
        True
    """
    line_index = text.count('\n', 0, position)
    lines = text.split('\n')
    first = max(0, line_index - lookback)

    return any(ADDRESS_LABEL.search(line) for line in lines[first:line_index + 1])


def is_blacklisted_counterparty(value: str) -> bool:
    """True when a candidate name contains a form label rather than a name."""
    lowered = ' '.join(value.lower().split())
    return any(term in lowered for term in COUNTERPARTY_BLACKLIST)


def has_entity_suffix(value: str) -> bool:
    """
    True when a name ends with a legal-entity suffix.

    Example:
        >>> has_entity_suffix("Acme Fabrication, Inc.")
        True
    """
    return bool(ENTITY_SUFFIX_AT_END.search(value.strip().rstrip(',;:')))


def looks_like_company_heading(line: str) -> bool:
    """
    True for an all-caps heading of two or more words, 10 to 60
    characters long, made up mostly of letters.

    Example:
        >>> looks_like_company_heading("PACIFIC STEEL & RECYCLING")
        True
        >>> looks_like_company_heading("INVOICE")
        False
    """
    line = line.strip()
    if not 10 <= len(line) <= 60:
        return False
    if not COMPANY_HEADING.match(line):
        return False
    if len(line.split()) < 2:
        return False

    visible = [char for char in line if not char.isspace()]
    letters = sum(1 for char in visible if char.isalpha())
    return letters / len(visible) >= 0.75


def looks_like_address_line(line: str) -> bool:
    """True for street, PO box and "City, ST 12345" lines."""
    return bool(STREET_OR_ZIP.search(line.strip()))


def is_header_or_footer(line: str) -> bool:
    """
    True for table headers, totals and page furniture.

    A line is excluded when it starts with a column or section label
    ("Description", "Qty", "Page 2"...) or mentions a total anywhere.
    """
    line = line.strip()
    return bool(HEADER_FOOTER_START.match(line) or HEADER_FOOTER_ANYWHERE.search(line))


def looks_like_product_line(line: str) -> bool:
    """True when a line reads like a product or service description."""
    line = line.strip()
    if not 5 <= len(line) <= 300:
        return False
    if is_header_or_footer(line):
        return False
    return bool(PRODUCT_WORDS.search(line))
