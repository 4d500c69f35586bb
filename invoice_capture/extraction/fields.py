"""
Field Extraction Module.

Generic rule tables for every header field, and the FieldExtractor that
runs a template's tables over a document text.

Fields:
    - counterparty_name: known names, entity-suffix lines, all-caps
      headings, then labelled "Bill From:" style fields
    - document_id: invoice, payment and check numbers
    - document_date / due_date: labelled dates, normalized to ISO
    - terms: closed vocabulary (NET n, C.O.D., Due on receipt)
    - description: "Description:", "Memo:", "Subject:", "Re:" lines
    - total_amount: labelled totals within a plausible range
    - notes: PO references and "Notes:" remarks

Generic rules use priorities 10, 20, 30...; vendor templates place
their own rules below 10 so they run first.

Author: ML Engineering Team
"""

import re
from typing import Any, Dict

from invoice_capture.utils.logger import get_logger
from invoice_capture.postprocessor.normalizers import normalize_date, parse_money
from invoice_capture.postprocessor.validators import AmountValidator
from .predicates import (
    has_digit,
    has_entity_suffix,
    is_blacklisted_counterparty,
    is_valid_identifier_length,
    looks_like_address_line,
    looks_like_bare_year,
    looks_like_company_heading,
    looks_like_date
)
from .rules import (
    Candidate,
    apply_rules,
    collect_all,
    in_address,
    rule,
    value_is,
    value_is_not
)

# Initialize module logger
logger = get_logger(__name__)

# Date tokens accepted after a date label
DATE_TOKEN = (
    r'(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}'
    r'|\d{4}-\d{1,2}-\d{1,2}'
    r'|\d{1,2}[-\s]?[A-Za-z]{3,9}\.?[-\s,]*\d{2,4}'
    r'|[A-Za-z]{3,9}\.?\s+\d{1,2},?\s+\d{4})'
)

MONEY_TOKEN = r'\$?\s*([\d,]+\.\d{2})\b'

NAME_PREFIXES = ['vendor name:', 'vendor:', 'bill from:', 'sold by:', 'remit to:', 'from:']


# =============================================================================
# NORMALIZERS
# =============================================================================

def clean_name(name: str) -> str:
    """
    Clean a company name.

    Collapses whitespace, strips a leading label and trailing separators.
    """
    name = ' '.join(name.split())

    name_lower = name.lower()
    for prefix in NAME_PREFIXES:
        if name_lower.startswith(prefix):
            name = name[len(prefix):].strip()
            break

    return name.strip(',;: ')


def canonicalize_terms(raw: str) -> str:
    """
    Map a matched terms phrase onto its canonical spelling.

    Example:
        >>> canonicalize_terms("net30")
        "NET 30"
        >>> canonicalize_terms("c.o.d")
        "C.O.D."
    """
    compact = ' '.join(raw.upper().split())

    if compact.startswith('NET'):
        days = re.search(r'\d+', compact)
        if not days:
            return ""
        suffix = " DAYS" if 'DAY' in compact else ""
        return f"NET {int(days.group())}{suffix}"

    if 'RECEIPT' in compact:
        return "Due upon receipt" if 'UPON' in compact else "Due on receipt"

    if re.sub(r'[^A-Z]', '', compact) == 'COD':
        return "C.O.D."

    return ""


def normalize_total(raw: str) -> str:
    """Parse a money token, keeping it only when it is a plausible total."""
    amount = parse_money(raw)
    if not AmountValidator().is_reasonable_total(amount):
        return ""
    return f"{amount:.2f}"


def normalize_description(raw: str) -> str:
    value = ' '.join(raw.split())
    return value if 5 <= len(value) <= 100 else ""


def normalize_po(raw: str) -> str:
    return f"PO: {raw}" if has_digit(raw) else ""


# =============================================================================
# GENERIC RULE TABLES
# =============================================================================

ID_REJECTS = (
    value_is(looks_like_date),
    value_is(looks_like_bare_year),
    value_is_not(is_valid_identifier_length),
    value_is_not(has_digit),
)

DOCUMENT_ID_RULES = (
    rule(10, r'\binvoice\s+(\d{7,9})\b', reject=ID_REJECTS, label='invoice <digits>'),
    rule(20, r'\binvoice\s*(?:number|no\.?|#)[\s:#]*([A-Z0-9][A-Z0-9-]*)',
         reject=ID_REJECTS, label='invoice number'),
    rule(30, r'\b(?i:invoice)[\s:]+([A-Z0-9-]{5,})\b', flags=re.MULTILINE,
         reject=ID_REJECTS, label='invoice <id>'),
    rule(40, r'^(\d+\s+[A-Z]{2,}-?\d{5,})$', flags=re.MULTILINE,
         reject=ID_REJECTS, label='<digits> <CAPS>-<digits> line'),
    rule(50, r'\b(INV-?\d{5,})\b', reject=ID_REJECTS, label='INV<digits>'),
    rule(60, r'\b([A-Z]{3}\d{6,})\b', flags=re.MULTILINE,
         reject=ID_REJECTS, label='<3 caps><digits>'),
    rule(70, r'\binvoice[^\d\n]{0,40}?(\d{5,})', reject=ID_REJECTS, label='invoice ... <digits>'),
    rule(80, r'\b(?:payment|check|cheque)\s*(?:number|no\.?|#)[\s:#]*([A-Z0-9][A-Z0-9-]*)',
         reject=ID_REJECTS, label='payment/check number'),
    rule(90, r'\b(EFT\d{6,})\b', flags=re.MULTILINE, reject=ID_REJECTS, label='EFT<digits>'),
    rule(100, r'\breference\s*(?:number|no\.?|#)?[\s:#]+([A-Z0-9][A-Z0-9-]{3,})',
         reject=ID_REJECTS, label='reference'),
)

DOCUMENT_DATE_RULES = (
    rule(10, rf'\binvoice\s+date[\s:]*{DATE_TOKEN}', normalize=normalize_date,
         label='invoice date'),
    rule(20, rf'\border\s+date[\s:]*{DATE_TOKEN}', normalize=normalize_date,
         label='order date'),
    rule(30, rf'\bpayment\s+date[\s:]*{DATE_TOKEN}', normalize=normalize_date,
         label='payment date'),
    rule(40, rf'(?<!due )(?<!due)\bdate[\s:]+{DATE_TOKEN}', normalize=normalize_date,
         label='date'),
)

DUE_DATE_RULES = (
    rule(10, rf'\bdue\s+date[\s:]*{DATE_TOKEN}', normalize=normalize_date, label='due date'),
    rule(20, rf'\bpayment\s+due(?:\s+by)?[\s:]*{DATE_TOKEN}', normalize=normalize_date,
         label='payment due'),
)

TERMS_RULES = (
    rule(10, r'\b(NET\s*\d{1,3}(?:\s*DAYS?)?)\b', normalize=canonicalize_terms, label='net n'),
    rule(20, r'(?<![A-Za-z])(C\.\s?O\.\s?D\b\.?|(?-i:COD)\b)', normalize=canonicalize_terms,
         label='c.o.d.'),
    rule(30, r'\b(due\s+(?:on|upon)\s+receipt)\b', normalize=canonicalize_terms,
         label='due on receipt'),
)

TOTAL_RULES = (
    rule(10, rf'\bgrand\s+total[\s:]*{MONEY_TOKEN}', normalize=normalize_total,
         label='grand total'),
    rule(20, r'(?<!sub )(?<!sub-)\btotal\b(?:\s+(?:usd|due|amount|invoice|paid|payment))?'
             rf'[\s:]*{MONEY_TOKEN}', normalize=normalize_total, label='total'),
    rule(30, rf'\b(?:amount|balance)\s+due[\s:]*{MONEY_TOKEN}', normalize=normalize_total,
         label='amount due'),
)

def on_address_line(candidate: Candidate) -> bool:
    return looks_like_address_line(candidate.line)


COUNTERPARTY_REJECTS = (
    value_is(is_blacklisted_counterparty),
    in_address,
    on_address_line,
)

COUNTERPARTY_RULES = (
    rule(10, r'\bpacific\s+steel\s+(?:&|and)\s+recycling\b', group=0,
         constant='Pacific Steel & Recycling', label='known: pacific steel'),
    rule(11, r'\baffiliated\s+metals\b', group=0,
         constant='Affiliated Metals', label='known: affiliated metals'),
    rule(12, r'\btci\s+steel\b', group=0, constant='TCI Steel', label='known: tci steel'),
    rule(20, r"^([A-Z][A-Za-z0-9\s&,.'()-]*?\b(?:L\.?L\.?C|Inc|Corp|Co|Company|Ltd|Limited"
             r"|Corporation|Incorporated|LLP|PLLC|LP)\b\.?)",
         line_scope=30, normalize=clean_name,
         reject=COUNTERPARTY_REJECTS + (value_is_not(has_entity_suffix),
                                        value_is(lambda value: len(value) > 80)),
         label='entity suffix line'),
    rule(30, r'^(.+)$', flags=re.MULTILINE, line_scope=20, normalize=clean_name,
         reject=COUNTERPARTY_REJECTS + (value_is_not(looks_like_company_heading),),
         label='all-caps heading'),
    rule(40, r"\b(?:bill\s+from|sold\s+by|remit\s+to|vendor(?:\s+name)?|from)\s*:[ \t]*\n?[ \t]*"
             r"([A-Z][A-Za-z0-9&,.'() -]{1,79})",
         normalize=clean_name, reject=COUNTERPARTY_REJECTS, label='labelled name'),
)

DESCRIPTION_RULES = (
    rule(10, r'^[ \t]*(?:description|memo|subject|re)[ \t]*:[ \t]*(.+?)[ \t]*$',
         normalize=normalize_description, label='description label'),
)

NOTES_RULES = (
    rule(10, r'\b(?:customer\s+PO|purchase\s+order|P\.?O\.?(?![A-Za-z]))'
             r'(?:\s*(?:number|no\.?|#))?[\s#:]+([A-Z0-9][A-Z0-9-]*)',
         normalize=normalize_po, label='po number'),
    rule(20, r'\bnotes?[ \t]*:[ \t]*([^\n]{10,200})', label='notes'),
)

GENERIC_FIELD_RULES = {
    'counterparty_name': COUNTERPARTY_RULES,
    'document_id': DOCUMENT_ID_RULES,
    'document_date': DOCUMENT_DATE_RULES,
    'due_date': DUE_DATE_RULES,
    'terms': TERMS_RULES,
    'description': DESCRIPTION_RULES,
    'total_amount': TOTAL_RULES,
    'notes': NOTES_RULES,
}

FIELD_NAMES = tuple(GENERIC_FIELD_RULES)


class FieldExtractor:
    """
    Runs a template's rule tables over a document text.

    Example:
        >>> extractor = FieldExtractor()
        >>> fields = extractor.extract(text, template)
        >>> fields['document_id']
        '9165009'
    """

    def extract(self, text: str, template) -> Dict[str, Any]:
        """
        Extract every header field.

        Args:
            text: Acquired document text.
            template: VendorTemplate supplying the rule tables.

        Returns:
            Dictionary of field values. Strings default to "", the
            total to 0.0 and notes to an empty list.
        """
        fields: Dict[str, Any] = {}

        for name in FIELD_NAMES:
            rules = template.rules_for(name)
            if name == 'notes':
                fields[name] = collect_all(text, rules)
            elif name == 'total_amount':
                value = apply_rules(text, rules)
                fields[name] = parse_money(value) if value else 0.0
            else:
                fields[name] = apply_rules(text, rules)

        found = [name for name, value in fields.items() if value]
        logger.debug(f"Fields found with template '{template.name}': {found}")
        return fields
