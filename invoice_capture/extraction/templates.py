"""
Vendor Template Module.

Templates bundle the field rules and line-item strategies for one
document layout. The generic template handles any invoice; vendor
templates add their own higher-priority rules in front of the generic
ones and choose their own line-item strategy order.

Registry order (first match wins):
    1. meyer_distributing  - "meyer" + "distributing"
    2. turn5               - "turn 5"
    3. orw_usa             - "orw usa"
    4. pacific_steel       - "pacific steel" + "recycling"

Usage:
    from invoice_capture.extraction.templates import TemplateRecognizer

    template = TemplateRecognizer().recognize(text)
    print(template.name)

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from invoice_capture.utils.logger import get_logger
from invoice_capture.postprocessor.normalizers import normalize_date
from .extraction_result import LineItem
from .fields import GENERIC_FIELD_RULES
from .line_items import (
    delimited_table_strategy,
    description_first_strategy,
    generic_fallback_strategy,
    orw_remittance_strategy,
    remittance_row_strategy,
    tabular_strategy
)
from .rules import PatternRule, rule

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class LineItemRule:
    """A named line-item strategy."""
    name: str
    strategy: Callable[[List[str]], List[LineItem]]


@dataclass(frozen=True)
class VendorTemplate:
    """
    Extraction rules for one document layout.

    Attributes:
        name: Template identifier ("generic", "turn5"...)
        signature_keywords: Lowercase strings that must all appear
        field_rules: Field name -> rules in priority order
        line_item_rules: Line-item strategies in priority order
    """
    name: str
    signature_keywords: FrozenSet[str]
    field_rules: Mapping[str, Tuple[PatternRule, ...]]
    line_item_rules: Tuple[LineItemRule, ...]

    def matches(self, lowered_text: str) -> bool:
        """True when every signature keyword occurs in the lowercased text."""
        return bool(self.signature_keywords) and all(
            keyword in lowered_text for keyword in self.signature_keywords
        )

    def rules_for(self, field_name: str) -> Tuple[PatternRule, ...]:
        return self.field_rules.get(field_name, ())

    def __repr__(self) -> str:
        return f"VendorTemplate(name='{self.name}')"


def extend_rules(overrides: Mapping[str, Iterable[PatternRule]]) -> Mapping[str, Tuple[PatternRule, ...]]:
    """Vendor rules followed by the generic rules, per field."""
    return MappingProxyType({
        name: tuple(overrides.get(name, ())) + generic
        for name, generic in GENERIC_FIELD_RULES.items()
    })


NARRATIVE_RULES = (
    LineItemRule('tabular', tabular_strategy),
    LineItemRule('description_first', description_first_strategy),
    LineItemRule('generic_fallback', generic_fallback_strategy),
)

DELIMITED_RULE = LineItemRule('delimited_table', delimited_table_strategy)


GENERIC_TEMPLATE = VendorTemplate(
    name='generic',
    signature_keywords=frozenset(),
    field_rules=MappingProxyType(dict(GENERIC_FIELD_RULES)),
    line_item_rules=(DELIMITED_RULE,) + NARRATIVE_RULES,
)

MEYER_TEMPLATE = VendorTemplate(
    name='meyer_distributing',
    signature_keywords=frozenset({'meyer', 'distributing'}),
    field_rules=extend_rules({
        'counterparty_name': [
            rule(1, r'\bmeyer\s+distributing\b', group=0, constant='Meyer Distributing'),
        ],
        'document_id': [
            rule(1, r'\b(EFT\d{12})\b', flags=re.MULTILINE, label='meyer eft number'),
        ],
        'document_date': [
            rule(1, r'payment\s+date[\s\S]{0,80}?(\d{2}/\d{2}/\d{4})',
                 normalize=normalize_date, label='meyer payment date'),
        ],
        'notes': [
            rule(1, r'([^\n]*short\s+pay[^\n]*?co-?op[^\n]*)',
                 normalize=lambda value: ' '.join(value.split()), label='co-op short pay'),
        ],
    }),
    line_item_rules=(
        LineItemRule('meyer_remittance', remittance_row_strategy),
        DELIMITED_RULE,
    ),
)

TURN5_TEMPLATE = VendorTemplate(
    name='turn5',
    signature_keywords=frozenset({'turn 5'}),
    field_rules=extend_rules({
        'counterparty_name': [
            rule(1, r'\bturn\s+5\b', group=0, constant='Turn 5, Inc.'),
        ],
        'document_id': [
            rule(1, r'\bcheck\s+number\s+(\d+)', label='turn5 check number'),
        ],
        'document_date': [
            rule(1, r'\bdate\s+(\d{2}/\d{2}/\d{4})', normalize=normalize_date,
                 label='turn5 date'),
        ],
    }),
    line_item_rules=(
        LineItemRule('turn5_remittance', remittance_row_strategy),
        DELIMITED_RULE,
    ),
)

ORW_TEMPLATE = VendorTemplate(
    name='orw_usa',
    signature_keywords=frozenset({'orw usa'}),
    field_rules=extend_rules({
        'counterparty_name': [
            rule(1, r'\borw\s+usa\b', group=0, constant='ORW USA, Inc.'),
        ],
        'document_id': [
            rule(1, r'^[ \t]*(\d{5})\s+\d{2}/\d{2}/\d{2}[ \t]*$', label='orw check number'),
        ],
        'document_date': [
            rule(1, r'(?<![\d/])(\d{2}/\d{2}/\d{2}(?:\d{2})?)(?![\d/])', normalize=normalize_date,
                 label='orw first date'),
        ],
    }),
    line_item_rules=(
        LineItemRule('orw_remittance', orw_remittance_strategy),
        DELIMITED_RULE,
    ),
)

PACIFIC_STEEL_TEMPLATE = VendorTemplate(
    name='pacific_steel',
    signature_keywords=frozenset({'pacific steel', 'recycling'}),
    field_rules=extend_rules({
        'counterparty_name': [
            rule(1, r'\bpacific\s+steel\b', group=0, constant='Pacific Steel & Recycling'),
        ],
        'document_id': [
            rule(1, r'\binvoice\s*(?:#|no\.?|number)?[\s:]*(\d{7,9})\b',
                 label='pacific invoice number'),
        ],
    }),
    line_item_rules=NARRATIVE_RULES,
)

TEMPLATE_REGISTRY: Tuple[VendorTemplate, ...] = (
    MEYER_TEMPLATE,
    TURN5_TEMPLATE,
    ORW_TEMPLATE,
    PACIFIC_STEEL_TEMPLATE,
)


def get_template(name: str) -> VendorTemplate:
    """
    Look up a template by name.

    Raises:
        KeyError: If no template has that name.
    """
    for template in TEMPLATE_REGISTRY + (GENERIC_TEMPLATE,):
        if template.name == name:
            return template
    raise KeyError(f"Unknown template: {name}")


class TemplateRecognizer:
    """
    Picks the template for a document from its signature keywords.

    Example:
        >>> TemplateRecognizer().recognize("Turn 5, Inc. Check Number 88123").name
        'turn5'
    """

    def __init__(self, registry: Optional[Iterable[VendorTemplate]] = None) -> None:
        self.registry = tuple(registry) if registry is not None else TEMPLATE_REGISTRY

    def recognize(self, text: str) -> VendorTemplate:
        """Return the first registered template whose keywords all occur, else generic."""
        lowered = text.lower()

        for template in self.registry:
            if template.matches(lowered):
                logger.info(f"Recognized template: {template.name}")
                return template

        logger.debug("No vendor template matched, using generic")
        return GENERIC_TEMPLATE
