"""
Extraction Module.

Heuristic field and line-item extraction over acquired document text.

Components:
    - TemplateRecognizer: Picks a vendor template by signature keywords
    - FieldExtractor: Runs prioritized PatternRule cascades per field
    - LineItemExtractor: First-success fold over line-item strategies
    - ExtractedRecord / LineItem: Result data classes
"""

from .extraction_result import ExtractedRecord, LineItem
from .fields import FieldExtractor, FIELD_NAMES
from .line_items import LineItemExtractor
from .rules import Candidate, PatternRule, apply_rules, collect_all, rule
from .templates import (
    GENERIC_TEMPLATE,
    TEMPLATE_REGISTRY,
    LineItemRule,
    TemplateRecognizer,
    VendorTemplate,
    get_template
)

__all__ = [
    'ExtractedRecord',
    'LineItem',
    'FieldExtractor',
    'FIELD_NAMES',
    'LineItemExtractor',
    'Candidate',
    'PatternRule',
    'apply_rules',
    'collect_all',
    'rule',
    'GENERIC_TEMPLATE',
    'TEMPLATE_REGISTRY',
    'LineItemRule',
    'TemplateRecognizer',
    'VendorTemplate',
    'get_template',
]
