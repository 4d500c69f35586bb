"""
Post-Processor Module.

Normalization, validation and aggregation of extracted invoice data.

Components:
    - AmountNormalizer / parse_money / format_money: Money parsing
    - DateNormalizer / normalize_date: Date normalization to YYYY-MM-DD
    - LineItemValidator: Quantity x price tolerance check
    - AmountValidator: Plausible total range
    - PostProcessor: Result aggregation
"""

from .normalizers import (
    AmountNormalizer,
    DateNormalizer,
    format_money,
    normalize_date,
    parse_money,
    parse_quantity
)
from .validators import AmountValidator, LineItemValidator
from .processor import PostProcessor

__all__ = [
    'AmountNormalizer',
    'DateNormalizer',
    'format_money',
    'normalize_date',
    'parse_money',
    'parse_quantity',
    'AmountValidator',
    'LineItemValidator',
    'PostProcessor',
]
