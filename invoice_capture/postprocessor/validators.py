"""
Data Validators Module.

This module provides the numeric plausibility checks applied during
extraction:
    - Line-item tolerance (quantity x unit price vs. amount)
    - Total amount range

Author: ML Engineering Team
"""

from typing import Tuple

from config import get_config
from invoice_capture.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class LineItemValidator:
    """
    Validates candidate line items against the tolerance rule.

    An item with a known quantity and unit price is accepted only when
    |quantity x unit_price - amount| <= max(ratio x computed, floor).
    Items without a unit price have nothing to cross-check and pass.

    Attributes:
        tolerance_ratio: Relative tolerance (default 10%).
        tolerance_floor: Absolute tolerance in currency units (default 1.00).

    Example:
        >>> validator = LineItemValidator()
        >>> validator.validate(item)
        (True, "Amount within tolerance")
    """

    def __init__(
        self,
        tolerance_ratio: float = None,
        tolerance_floor: float = None
    ) -> None:
        """Initialize the validator; explicit arguments override configuration."""
        self.tolerance_ratio = tolerance_ratio if tolerance_ratio is not None else \
            get_config("extraction.line_items.tolerance_ratio", 0.10)
        self.tolerance_floor = tolerance_floor if tolerance_floor is not None else \
            get_config("extraction.line_items.tolerance_floor", 1.00)

    def tolerance(self, computed: float) -> float:
        """Allowed absolute deviation for a computed amount."""
        return max(self.tolerance_ratio * abs(computed), self.tolerance_floor)

    def validate(self, item) -> Tuple[bool, str]:
        """
        Validate a line item with detailed feedback.

        Args:
            item: LineItem to check.

        Returns:
            Tuple of (is_valid, message).
        """
        if item.amount < 0 or item.unit_price < 0 or item.quantity < 0:
            return False, "Negative quantity or money value"

        if item.quantity <= 0 or item.unit_price <= 0:
            return True, "No unit price to cross-check"

        computed = item.quantity * item.unit_price
        deviation = abs(computed - item.amount)
        allowed = self.tolerance(computed)

        if deviation > allowed:
            return False, (
                f"Amount {item.amount:.2f} deviates from "
                f"{item.quantity:g} x {item.unit_price:.2f} = {computed:.2f} "
                f"by {deviation:.2f} (allowed {allowed:.2f})"
            )

        return True, "Amount within tolerance"

    def is_valid(self, item) -> bool:
        """Check if a line item passes the tolerance rule."""
        valid, message = self.validate(item)
        if not valid:
            logger.debug(f"Discarding line item '{item.description}': {message}")
        return valid


class AmountValidator:
    """
    Validates document totals.

    Example:
        >>> AmountValidator().is_reasonable_total(3431.58)
        True
    """

    def __init__(self) -> None:
        """Initialize the amount validator."""
        self.max_amount = get_config("extraction.total.max_amount", 10000000)

    def is_reasonable_total(self, amount: float) -> bool:
        """A total must be positive and below the configured ceiling."""
        return 0 < amount < self.max_amount
