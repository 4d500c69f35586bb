"""
Pattern Rules Module.

Declarative field rules and the single dispatcher that evaluates them.

A PatternRule pairs a regular expression with reject predicates and an
optional normalizer. `apply_rules()` walks rules in ascending priority
and returns the first candidate that survives; every match of a rule is
tried before the next rule is consulted.

Usage:
    from invoice_capture.extraction.rules import rule, apply_rules

    rules = (
        rule(10, r'invoice\\s+(\\d{7,9})'),
        rule(20, r'INV-?\\d{5,}', group=0),
    )
    apply_rules("Invoice 9165009", rules)   # "9165009"

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Pattern, Tuple

from invoice_capture.utils.logger import get_logger
from .predicates import in_address_block

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_FLAGS = re.IGNORECASE | re.MULTILINE


@dataclass(frozen=True)
class Candidate:
    """
    One regex match offered to a rule's reject predicates.

    Attributes:
        value: Captured text
        text: The full text that was searched
        start: Offset of the capture within text
        line: The stripped line holding the capture
    """
    value: str
    text: str
    start: int
    line: str


Predicate = Callable[[Candidate], bool]


@dataclass(frozen=True)
class PatternRule:
    """
    A single prioritized extraction rule.

    Attributes:
        priority: Lower runs first
        pattern: Compiled regex with the value in `group`
        reject: Predicates; any returning True discards the candidate
        group: Capture group holding the value (0 = whole match)
        normalize: Transforms the captured value; "" rejects it
        constant: Fixed value returned whenever the pattern matches
        line_scope: Only the first N non-blank lines are searched, one
            line at a time
        label: Short name used in debug logs
    """
    priority: int
    pattern: Pattern
    reject: Tuple[Predicate, ...] = ()
    group: int = 1
    normalize: Optional[Callable[[str], str]] = None
    constant: Optional[str] = None
    line_scope: Optional[int] = None
    label: str = ""

    def candidates(self, text: str) -> Iterator[Candidate]:
        """Yield every match of the pattern, in document order."""
        if self.line_scope is None:
            for match in self.pattern.finditer(text):
                value = match.group(self.group)
                if value is None:
                    continue
                start = match.start(self.group)
                line_start = text.rfind('\n', 0, start) + 1
                line_end = text.find('\n', start)
                line = text[line_start:line_end if line_end >= 0 else len(text)]
                yield Candidate(value, text, start, line.strip())
            return

        offset = 0
        seen = 0
        for raw_line in text.split('\n'):
            line = raw_line.strip()
            line_offset = offset + (len(raw_line) - len(raw_line.lstrip()))
            offset += len(raw_line) + 1

            if not line:
                continue
            seen += 1
            if seen > self.line_scope:
                break

            for match in self.pattern.finditer(line):
                value = match.group(self.group)
                if value is not None:
                    yield Candidate(value, text, line_offset + match.start(self.group), line)

    def evaluate(self, candidate: Candidate) -> str:
        """
        Turn a candidate into a field value.

        Returns:
            The accepted value, or "" when the candidate is rejected.
        """
        for predicate in self.reject:
            if predicate(candidate):
                return ""

        value = self.constant if self.constant is not None else candidate.value.strip()
        if self.normalize is not None:
            value = self.normalize(value)
        return value or ""


def rule(
    priority: int,
    pattern: str,
    *,
    flags: int = DEFAULT_FLAGS,
    reject: Iterable[Predicate] = (),
    group: int = 1,
    normalize: Optional[Callable[[str], str]] = None,
    constant: Optional[str] = None,
    line_scope: Optional[int] = None,
    label: str = ""
) -> PatternRule:
    """Build a PatternRule, compiling the pattern (case-insensitive by default)."""
    return PatternRule(
        priority=priority,
        pattern=re.compile(pattern, flags),
        reject=tuple(reject),
        group=group,
        normalize=normalize,
        constant=constant,
        line_scope=line_scope,
        label=label or pattern[:40]
    )


def apply_rules(text: str, rules: Iterable[PatternRule]) -> str:
    """
    Evaluate rules in ascending priority; first accepted value wins.

    Args:
        text: Document text.
        rules: Rules for one field.

    Returns:
        The winning value, or "" when no rule produces one.
    """
    for pattern_rule in sorted(rules, key=lambda r: r.priority):
        for candidate in pattern_rule.candidates(text):
            value = pattern_rule.evaluate(candidate)
            if value:
                logger.debug(f"Rule '{pattern_rule.label}' matched: {value!r}")
                return value
    return ""


def collect_all(text: str, rules: Iterable[PatternRule]) -> List[str]:
    """Every accepted value of every rule, in priority order, without repeats."""
    values = []
    for pattern_rule in sorted(rules, key=lambda r: r.priority):
        for candidate in pattern_rule.candidates(text):
            value = pattern_rule.evaluate(candidate)
            if value and value not in values:
                values.append(value)
    return values


# =============================================================================
# REJECT PREDICATE ADAPTERS
# =============================================================================

def value_is(check: Callable[[str], bool]) -> Predicate:
    """Reject when `check(value)` holds."""
    def predicate(candidate: Candidate) -> bool:
        return check(candidate.value.strip())
    predicate.__name__ = check.__name__
    return predicate


def value_is_not(check: Callable[[str], bool]) -> Predicate:
    """Reject unless `check(value)` holds."""
    def predicate(candidate: Candidate) -> bool:
        return not check(candidate.value.strip())
    predicate.__name__ = f"not_{check.__name__}"
    return predicate


def in_address(candidate: Candidate) -> bool:
    """Reject candidates found inside a bill-to/ship-to block."""
    return in_address_block(candidate.text, candidate.start)
