"""Unit tests for pattern rules and the rule dispatcher.

Tests cover:
- Priority ordering
- Reject predicates trying every match
- Constants, normalizers and whole-match groups
- Line-scoped rules
- Collecting every accepted value
"""

import re

from invoice_capture.extraction.rules import (
    apply_rules,
    collect_all,
    in_address,
    rule,
    value_is,
    value_is_not
)


def test_lower_priority_runs_first() -> None:
    """Test that rules are evaluated by ascending priority, not list order."""
    rules = (
        rule(20, r'(\d{3})'),
        rule(10, r'\bid\s+(\w+)'),
    )

    assert apply_rules("id abc 123", rules) == "abc"


def test_reject_moves_to_next_match() -> None:
    """Test that a rejected candidate does not stop the rule."""
    rules = (rule(10, r'(\d{4})', reject=(value_is(lambda value: value == "2025"),)),)

    assert apply_rules("Issued 2025, ref 4411", rules) == "4411"


def test_reject_falls_through_to_next_rule() -> None:
    """Test that a fully rejected rule hands over to the next one."""
    rules = (
        rule(10, r'number\s+(\w+)', reject=(value_is_not(lambda value: value.isdigit()),)),
        rule(20, r'ref\s+(\S+)'),
    )

    assert apply_rules("number ABC ref R-1", rules) == "R-1"


def test_constant_and_whole_match() -> None:
    """Test that a constant replaces the matched text."""
    rules = (rule(10, r'\bturn\s+5\b', group=0, constant="Turn 5, Inc."),)

    assert apply_rules("Paid by TURN 5 today", rules) == "Turn 5, Inc."


def test_normalizer_can_reject() -> None:
    """Test that an empty normalized value counts as a rejection."""
    rules = (
        rule(10, r'(\w+)', normalize=lambda value: value.upper() if value.isdigit() else ""),
    )

    assert apply_rules("alpha beta 77", rules) == "77"
    assert apply_rules("alpha beta", rules) == ""


def test_case_sensitive_flags() -> None:
    """Test that explicit flags override the case-insensitive default."""
    rules = (rule(10, r'\b([A-Z]{3}\d{3})\b', flags=re.MULTILINE),)

    assert apply_rules("abc123 XYZ789", rules) == "XYZ789"


def test_line_scope_limits_search() -> None:
    """Test that line-scoped rules only see the first non-blank lines."""
    text = "first\n\nsecond\nACME CORP\n"

    assert apply_rules(text, (rule(10, r'^(ACME.*)$', line_scope=2),)) == ""
    assert apply_rules(text, (rule(10, r'^(ACME.*)$', line_scope=3),)) == "ACME CORP"


def test_line_scope_offsets_point_into_text() -> None:
    """Test that line-scoped candidates carry offsets into the full text."""
    text = "Bill To:\n  GLOBEX HOLDINGS\n12 Dock Rd\nPortland\nACME SUPPLY"
    scoped = rule(10, r'^([A-Z ]+)$', flags=re.MULTILINE, line_scope=5, reject=(in_address,))

    candidates = list(scoped.candidates(text))

    assert [candidate.value for candidate in candidates] == ["GLOBEX HOLDINGS", "ACME SUPPLY"]
    assert text[candidates[0].start:].startswith("GLOBEX")
    assert apply_rules(text, (scoped,)) == "ACME SUPPLY"


def test_candidate_line_is_stripped_line() -> None:
    """Test that a candidate knows the line it came from."""
    text = "header\n   Total due 12.00  \n"
    candidate = next(rule(10, r'total\s+due\s+([\d.]+)').candidates(text))

    assert candidate.line == "Total due 12.00"
    assert candidate.value == "12.00"


def test_collect_all_deduplicates_in_priority_order() -> None:
    """Test that every accepted value is returned once."""
    rules = (
        rule(20, r'note:\s*(.+)$'),
        rule(10, r'PO\s+(\d+)', normalize=lambda value: f"PO: {value}"),
    )
    text = "PO 4471\nnote: call first\nPO 4471\nPO 5512"

    assert collect_all(text, rules) == ["PO: 4471", "PO: 5512", "call first"]


def test_no_match_returns_empty() -> None:
    """Test that a missing field is the empty string."""
    assert apply_rules("nothing here", (rule(10, r'invoice\s+(\d+)'),)) == ""
