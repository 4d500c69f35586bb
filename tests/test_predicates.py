"""Unit tests for the named extraction predicates.

Tests cover:
- Identifier shape checks (dates, years, length, digits)
- Address block and address line detection
- Counterparty blacklist, entity suffix and heading checks
- Header/footer and product line classification
"""

import pytest

from invoice_capture.extraction.predicates import (
    has_digit,
    has_entity_suffix,
    in_address_block,
    is_blacklisted_counterparty,
    is_header_or_footer,
    is_valid_identifier_length,
    looks_like_address_line,
    looks_like_bare_year,
    looks_like_company_heading,
    looks_like_date,
    looks_like_product_line
)


@pytest.mark.parametrize("value", ["12/31/2025", "1-2", "2025-12-31", "03.05.24"])
def test_looks_like_date(value: str) -> None:
    """Test that date-shaped values are recognized."""
    assert looks_like_date(value)


@pytest.mark.parametrize("value", ["INV-20931", "9165009", "12/31/2025 A"])
def test_not_date(value: str) -> None:
    """Test that identifiers are not mistaken for dates."""
    assert not looks_like_date(value)


def test_identifier_checks() -> None:
    """Test bare year, length and digit checks."""
    assert looks_like_bare_year("2025")
    assert not looks_like_bare_year("20251")
    assert is_valid_identifier_length("A123")
    assert not is_valid_identifier_length("A12")
    assert not is_valid_identifier_length("X" * 31)
    assert has_digit("INV-1")
    assert not has_digit("INVOICE")


def test_in_address_block() -> None:
    """Test that the label line and the two lines after it are an address block."""
    text = (
        "Acme Fabrication, Inc.\n"
        "Bill To:\n"
        "GLOBEX HOLDINGS LLC\n"
        "42 Harbor Road\n"
        "Invoice Number: INV-20931\n"
    )

    assert in_address_block(text, text.index("GLOBEX"))
    assert in_address_block(text, text.index("42 Harbor"))
    assert not in_address_block(text, text.index("Acme"))
    assert not in_address_block(text, text.index("INV-20931"))


@pytest.mark.parametrize(
    "line",
    ["123 Main Street", "Denver, CO 80202", "P.O. Box 1190", "Portland, OR 97201-1234"],
)
def test_looks_like_address_line(line: str) -> None:
    """Test street, PO box and city/state/zip lines."""
    assert looks_like_address_line(line)


def test_blacklisted_counterparty() -> None:
    """Test that form labels are never taken for a company name."""
    assert is_blacklisted_counterparty("INVOICE SUMMARY")
    assert is_blacklisted_counterparty("Bill  To")
    assert is_blacklisted_counterparty("REMITTANCE ADVICE")
    assert not is_blacklisted_counterparty("ACME FABRICATION SUPPLY")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Acme Fabrication, Inc.", True),
        ("Globex Holdings LLC", True),
        ("Initech Corp", True),
        ("Acme Fabrication", False),
        ("Incoming freight", False),
    ],
)
def test_has_entity_suffix(value: str, expected: bool) -> None:
    """Test legal-entity suffix detection."""
    assert has_entity_suffix(value) is expected


@pytest.mark.parametrize(
    "line, expected",
    [
        ("PACIFIC STEEL & RECYCLING", True),
        ("ACME FABRICATION SUPPLY", True),
        ("INVOICE", False),
        ("ACME", False),
        ("Acme Fabrication Supply", False),
        ("UNIT 4 BLDG 12 DOCK 7", False),
        ("A" * 30 + " " + "B" * 31, False),
    ],
)
def test_looks_like_company_heading(line: str, expected: bool) -> None:
    """Test the all-caps heading shape."""
    assert looks_like_company_heading(line) is expected


@pytest.mark.parametrize(
    "line",
    ["Description Qty Amount", "Subtotal 120.00", "Invoice Total: 3,431.58", "Page 2 of 3",
     "Balance due 10.00", "Thank you for your business"],
)
def test_is_header_or_footer(line: str) -> None:
    """Test that headers, totals and page furniture are excluded."""
    assert is_header_or_footer(line)


@pytest.mark.parametrize("line", ["10 EA STEEL SHEET 66.50 CW 665.00", "Invoices paid in full"])
def test_is_not_header_or_footer(line: str) -> None:
    """Test that table rows are kept."""
    assert not is_header_or_footer(line)


def test_looks_like_product_line() -> None:
    """Test product-word lines."""
    assert looks_like_product_line("Freight surcharge")
    assert looks_like_product_line("Steel plate 1/4in")
    assert not looks_like_product_line("Total freight")
    assert not looks_like_product_line("Kit")
    assert not looks_like_product_line("Hello world")
