"""Unit tests for header field extraction.

Tests cover:
- Terms canonicalization
- Counterparty cascade (known names, entity suffixes, headings, labels)
- Document id, dates and totals with their reject rules
- Notes collection
"""

import pytest

from invoice_capture.extraction import FIELD_NAMES, FieldExtractor, GENERIC_TEMPLATE
from invoice_capture.extraction.fields import canonicalize_terms, clean_name, normalize_total


@pytest.fixture
def extractor() -> FieldExtractor:
    """Create a field extractor."""
    return FieldExtractor()


def extract(extractor: FieldExtractor, text: str) -> dict:
    return extractor.extract(text, GENERIC_TEMPLATE)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("net30", "NET 30"),
        ("Net 30 Days", "NET 30 DAYS"),
        ("NET 045", "NET 45"),
        ("c.o.d", "C.O.D."),
        ("COD", "C.O.D."),
        ("due upon receipt", "Due upon receipt"),
        ("Due on Receipt", "Due on receipt"),
        ("net", ""),
    ],
)
def test_canonicalize_terms(raw: str, expected: str) -> None:
    """Test that terms map onto one spelling."""
    assert canonicalize_terms(raw) == expected


def test_clean_name_strips_label() -> None:
    """Test that labels and separators are removed from names."""
    assert clean_name("Bill From:   Acme   Supply,") == "Acme Supply"


def test_normalize_total_range() -> None:
    """Test the plausible total range."""
    assert normalize_total("$3,431.58") == "3431.58"
    assert normalize_total("0.00") == ""
    assert normalize_total("99,999,999.00") == ""


def test_every_field_present(extractor: FieldExtractor) -> None:
    """Test that missing fields default to empty values."""
    fields = extract(extractor, "")

    assert set(fields) == set(FIELD_NAMES)
    assert fields['total_amount'] == 0.0
    assert fields['notes'] == []
    assert fields['document_id'] == ""


def test_terms_only(extractor: FieldExtractor) -> None:
    """Test that a lone terms phrase is found."""
    fields = extract(extractor, "NET 30")

    assert fields['terms'] == "NET 30"
    assert fields['counterparty_name'] == ""
    assert fields['total_amount'] == 0.0


def test_narrative_invoice_fields(extractor: FieldExtractor, invoice_text: str) -> None:
    """Test header fields of a narrative invoice."""
    fields = extract(extractor, invoice_text)

    assert fields['counterparty_name'] == "PACIFIC METALS SUPPLY"
    assert fields['document_id'] == "9165009"
    assert fields['document_date'] == "2025-10-02"
    assert fields['terms'] == "NET 30"
    assert fields['total_amount'] == 3431.58


class TestCounterparty:
    """Counterparty cascade."""

    def test_known_name_wins(self, extractor: FieldExtractor) -> None:
        """Test that known vendors are matched anywhere in the text."""
        text = "GLOBEX HOLDINGS\nRemit payment to Pacific Steel and Recycling"

        assert extract(extractor, text)['counterparty_name'] == "Pacific Steel & Recycling"

    def test_entity_suffix_before_heading(self, extractor: FieldExtractor) -> None:
        """Test that a suffixed name outranks an all-caps heading."""
        text = "NORTHWIND SERVICES DIVISION\nAcme Fabrication, Inc.\n123 Main Street"

        assert extract(extractor, text)['counterparty_name'] == "Acme Fabrication, Inc."

    def test_address_block_and_lines_rejected(self, extractor: FieldExtractor) -> None:
        """Test that bill-to names and city lines are skipped."""
        text = (
            "ACME FABRICATION SUPPLY\n"
            "123 Main Street\n"
            "Denver, CO 80202\n"
            "Bill To:\n"
            "Globex Holdings LLC\n"
            "Invoice Number: INV-20931\n"
        )

        assert extract(extractor, text)['counterparty_name'] == "ACME FABRICATION SUPPLY"

    def test_blacklisted_heading_skipped(self, extractor: FieldExtractor) -> None:
        """Test that form headings are not names."""
        text = "REMITTANCE ADVICE SUMMARY\nNORTHWIND TRADING GROUP\n"

        assert extract(extractor, text)['counterparty_name'] == "NORTHWIND TRADING GROUP"

    def test_labelled_name(self, extractor: FieldExtractor) -> None:
        """Test the labelled fallback."""
        text = "statement of account\nvendor: Northwind Traders\n"

        assert extract(extractor, text)['counterparty_name'] == "Northwind Traders"


class TestDocumentId:
    """Document identifier rules."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Invoice 9165009", "9165009"),
            ("Invoice Number: INV-20931", "INV-20931"),
            ("Invoice # A-55120", "A-55120"),
            ("Payment ref\nINV20931 paid", "INV20931"),
            ("Check Number 88123", "88123"),
            ("Payment EFT000123456789", "EFT000123456789"),
        ],
    )
    def test_identifier_patterns(self, extractor: FieldExtractor, text: str, expected: str) -> None:
        """Test identifier layouts."""
        assert extract(extractor, text)['document_id'] == expected

    def test_dates_and_years_rejected(self, extractor: FieldExtractor) -> None:
        """Test that a date or bare year is never an identifier."""
        assert extract(extractor, "Invoice # 2024")['document_id'] == ""
        assert extract(extractor, "Invoice No: 12/31/2025")['document_id'] == ""


class TestDatesAndTotals:
    """Date and total rules."""

    def test_invoice_and_due_dates(self, extractor: FieldExtractor) -> None:
        """Test that the due date is not taken as the document date."""
        fields = extract(extractor, "Invoice Date: 01/15/2024\nDue Date: 02/14/2024")

        assert fields['document_date'] == "2024-01-15"
        assert fields['due_date'] == "2024-02-14"

    def test_due_date_alone(self, extractor: FieldExtractor) -> None:
        """Test that "Due Date" does not satisfy the plain date rule."""
        fields = extract(extractor, "Due Date: 02/14/2024")

        assert fields['document_date'] == ""
        assert fields['due_date'] == "2024-02-14"

    def test_invalid_date_skipped(self, extractor: FieldExtractor) -> None:
        """Test that an impossible labelled date is rejected."""
        fields = extract(extractor, "Invoice Date: 13/45/99\nDate: 2 October 2025")

        assert fields['document_date'] == "2025-10-02"

    def test_subtotal_is_not_total(self, extractor: FieldExtractor) -> None:
        """Test that subtotals are skipped."""
        fields = extract(extractor, "Subtotal: $100.00\nSales tax 8.25\nTotal: $108.25")

        assert fields['total_amount'] == 108.25

    def test_grand_total_first(self, extractor: FieldExtractor) -> None:
        """Test that a grand total outranks other totals."""
        fields = extract(extractor, "Total USD 50.00\nGrand Total: $1,250.00")

        assert fields['total_amount'] == 1250.0

    def test_amount_due(self, extractor: FieldExtractor) -> None:
        """Test the amount-due rule."""
        assert extract(extractor, "Amount Due: $75.10")['total_amount'] == 75.10


def test_notes_collects_po_and_remarks(extractor: FieldExtractor) -> None:
    """Test PO numbers and free-text notes."""
    text = "Customer PO: 44871\nNotes: deliver to dock 4 before noon\nPO# 44871"

    assert extract(extractor, text)['notes'] == ["PO: 44871", "deliver to dock 4 before noon"]


def test_description_label(extractor: FieldExtractor) -> None:
    """Test description labels."""
    assert extract(extractor, "Memo: March steel order")['description'] == "March steel order"
    assert extract(extractor, "Re: ok")['description'] == ""
