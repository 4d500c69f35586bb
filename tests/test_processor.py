"""Unit tests for the result aggregator and the record types.

Tests cover:
- Total derivation from line items
- Description fallback
- No-data flag
- Record serialization
"""

import json

import pytest

from invoice_capture.extraction import ExtractedRecord, LineItem
from invoice_capture.input_handler import AcquiredText, AcquisitionMethod
from invoice_capture.postprocessor import PostProcessor


@pytest.fixture
def processor() -> PostProcessor:
    """Create a post-processor."""
    return PostProcessor()


@pytest.fixture
def items() -> list:
    """Two line items totalling 915.00."""
    return [
        LineItem(quantity=10, description="STEEL SHEET " * 12, unit_price=66.5, amount=665.0),
        LineItem(quantity=1, description="Freight", unit_price=250.0, amount=250.0),
    ]


def test_explicit_total_kept(processor: PostProcessor, items: list) -> None:
    """Test that a found total is never overwritten."""
    record = processor.aggregate({'total_amount': 3431.58}, items)

    assert record.total_amount == 3431.58
    assert record.total_derived is False


def test_total_derived_from_items(processor: PostProcessor, items: list) -> None:
    """Test that the item sum stands in for a missing total."""
    record = processor.aggregate({'total_amount': 0.0}, items)

    assert record.total_amount == 915.0
    assert record.total_derived is True
    assert record.line_item_total == 915.0


def test_description_from_first_item(processor: PostProcessor, items: list) -> None:
    """Test the description fallback and its length limit."""
    record = processor.aggregate({}, items)

    assert record.description == items[0].description[:100]
    assert len(record.description) == 100


def test_description_label_preferred(processor: PostProcessor, items: list) -> None:
    """Test that a labelled description wins over the first item."""
    record = processor.aggregate({'description': "March order"}, items)

    assert record.description == "March order"


def test_no_data(processor: PostProcessor) -> None:
    """Test the no-data flag."""
    assert processor.aggregate({}, []).no_data_extracted is True
    assert processor.aggregate({'terms': "NET 30"}, []).no_data_extracted is False
    assert processor.aggregate({'total_amount': 12.0}, []).no_data_extracted is False


def test_metadata(processor: PostProcessor) -> None:
    """Test template, acquisition method and notes."""
    acquired = AcquiredText(content="x", acquisition_method=AcquisitionMethod.OCR)

    record = processor.aggregate(
        {'notes': ["PO: 4471"]}, [], template_name="turn5", acquired=acquired, source_file="a.pdf"
    )

    assert record.template == "turn5"
    assert record.acquisition_method == "ocr"
    assert record.source_file == "a.pdf"
    assert record.notes == ("PO: 4471",)


def test_missing_fields_are_empty_strings(processor: PostProcessor) -> None:
    """Test that absent header fields are "" rather than None."""
    record = processor.aggregate({'document_id': None}, [])

    assert record.document_id == ""
    assert all(value == "" for value in record.fields.values())


class TestExtractedRecord:
    """Record serialization."""

    @pytest.fixture
    def record(self, items: list) -> ExtractedRecord:
        """A complete record."""
        return ExtractedRecord(
            counterparty_name="Turn 5, Inc.",
            document_id="88123",
            terms="NET 30",
            line_items=tuple(items),
            total_amount=915.0,
            notes=("PO: 4471", "call first"),
        )

    def test_to_json(self, record: ExtractedRecord) -> None:
        """Test JSON output."""
        data = json.loads(record.to_json())

        assert data['document_id'] == "88123"
        assert data['line_items'][1]['amount'] == 250.0
        assert data['notes'] == ["PO: 4471", "call first"]

    def test_from_dict(self, record: ExtractedRecord) -> None:
        """Test that from_dict rebuilds an equal record."""
        assert ExtractedRecord.from_dict(record.to_dict()) == record

    def test_flat_dict(self, record: ExtractedRecord) -> None:
        """Test the spreadsheet row layout."""
        flat = record.to_flat_dict()

        assert flat['line_item_count'] == 2
        assert flat['notes'] == "PO: 4471; call first"
        assert 'line_items' not in flat

    def test_missing_fields(self, record: ExtractedRecord) -> None:
        """Test the list of unextracted header fields."""
        assert record.missing_fields == ['document_date', 'due_date', 'description']
