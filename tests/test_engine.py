"""Integration tests for the extraction engine.

Tests cover:
- Narrative invoices with a tabular line
- Terms-only documents and the no-data flag
- Strict mode
- Flattened spreadsheets and vendor remittances
- Documents acquired through injected collaborators
"""

import logging

import pytest

from invoice_capture import ExtractedRecord, ExtractionEngine
from invoice_capture.input_handler import PageText
from invoice_capture.utils.exceptions import (
    ExtractionError,
    NoDataExtractedError,
    ScannedDocumentUnreadableError,
    UnsupportedChannelError
)

from tests.fakes import FakeOCR, FakeRasterizer, FakeSpreadsheetReader, FakeTextReader


@pytest.fixture
def engine() -> ExtractionEngine:
    """Create an engine with default collaborators."""
    return ExtractionEngine()


def test_invoice_with_tabular_line(engine: ExtractionEngine) -> None:
    """Test identifier, one validated line item and the explicit total."""
    text = "Invoice 9165009\n10 EA STEEL SHEET 66.50 CW 665.00\nTotal $3,431.58\n"

    record = engine.extract_text(text)

    assert isinstance(record, ExtractedRecord)
    assert record.document_id == "9165009"
    assert len(record.line_items) == 1
    item = record.line_items[0]
    assert (item.quantity, item.unit_price, item.amount) == (10, 66.50, 665.00)
    assert record.total_amount == 3431.58
    assert record.total_derived is False
    assert record.description == "STEEL SHEET"


def test_terms_only(engine: ExtractionEngine) -> None:
    """Test that one header field is enough to count as data."""
    record = engine.extract_text("NET 30")

    assert record.terms == "NET 30"
    assert record.line_items == ()
    assert record.total_amount == 0
    assert record.no_data_extracted is False


def test_no_data_flagged(engine: ExtractionEngine, caplog: pytest.LogCaptureFixture) -> None:
    """Test that empty results are flagged and logged, not raised."""
    with caplog.at_level(logging.WARNING):
        record = engine.extract_text("hello there", source_file="note.txt")

    assert record.no_data_extracted is True
    assert record.missing_fields == list(ExtractedRecord.HEADER_FIELDS)
    assert "No invoice data extracted from note.txt" in caplog.text


def test_strict_mode_raises() -> None:
    """Test that strict mode turns empty results into an error."""
    engine = ExtractionEngine(strict=True)

    with pytest.raises(NoDataExtractedError) as exc_info:
        engine.extract_text("hello there", source_file="note.txt")

    assert isinstance(exc_info.value, ExtractionError)
    assert exc_info.value.details["source"] == "note.txt"


def test_narrative_invoice(engine: ExtractionEngine, invoice_text: str) -> None:
    """Test a full narrative invoice."""
    record = engine.extract_text(invoice_text)

    assert record.counterparty_name == "PACIFIC METALS SUPPLY"
    assert record.document_date == "2025-10-02"
    assert record.terms == "NET 30"
    assert record.template == "generic"
    assert record.acquisition_method == "raw"


def test_spreadsheet_remittance() -> None:
    """Test a flattened sheet with an invoice/amount/date header."""
    engine = ExtractionEngine(
        spreadsheet_reader=FakeSpreadsheetReader("Invoice,Amount,Date\nINV-1,$250.00,01/02/2024\n")
    )

    record = engine.extract_bytes(b"PK\x03\x04", "remit.xlsx")

    assert len(record.line_items) == 1
    item = record.line_items[0]
    assert item.reference == "INV-1"
    assert item.amount == 250.0
    assert item.date == "2024-01-02"
    assert record.total_amount == 250.0
    assert record.total_derived is True
    assert record.acquisition_method == "flattened"
    assert record.source_file == "remit.xlsx"


def test_turn5_remittance(engine: ExtractionEngine) -> None:
    """Test the Turn 5 remittance template."""
    text = (
        "Turn 5, Inc.\n"
        "Check Number 88123\n"
        "Date 03/15/2024\n"
        "10234 02/01/2024 500.00 10.00 490.00\n"
        "10235 02/03/2024 250.00 0.00 250.00\n"
        "Total 740.00\n"
    )

    record = engine.extract_text(text)

    assert record.template == "turn5"
    assert record.counterparty_name == "Turn 5, Inc."
    assert record.document_id == "88123"
    assert record.document_date == "2024-03-15"
    assert [item.reference for item in record.line_items] == ["10234", "10235"]
    assert record.total_amount == 740.0


def test_meyer_remittance(engine: ExtractionEngine) -> None:
    """Test the Meyer Distributing template and its co-op note."""
    text = (
        "MEYER DISTRIBUTING\n"
        "Payment Number EFT000000456789\n"
        "Payment Date\n"
        "Vendor 5521\n"
        "03/01/2024\n"
        "20511 01/15/2024 1,000.00 20.00 980.00\n"
        "Short pay for co-op advertising\n"
    )

    record = engine.extract_text(text)

    assert record.template == "meyer_distributing"
    assert record.counterparty_name == "Meyer Distributing"
    assert record.document_id == "EFT000000456789"
    assert record.document_date == "2024-03-01"
    assert record.line_items[0].amount == 980.0
    assert record.notes == ("Short pay for co-op advertising",)
    assert record.total_amount == 980.0


def test_orw_remittance(engine: ExtractionEngine) -> None:
    """Test the ORW USA template."""
    text = (
        "ORW USA, Inc.\n"
        "51207 03/08/24\n"
        "40123 03/05/24 1,200.00 24.00 6.00 1,170.00\n"
    )

    record = engine.extract_text(text)

    assert record.template == "orw_usa"
    assert record.document_id == "51207"
    assert record.document_date == "2024-03-08"
    assert record.line_items[0].discount == 30.0
    assert record.total_amount == 1170.0


def test_scanned_pdf_via_ocr() -> None:
    """Test a scanned PDF acquired through the OCR collaborator."""
    engine = ExtractionEngine(
        text_reader=FakeTextReader([PageText("", 0)]),
        rasterizer=FakeRasterizer(page_count=1),
        ocr_engine=FakeOCR(["Invoice 9165009\nTotal $3,431.58"])
    )

    record = engine.extract_bytes(b"%PDF-1.4", "scan.pdf")

    assert record.acquisition_method == "ocr"
    assert record.document_id == "9165009"
    assert record.total_amount == 3431.58


def test_unreadable_scan_propagates() -> None:
    """Test that unreadable scans are not reported as empty records."""
    engine = ExtractionEngine(
        text_reader=FakeTextReader([PageText("", 0)]),
        rasterizer=FakeRasterizer(page_count=1),
        ocr_engine=FakeOCR([""])
    )

    with pytest.raises(ScannedDocumentUnreadableError):
        engine.extract_bytes(b"%PDF-1.4", "scan.pdf")


def test_unsupported_upload(engine: ExtractionEngine) -> None:
    """Test that unsupported files fail before acquisition."""
    with pytest.raises(UnsupportedChannelError):
        engine.extract_bytes(b"data", "contract.docx")


def test_extract_file(engine: ExtractionEngine, tmp_path) -> None:
    """Test extraction from a file on disk."""
    path = tmp_path / "remit.csv"
    path.write_text("Doc No,Gross,Discount,Net Paid\n55501,100.00,2.00,98.00\n")

    record = engine.extract_file(path)

    assert record.line_items[0].amount == 98.0
    assert record.source_file == "remit.csv"


def test_engine_is_reusable(engine: ExtractionEngine) -> None:
    """Test that documents do not share state."""
    first = engine.extract_text("Invoice 9165009\nTotal $10.00")
    second = engine.extract_text("NET 30")

    assert first.document_id == "9165009"
    assert second.document_id == ""
    assert second.total_amount == 0.0


def test_ocr_backend_outage_is_extraction_error() -> None:
    """Test that collaborator failures keep the ExtractionError contract."""
    engine = ExtractionEngine(
        text_reader=FakeTextReader([PageText("", 0)]),
        rasterizer=FakeRasterizer(page_count=1),
        ocr_engine=FakeOCR([ConnectionError("ocr backend down")])
    )

    with pytest.raises(ScannedDocumentUnreadableError) as exc_info:
        engine.extract_bytes(b"%PDF-1.4", "scan.pdf")

    assert isinstance(exc_info.value, ExtractionError)
