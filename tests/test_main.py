"""Unit tests for the command-line entry point.

Tests cover:
- Argument parsing
- Exit codes for success, errors and unreadable documents
- Directory processing that skips failing files
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

import main as cli


@pytest.fixture
def remittance_csv(tmp_path: Path) -> Path:
    """A flattened remittance sheet."""
    path = tmp_path / "remit.csv"
    path.write_text("Invoice,Amount,Date\nINV-1,$250.00,01/02/2024\n", encoding='utf-8')
    return path


def test_parse_arguments() -> None:
    """Test defaults and flags."""
    args = cli.parse_arguments(["--input", "a.pdf", "--strict", "-q"])

    assert args.input == "a.pdf"
    assert args.output.endswith(".xlsx")
    assert args.strict is True
    assert args.quiet is True
    assert args.debug is False


def test_input_required() -> None:
    """Test that --input is mandatory."""
    with pytest.raises(SystemExit):
        cli.parse_arguments([])


def test_success(remittance_csv: Path, tmp_path: Path) -> None:
    """Test a single spreadsheet written as JSON."""
    output = tmp_path / "out" / "records.json"

    code = cli.main(["-i", str(remittance_csv), "-o", str(output), "-q"])

    assert code == cli.EXIT_OK
    data = json.loads(output.read_text(encoding='utf-8'))
    assert data[0]['line_items'][0]['reference'] == "INV-1"


def test_missing_input(tmp_path: Path) -> None:
    """Test that a missing path is an error."""
    code = cli.main(["-i", str(tmp_path / "absent.pdf"), "-q"])

    assert code == cli.EXIT_ERROR


def test_unsupported_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    """Test that unsupported documents get their own exit code and hints."""
    path = tmp_path / "contract.docx"
    path.write_bytes(b"PK\x03\x04 word")

    code = cli.main(["-i", str(path), "-o", str(tmp_path / "out.json"), "-q"])

    assert code == cli.EXIT_UNREADABLE
    assert "Convert the document to PDF" in capsys.readouterr().err


def test_strict_no_data(tmp_path: Path) -> None:
    """Test that strict mode fails a document without data."""
    path = tmp_path / "note.txt"
    path.write_text("hello there", encoding='utf-8')

    code = cli.main(["-i", str(path), "-o", str(tmp_path / "out.json"), "--strict", "-q"])

    assert code == cli.EXIT_ERROR


def test_directory_skips_failures(remittance_csv: Path, tmp_path: Path) -> None:
    """Test that one bad file does not stop a directory run."""
    (tmp_path / "broken.pdf").write_bytes(b"not a pdf")
    output = tmp_path / "records.csv"

    records = cli.run_extraction(str(tmp_path), str(output))

    assert [record.source_file for record in records] == ["remit.csv"]
    assert output.exists()


def test_interrupted(remittance_csv: Path) -> None:
    """Test the exit code for Ctrl-C."""
    with patch.object(cli, 'run_extraction', side_effect=KeyboardInterrupt):
        code = cli.main(["-i", str(remittance_csv), "-q"])

    assert code == cli.EXIT_INTERRUPTED
