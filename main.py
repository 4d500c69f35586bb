#!/usr/bin/env python3
"""
Invoice Capture Engine - Main Entry Point.

Command-line interface and programmatic access to the capture
pipeline. Every input document becomes one ExtractedRecord; the records
are written as XLSX, CSV or JSON according to the output suffix.

Usage:
    Command Line:
        python main.py --input invoice.pdf --output results.xlsx
        python main.py --input ./remittances/ --output results.json --strict

    Python:
        from main import run_extraction
        records = run_extraction("invoice.pdf")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager
from invoice_capture.utils.logger import LOGGER_NAMESPACE, get_logger, setup_logger_from_config
from invoice_capture.utils.exceptions import (
    ExtractionError,
    ScannedDocumentUnreadableError,
    UnsupportedChannelError
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNREADABLE = 2
EXIT_INTERRUPTED = 130


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice and remittance capture engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process single invoice:
        python main.py --input invoice.pdf --output results.xlsx

    Process directory:
        python main.py --input ./invoices/ --output results.csv

    Fail when a document yields no data:
        python main.py --input remittance.eml --strict
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input file or directory containing invoices"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default="outputs/extraction_results.xlsx",
        help="Output file (.xlsx, .csv or .json) or directory"
    )

    # Processing options
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat documents with no extracted data as errors"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress console output"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config(quiet=args.quiet)
    if args.debug:
        logging.getLogger(LOGGER_NAMESPACE).setLevel(logging.DEBUG)

    logger.info("=" * 60)
    logger.info("INVOICE CAPTURE ENGINE")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output}")

    return config


def collect_inputs(input_path: str) -> List[Path]:
    """
    List the documents to process.

    Raises:
        FileNotFoundError: If the input path does not exist.
    """
    from invoice_capture.input_handler import InputHandler

    path = Path(input_path)
    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {path}")

    if path.is_file():
        return [path]
    return InputHandler().load_batch(path)


def run_extraction(
    input_path: str,
    output_path: Optional[str] = None,
    config_path: Optional[str] = None,
    strict: Optional[bool] = None
) -> list:
    """
    Run the capture pipeline over a file or directory.

    Documents that fail are logged and skipped when a directory is
    processed; a single input file propagates its error.

    Args:
        input_path: Path to input file or directory.
        output_path: Output file or directory; nothing is written if None.
        config_path: Optional custom configuration file path.
        strict: Override for `extraction.strict`.

    Returns:
        List of ExtractedRecord objects.

    Example:
        >>> records = run_extraction("invoices/", "outputs/results.json")
        >>> for record in records:
        ...     print(record.document_id)
    """
    logger = get_logger(__name__)

    if config_path:
        ConfigurationManager(config_path)

    # Import pipeline components
    from invoice_capture.engine import ExtractionEngine
    from invoice_capture.output_handler import OutputHandler

    engine = ExtractionEngine(strict=strict)
    files = collect_inputs(input_path)
    single = Path(input_path).is_file()

    logger.info(f"Processing {len(files)} file(s)...")

    records = []
    for file_path in files:
        try:
            record = engine.extract_file(file_path)
        except ExtractionError as e:
            if single:
                raise
            logger.error(f"Error processing {file_path.name}: {e}")
            continue

        records.append(record)
        logger.info(
            f"  Extracted: {record.document_id or 'N/A'} from "
            f"{record.counterparty_name or 'unknown counterparty'}, "
            f"{len(record.line_items)} item(s), total {record.total_amount:.2f}"
        )

    if records and output_path:
        saved = OutputHandler().save(records, output_path)
        logger.info(f"Output written: {saved}")

    return records


def _report(error: ExtractionError) -> None:
    """Print an error and its remediation hints to stderr."""
    print(f"Error: {error}", file=sys.stderr)
    for suggestion in error.suggestions:
        print(f"  - {suggestion}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code: 0 success, 1 error, 2 unsupported or unreadable
        document, 130 interrupted.
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        records = run_extraction(
            input_path=args.input,
            output_path=args.output,
            strict=True if args.strict else None
        )

        if not records:
            logger.error("No documents were extracted")
            return EXIT_ERROR

        logger.info("=" * 60)
        logger.info(f"Extraction complete. {len(records)} record(s).")
        logger.info("=" * 60)
        return EXIT_OK

    except (UnsupportedChannelError, ScannedDocumentUnreadableError) as e:
        _report(e)
        return EXIT_UNREADABLE

    except ExtractionError as e:
        _report(e)
        return EXIT_ERROR

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return EXIT_INTERRUPTED

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if "--debug" in (argv if argv is not None else sys.argv):
            import traceback
            traceback.print_exc()
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
