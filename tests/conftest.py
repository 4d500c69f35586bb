"""Shared fixtures for the invoice capture test suite."""

import logging
from typing import Iterator

import pytest

from config import ConfigurationManager
from invoice_capture.input_handler import PageText
from invoice_capture.utils.logger import LOGGER_NAMESPACE


@pytest.fixture(autouse=True)
def reset_state() -> Iterator[None]:
    """Give every test the default settings and a propagating logger."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()

    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture
def text_layer_page() -> PageText:
    """A digital PDF page with a healthy text layer."""
    text = "Invoice 9165009\n10 EA STEEL SHEET 66.50 CW 665.00\nTotal $3,431.58"
    return PageText(text=text, fragment_count=len(text.split()))


@pytest.fixture
def invoice_text() -> str:
    """Narrative invoice with a tabular line and an explicit total."""
    return (
        "PACIFIC METALS SUPPLY\n"
        "Invoice 9165009\n"
        "Invoice Date: 10/02/2025\n"
        "Terms: Net 30\n"
        "10 EA STEEL SHEET 66.50 CW 665.00\n"
        "Subtotal: $3,180.00\n"
        "Total $3,431.58\n"
    )
