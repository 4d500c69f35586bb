"""
Utility Module for the Invoice Capture Engine.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and text helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, generate_timestamp

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp'
]
