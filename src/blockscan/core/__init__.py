"""
Core module for blockscan.

Contains foundational exceptions used throughout the application.
"""

from blockscan.core.exceptions import (
    BlockScanError,
    ConfigurationError,
    InputError,
    EmptySubmissionError,
    BrowserError,
    NavigationError,
    PageLoadError,
    StorageError,
    DatabaseError,
    QueuePayloadError,
    ScanTimeoutError,
)

__all__ = [
    # Base
    "BlockScanError",
    "ConfigurationError",
    # Input
    "InputError",
    "EmptySubmissionError",
    # Browser
    "BrowserError",
    "NavigationError",
    "PageLoadError",
    # Storage
    "StorageError",
    "DatabaseError",
    "QueuePayloadError",
    # Scan
    "ScanTimeoutError",
]
