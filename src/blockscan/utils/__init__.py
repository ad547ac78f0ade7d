"""
Utilities module for blockscan.

Provides logging setup and in-memory metrics.
"""

from blockscan.utils.logging import (
    setup_logging,
    get_logger,
    get_logger_with_context,
    reset_logging,
)
from blockscan.utils.metrics import DurationStats, Metrics

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "get_logger_with_context",
    "reset_logging",
    # Metrics
    "Metrics",
    "DurationStats",
]
