"""
blockscan - Detect whether websites block AI crawlers.

This package checks a batch of URLs against three signals: the site's
robots.txt policy, the HTTP status served to spoofed AI crawler
identities, and block-page wording in the rendered content.
"""

from blockscan.config import Settings, load_config
from blockscan.utils.logging import setup_logging, get_logger
from blockscan.core.exceptions import BlockScanError
from blockscan.storage.models import BlockingMethod, ScanJob, ScanResult

__version__ = "0.1.0"
__author__ = "blockscan Team"

__all__ = [
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "BlockScanError",
    "BlockingMethod",
    "ScanJob",
    "ScanResult",
]
