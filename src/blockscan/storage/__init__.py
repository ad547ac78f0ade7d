"""
Storage module for blockscan.

Provides SQLite-based storage with:
- Connection management with WAL mode
- Schema initialization
- Job queue, scan totals and result repositories
"""

from blockscan.storage.database import Database
from blockscan.storage.schema import (
    SchemaManager,
    SCHEMA_VERSION,
)
from blockscan.storage.repositories import (
    JobQueue,
    ScanResultRepository,
)
from blockscan.storage.models import (
    BlockingMethod,
    ScanJob,
    ScanResult,
)

__all__ = [
    # Database
    "Database",
    # Schema
    "SchemaManager",
    "SCHEMA_VERSION",
    # Repositories
    "JobQueue",
    "ScanResultRepository",
    # Models
    "BlockingMethod",
    "ScanJob",
    "ScanResult",
]
