"""
Database schema definition and versioning.

Manages creation of the queue, totals and results tables.
"""

from blockscan.utils.logging import get_logger

logger = get_logger(__name__)

# Current schema version
SCHEMA_VERSION = 1


class SchemaManager:
    """
    Manages database schema creation.

    Example:
        >>> manager = SchemaManager(connection)
        >>> manager.initialize()
        >>> manager.get_version()
        1
    """

    def __init__(self, connection) -> None:
        self.conn = connection

    def initialize(self) -> None:
        """Create all tables if they don't exist."""
        logger.debug("Initializing database schema")

        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor = self.conn.execute("SELECT MAX(version) FROM schema_version")
        current_version = cursor.fetchone()[0]

        if current_version is None:
            self._create_schema_v1()
            self.conn.execute(
                "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,)
            )
            self.conn.commit()
            logger.info(f"Created schema version {SCHEMA_VERSION}")
        else:
            logger.debug(f"Schema version {current_version} already exists")

    def _create_schema_v1(self) -> None:
        """Create version 1 of the database schema."""

        # Pending work items; lowest id is popped first
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS scan_queue (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                scan_id TEXT,
                payload TEXT NOT NULL,
                enqueued_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_scan_queue_scan_id ON scan_queue(scan_id)"
        )

        # Expected job count per scan, deleted once completion is observed
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS scan_totals (
                scan_id TEXT PRIMARY KEY,
                total INTEGER NOT NULL CHECK (total >= 0),
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS scan_results (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                scan_id TEXT NOT NULL,
                url TEXT NOT NULL,
                is_blocked INTEGER NOT NULL DEFAULT 0,
                blocking_method TEXT NOT NULL,
                details TEXT,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(scan_id, url)
            )
        """)

        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_scan_results_scan_id ON scan_results(scan_id)"
        )

        logger.debug("Schema v1 created successfully")

    def get_version(self) -> int:
        """Get current schema version."""
        cursor = self.conn.execute("SELECT MAX(version) FROM schema_version")
        version = cursor.fetchone()[0]
        return version or 0
