"""
SQLite database connection management.

Provides thread-safe database access with WAL mode and one
connection per thread. Connections run in autocommit mode; multi-
statement units of work go through ``transaction()``, which takes the
write lock up front so that concurrent workers serialize on it.
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from blockscan.config import Settings
from blockscan.core.exceptions import DatabaseError
from blockscan.storage.schema import SchemaManager
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)

class Database:
    """
    SQLite database manager with per-thread connections.

    Provides:
    - WAL mode for concurrent readers alongside a writer
    - Connection per thread
    - Automatic schema initialization
    - IMMEDIATE transactions for atomic read-modify-write sequences

    Example:
        >>> db = Database.create(settings)
        >>> with db.transaction():
        ...     db.execute("DELETE FROM scan_queue WHERE id = ?", (1,))
        >>> rows = db.fetch_all("SELECT * FROM scan_results")
    """

    def __init__(
        self,
        database_path: Path,
        wal_mode: bool = True,
        cache_size_mb: int = 16,
        busy_timeout_seconds: float = 30.0,
    ) -> None:
        """
        Initialize database manager.

        Args:
            database_path: Path to SQLite database file
            wal_mode: Enable WAL mode for better concurrency
            cache_size_mb: SQLite cache size in megabytes
            busy_timeout_seconds: Wait time on a locked database
        """
        self.database_path = Path(database_path)
        self.wal_mode = wal_mode
        self.cache_size_mb = cache_size_mb
        self.busy_timeout_seconds = busy_timeout_seconds

        self._connections: dict[int, sqlite3.Connection] = {}
        self._lock = threading.Lock()
        self._initialized = False

        logger.debug(f"Database manager created (path={database_path})")

    @classmethod
    def create(cls, settings: Settings) -> "Database":
        """
        Create a database and set up its schema.

        Args:
            settings: Application settings

        Returns:
            Ready-to-use Database
        """
        storage = settings.storage
        db = cls(
            database_path=storage.database_path,
            wal_mode=storage.wal_mode,
            cache_size_mb=storage.cache_size_mb,
            busy_timeout_seconds=storage.busy_timeout_seconds,
        )
        db._setup()
        return db

    def _setup(self) -> None:
        """Setup database: create directory, initialize schema."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

        conn = self._get_connection()
        try:
            SchemaManager(conn).initialize()
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to initialize schema: {e}",
                details={"path": str(self.database_path)},
            ) from e

        self._initialized = True
        logger.debug("Database setup complete")

    def _get_connection(self) -> sqlite3.Connection:
        """Get the connection for the current thread, creating it if needed."""
        thread_id = threading.get_ident()

        if thread_id not in self._connections:
            with self._lock:
                if thread_id not in self._connections:
                    self._connections[thread_id] = self._create_connection()

        return self._connections[thread_id]

    def _create_connection(self) -> sqlite3.Connection:
        """Create and configure a new connection."""
        try:
            conn = sqlite3.connect(
                str(self.database_path),
                check_same_thread=False,
                timeout=self.busy_timeout_seconds,
                isolation_level=None,
            )

            conn.row_factory = sqlite3.Row

            cache_pages = (self.cache_size_mb * 1024 * 1024) // 4096
            conn.execute(f"PRAGMA cache_size = -{cache_pages}")
            conn.execute(
                "PRAGMA journal_mode = WAL" if self.wal_mode else "PRAGMA journal_mode = DELETE")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.execute("PRAGMA temp_store = MEMORY")

            logger.debug(
                f"Created new connection for thread {threading.get_ident()}")
            return conn

        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to create database connection: {e}",
                details={"path": str(self.database_path)},
            ) from e

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Execute operations in a single IMMEDIATE transaction.

        The write lock is acquired at BEGIN, so two transactions never
        interleave their reads and writes. Commits on success, rolls
        back on error.

        Yields:
            SQLite connection
        """
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to begin transaction: {e}") from e

        try:
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            conn.execute("ROLLBACK")
            raise

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """
        Execute SQL statement.

        Args:
            sql: SQL statement
            params: Query parameters

        Returns:
            Cursor with results
        """
        conn = self._get_connection()
        try:
            return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Query execution failed: {e}", query=sql) from e

    def fetch_one(self, sql: str, params: tuple = ()) -> dict | None:
        """Fetch single row as dictionary, or None."""
        cursor = self.execute(sql, params)
        row = cursor.fetchone()
        return dict(row) if row else None

    def fetch_all(self, sql: str, params: tuple = ()) -> list[dict]:
        """Fetch all rows as dictionaries."""
        cursor = self.execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def get_schema_version(self) -> int:
        """Get the applied schema version."""
        return SchemaManager(self._get_connection()).get_version()

    def close(self) -> None:
        """Close all connections."""
        with self._lock:
            for conn in self._connections.values():
                try:
                    conn.close()
                except sqlite3.Error as e:
                    logger.warning(f"Error closing connection: {e}")
            self._connections.clear()

        logger.debug("All database connections closed")

    def __repr__(self) -> str:
        status = "initialized" if self._initialized else "not initialized"
        return f"Database(path={self.database_path!r}, {status})"
