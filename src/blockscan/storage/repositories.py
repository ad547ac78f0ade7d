"""
Repository classes for data access.

Provides the narrow store operations the scan pipeline is built on:
push, atomic pop, counter set/get/delete and insert-if-absent.
"""

from contextlib import contextmanager
from typing import Iterator

from blockscan.storage.database import Database
from blockscan.storage.models import BlockingMethod, ScanJob, ScanResult
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)


class JobQueue:
    """
    Durable FIFO of pending ScanJobs plus the per-scan ScanTotal counter.

    ``pop`` is the only operation that must be atomic across concurrent
    workers: it runs inside an IMMEDIATE transaction, so the row it
    selects is deleted before any other connection can read it.

    Example:
        >>> queue = JobQueue(database)
        >>> with queue.batch():
        ...     queue.push(ScanJob("abc", "https://a.example"))
        ...     queue.set_total("abc", 1)
        >>> queue.pop()
        ScanJob(scan_id='abc', url='https://a.example')
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group several pushes and counter writes into one transaction."""
        with self.db.transaction():
            yield

    def push(self, job: ScanJob) -> None:
        """Append a job to the tail of the queue."""
        self.db.execute(
            "INSERT INTO scan_queue (scan_id, payload) VALUES (?, ?)",
            (job.scan_id, job.to_payload()),
        )

    def push_raw(self, payload: str, scan_id: str | None = None) -> None:
        """Append an already-encoded payload, as written by another producer."""
        self.db.execute(
            "INSERT INTO scan_queue (scan_id, payload) VALUES (?, ?)",
            (scan_id, payload),
        )

    def pop(self) -> ScanJob | None:
        """
        Atomically remove and return the oldest job.

        Returns:
            The job, or None if the queue is empty

        Raises:
            QueuePayloadError: If the removed entry cannot be decoded.
                The entry stays removed.
        """
        payload = self._pop_payload()
        if payload is None:
            return None
        return ScanJob.from_payload(payload)

    def _pop_payload(self) -> str | None:
        with self.db.transaction():
            row = self.db.fetch_one(
                "SELECT id, payload FROM scan_queue ORDER BY id LIMIT 1"
            )
            if row is None:
                return None
            self.db.execute("DELETE FROM scan_queue WHERE id = ?", (row["id"],))

        logger.debug(f"Popped queue entry {row['id']}")
        return row["payload"]

    def pending_count(self) -> int:
        """Number of jobs waiting in the queue."""
        row = self.db.fetch_one("SELECT COUNT(*) AS count FROM scan_queue")
        return row["count"] if row else 0

    def pending_for_scan(self, scan_id: str) -> int:
        """Number of jobs of one scan still waiting in the queue."""
        row = self.db.fetch_one(
            "SELECT COUNT(*) AS count FROM scan_queue WHERE scan_id = ?",
            (scan_id,),
        )
        return row["count"] if row else 0

    def set_total(self, scan_id: str, total: int) -> None:
        """Record how many jobs were enqueued for a scan."""
        self.db.execute(
            "INSERT INTO scan_totals (scan_id, total) VALUES (?, ?) "
            "ON CONFLICT(scan_id) DO UPDATE SET total = excluded.total",
            (scan_id, total),
        )

    def get_total(self, scan_id: str) -> int | None:
        """
        Read the expected job count of a scan.

        Returns:
            The count, or None for an unknown or retired scan
        """
        row = self.db.fetch_one(
            "SELECT total FROM scan_totals WHERE scan_id = ?", (scan_id,)
        )
        return row["total"] if row else None

    def delete_total(self, scan_id: str) -> bool:
        """
        Retire a scan's counter.

        Returns:
            True if a counter was deleted, False if it was already gone
        """
        cursor = self.db.execute(
            "DELETE FROM scan_totals WHERE scan_id = ?", (scan_id,)
        )
        return cursor.rowcount > 0


class ScanResultRepository:
    """
    Repository for ScanResult rows, keyed by (scan_id, url).

    Inserts are idempotent: a second write for the same key is a
    silent no-op, never an overwrite and never a duplicate row.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def insert_if_absent(self, result: ScanResult) -> bool:
        """
        Insert a result unless one already exists for its key.

        Returns:
            True if a row was created, False if the key was taken
        """
        cursor = self.db.execute(
            """
            INSERT INTO scan_results
                (scan_id, url, is_blocked, blocking_method, details)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(scan_id, url) DO NOTHING
            """,
            (
                result.scan_id,
                result.url,
                1 if result.is_blocked else 0,
                result.blocking_method.value,
                result.details,
            ),
        )
        created = cursor.rowcount == 1
        if not created:
            logger.debug(
                f"Result already recorded for {result.url} (scan {result.scan_id})")
        return created

    def get(self, scan_id: str, url: str) -> ScanResult | None:
        """Get the result for one (scan, URL) pair."""
        row = self.db.fetch_one(
            "SELECT * FROM scan_results WHERE scan_id = ? AND url = ?",
            (scan_id, url),
        )
        return ScanResult.from_row(row) if row else None

    def list_for_scan(self, scan_id: str) -> list[ScanResult]:
        """All results of a scan in insertion order."""
        rows = self.db.fetch_all(
            "SELECT * FROM scan_results WHERE scan_id = ? ORDER BY id",
            (scan_id,),
        )
        return [ScanResult.from_row(row) for row in rows]

    def count_for_scan(self, scan_id: str) -> int:
        """Number of results recorded for a scan."""
        row = self.db.fetch_one(
            "SELECT COUNT(*) AS count FROM scan_results WHERE scan_id = ?",
            (scan_id,),
        )
        return row["count"] if row else 0

    def count_by_method(self, scan_id: str) -> dict[BlockingMethod, int]:
        """Result counts of a scan grouped by blocking method."""
        rows = self.db.fetch_all(
            "SELECT blocking_method, COUNT(*) AS count FROM scan_results "
            "WHERE scan_id = ? GROUP BY blocking_method",
            (scan_id,),
        )
        return {BlockingMethod(row["blocking_method"]): row["count"] for row in rows}
