"""
Scan submission.

Turns a URL list into one queued job per URL plus the scan's expected
job count, written together in a single transaction.
"""

import secrets
import string
from dataclasses import dataclass, field
from typing import Sequence

from blockscan.core.exceptions import EmptySubmissionError
from blockscan.storage.models import ScanJob
from blockscan.storage.repositories import JobQueue
from blockscan.utils.logging import get_logger
from blockscan.utils.metrics import Metrics

logger = get_logger(__name__)

SCAN_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
SCAN_ID_LENGTH = 16


def generate_scan_id(length: int = SCAN_ID_LENGTH) -> str:
    """Generate a random URL-safe scan identifier."""
    return "".join(secrets.choice(SCAN_ID_ALPHABET) for _ in range(length))


@dataclass
class EnqueuedScan:
    """A scan that has been accepted and queued."""

    scan_id: str
    urls: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.urls)

    def to_dict(self) -> dict:
        return {"scanId": self.scan_id, "initialUrls": list(self.urls)}


class JobEnqueuer:
    """
    Starts scans.

    The caller supplies an already de-duplicated URL list; uniqueness
    is trusted, not re-checked.

    Example:
        >>> enqueuer = JobEnqueuer(JobQueue(database))
        >>> scan = enqueuer.enqueue(["https://a.example", "https://b.example"])
        >>> scan.total
        2
    """

    def __init__(self, queue: JobQueue) -> None:
        self.queue = queue

    def enqueue(self, urls: Sequence[str]) -> EnqueuedScan:
        """
        Queue one job per URL and record the scan's total.

        Args:
            urls: Non-empty ordered list of distinct absolute URLs

        Returns:
            EnqueuedScan with the fresh scan id

        Raises:
            EmptySubmissionError: If urls is empty
        """
        if not urls:
            raise EmptySubmissionError()

        scan_id = generate_scan_id()

        with self.queue.batch():
            for url in urls:
                self.queue.push(ScanJob(scan_id=scan_id, url=url))
            self.queue.set_total(scan_id, len(urls))

        Metrics.get().increment("scans_enqueued")
        logger.info(f"Enqueued scan {scan_id} with {len(urls)} URLs")

        return EnqueuedScan(scan_id=scan_id, urls=list(urls))
