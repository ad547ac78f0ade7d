"""
Scan progress and completion tracking.
"""

from dataclasses import dataclass, field

from blockscan.storage.models import ScanResult
from blockscan.storage.repositories import JobQueue, ScanResultRepository
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ScanProgress:
    """Results recorded so far for a scan, and whether it has finished."""

    results: list[ScanResult] = field(default_factory=list)
    is_complete: bool = False

    @property
    def blocked_count(self) -> int:
        return sum(1 for result in self.results if result.is_blocked)

    def to_dict(self) -> dict:
        """Convert to the public result-read shape."""
        return {
            "results": [result.to_dict() for result in self.results],
            "isComplete": self.is_complete,
        }


class CompletionAggregator:
    """
    Reports a scan's results and detects its completion.

    A scan is complete once it has at least as many results as jobs
    were enqueued for it. The job counter is retired the first time
    completion is observed; later reads of the same scan see an unknown
    total and report it as incomplete.

    Example:
        >>> aggregator = CompletionAggregator(queue, results)
        >>> progress = aggregator.get_progress(scan_id)
        >>> progress.is_complete
        True
    """

    def __init__(self, queue: JobQueue, results: ScanResultRepository) -> None:
        self.queue = queue
        self.results = results

    def get_progress(self, scan_id: str) -> ScanProgress:
        """
        Read a scan's results and completion state.

        Args:
            scan_id: Scan to read

        Returns:
            ScanProgress with results in insertion order
        """
        results = self.results.list_for_scan(scan_id)
        total = self.queue.get_total(scan_id) or 0

        is_complete = total > 0 and len(results) >= total

        if is_complete:
            self.queue.delete_total(scan_id)
            logger.info(f"Scan {scan_id} complete with {len(results)} results")

        return ScanProgress(results=results, is_complete=is_complete)
