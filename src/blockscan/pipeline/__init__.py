"""
Scan pipeline for blockscan.

Provides the three stages of a scan:
- Enqueueing a URL list as jobs
- Processing one job per worker invocation
- Aggregating results and detecting completion
"""

from blockscan.pipeline.enqueuer import (
    EnqueuedScan,
    JobEnqueuer,
    generate_scan_id,
)
from blockscan.pipeline.worker import (
    OutcomeStatus,
    ScanWorker,
    WorkerOutcome,
)
from blockscan.pipeline.completion import (
    CompletionAggregator,
    ScanProgress,
)

__all__ = [
    # Enqueue
    "EnqueuedScan",
    "JobEnqueuer",
    "generate_scan_id",
    # Worker
    "OutcomeStatus",
    "ScanWorker",
    "WorkerOutcome",
    # Completion
    "CompletionAggregator",
    "ScanProgress",
]
