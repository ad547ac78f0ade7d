"""
Single-job scan worker.

Each call to ``ScanWorker.process_one_job`` pops at most one job, runs
the layered detection (robots.txt first, then browser probes) inside a
wall-clock budget and records exactly one result for it. The worker
keeps no state between calls; an external trigger decides when to run
it.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from blockscan.config.settings import WorkerSettings
from blockscan.core.exceptions import (
    BlockScanError,
    DatabaseError,
    QueuePayloadError,
    ScanTimeoutError,
)
from blockscan.detection.browser_detector import BrowserDetector
from blockscan.detection.robots import RobotsPolicyAnalyzer
from blockscan.inputs import is_valid_target_url
from blockscan.storage.models import BlockingMethod, ScanJob, ScanResult
from blockscan.storage.repositories import JobQueue, ScanResultRepository
from blockscan.utils.logging import get_logger, get_logger_with_context
from blockscan.utils.metrics import Metrics

logger = get_logger(__name__)


class OutcomeStatus(str, Enum):
    """What a worker invocation did."""

    PROCESSED = "processed"
    NO_JOBS = "no_jobs"
    MALFORMED_PAYLOAD = "malformed_payload"


@dataclass
class WorkerOutcome:
    """Result of one ``process_one_job`` call."""

    status: OutcomeStatus
    job: ScanJob | None = None
    result: ScanResult | None = None
    error: str | None = None

    @property
    def message(self) -> str:
        if self.status is OutcomeStatus.PROCESSED:
            return "Job processed."
        if self.status is OutcomeStatus.NO_JOBS:
            return "No jobs in queue."
        return f"Malformed queue payload: {self.error}"


class ScanWorker:
    """
    Processes one queued scan job per call.

    Args:
        queue: Job queue to pop from
        results: Result store to write to
        robots_analyzer: robots.txt policy check
        detector: Browser probe
        settings: Time budget and result formatting
        clock: Monotonic clock in seconds

    Example:
        >>> worker = ScanWorker(queue, results, analyzer, detector, settings.worker)
        >>> outcome = await worker.process_one_job()
        >>> outcome.status
        <OutcomeStatus.PROCESSED: 'processed'>
    """

    def __init__(
        self,
        queue: JobQueue,
        results: ScanResultRepository,
        robots_analyzer: RobotsPolicyAnalyzer,
        detector: BrowserDetector,
        settings: WorkerSettings,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.queue = queue
        self.results = results
        self.robots_analyzer = robots_analyzer
        self.detector = detector
        self.settings = settings
        self._clock = clock

    async def process_one_job(self) -> WorkerOutcome:
        """
        Pop one job, scan it and record its result.

        Returns:
            WorkerOutcome: PROCESSED with the written result, NO_JOBS for
            an empty queue, or MALFORMED_PAYLOAD when the popped entry
            could not be decoded (nothing is written in that case)
        """
        try:
            job = self.queue.pop()
        except QueuePayloadError as e:
            logger.error(f"Discarded malformed queue entry: {e}")
            Metrics.get().increment("jobs_malformed")
            return WorkerOutcome(status=OutcomeStatus.MALFORMED_PAYLOAD, error=e.message)

        if job is None:
            logger.debug("No jobs in queue")
            return WorkerOutcome(status=OutcomeStatus.NO_JOBS)

        job_logger = get_logger_with_context(__name__, scan_id=job.scan_id, url=job.url)
        job_logger.info("Processing job")

        metrics = Metrics.get()
        with metrics.timer("job_duration_ms"):
            result = await self._scan(job)

        result = result.bounded(self.settings.details_max_length)
        try:
            self.results.insert_if_absent(result)
        except DatabaseError as e:
            job_logger.error(f"Failed to record result: {e}")
            raise

        self._record_metrics(result)
        job_logger.info(
            f"Job finished: {result.blocking_method.value} "
            f"(blocked={result.is_blocked})"
        )

        return WorkerOutcome(status=OutcomeStatus.PROCESSED, job=job, result=result)

    async def _scan(self, job: ScanJob) -> ScanResult:
        """Run detection for job, converting every failure into a result."""
        if not is_valid_target_url(job.url):
            return ScanResult(
                scan_id=job.scan_id,
                url=job.url,
                is_blocked=False,
                blocking_method=BlockingMethod.ERROR,
                details="Invalid URL format",
            )

        started = self._clock()
        try:
            return await self._detect(job, started)
        except Exception as e:
            elapsed = self._clock() - started
            return self._failure_result(job, e, elapsed)

    async def _detect(self, job: ScanJob, started: float) -> ScanResult:
        """Robots check, then browser probes, all inside the time budget."""
        checkpoint = self._make_checkpoint(started)

        checkpoint()
        robots = await asyncio.wait_for(
            self.robots_analyzer.analyze(job.url),
            timeout=self._remaining(started),
        )

        if robots.blocked:
            return ScanResult(
                scan_id=job.scan_id,
                url=job.url,
                is_blocked=True,
                blocking_method=BlockingMethod.ROBOTS_TXT,
                details=robots.details,
            )

        checkpoint()
        verdict = await asyncio.wait_for(
            self.detector.detect(job.url, checkpoint=checkpoint),
            timeout=self._remaining(started),
        )

        return ScanResult(
            scan_id=job.scan_id,
            url=job.url,
            is_blocked=verdict.is_blocked,
            blocking_method=verdict.method,
            details=verdict.details,
        )

    def _remaining(self, started: float) -> float:
        return max(self.settings.time_budget_seconds - (self._clock() - started), 0.0)

    def _make_checkpoint(self, started: float) -> Callable[[], None]:
        budget = self.settings.time_budget_seconds

        def checkpoint() -> None:
            elapsed = self._clock() - started
            if elapsed >= budget:
                raise ScanTimeoutError(
                    f"Time budget of {budget:g}s exhausted",
                    elapsed_seconds=elapsed,
                    budget_seconds=budget,
                )

        return checkpoint

    def _failure_result(self, job: ScanJob, error: Exception, elapsed: float) -> ScanResult:
        """Classify a failure as timeout or error and build its result."""
        budget = self.settings.time_budget_seconds
        timed_out = elapsed > budget or isinstance(
            error, (ScanTimeoutError, asyncio.TimeoutError))

        if isinstance(error, BlockScanError):
            message = error.message
        else:
            message = str(error)
        if not message:
            message = (
                f"Time budget of {budget:g}s exhausted" if timed_out
                else type(error).__name__
            )
        message = message[: self.settings.error_message_max_length]

        if timed_out:
            logger.warning(f"Scan of {job.url} timed out after {elapsed:.1f}s")
            return ScanResult(
                scan_id=job.scan_id,
                url=job.url,
                is_blocked=False,
                blocking_method=BlockingMethod.TIMEOUT,
                details=f"Scan timed out after {elapsed:.0f}s: {message}",
            )

        logger.error(f"Failed to process {job.url}: {type(error).__name__}: {error}")
        return ScanResult(
            scan_id=job.scan_id,
            url=job.url,
            is_blocked=False,
            blocking_method=BlockingMethod.ERROR,
            details=f"Scan failed: {message}",
        )

    def _record_metrics(self, result: ScanResult) -> None:
        metrics = Metrics.get()
        metrics.increment("jobs_processed")

        if result.is_blocked:
            metrics.increment("jobs_blocked")
        elif result.blocking_method is BlockingMethod.ERROR:
            metrics.increment("jobs_failed")
        elif result.blocking_method is BlockingMethod.TIMEOUT:
            metrics.increment("jobs_timed_out")
