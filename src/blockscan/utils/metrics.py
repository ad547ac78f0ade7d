"""
In-process counters for the scan pipeline.

The worker counts jobs by outcome and times each job; the enqueuer
counts started scans. ``blockscan work --verbose`` prints the summary.
"""

import threading
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from typing import ClassVar, Iterator


@dataclass
class DurationStats:
    """Running count, total and maximum of a duration in milliseconds."""

    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.max_ms = max(self.max_ms, duration_ms)


class Metrics:
    """
    Process-wide job counters and durations.

    Example:
        >>> metrics = Metrics.get()
        >>> metrics.increment("jobs_processed")
        >>> with metrics.timer("job_duration_ms"):
        ...     await worker.process_one_job()
        >>> print(metrics.summary())
    """

    _instance: ClassVar["Metrics | None"] = None

    def __init__(self) -> None:
        self._counters: Counter[str] = Counter()
        self._durations: dict[str, DurationStats] = {}
        self._lock = threading.Lock()

    @classmethod
    def get(cls) -> "Metrics":
        """Get the global metrics instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Zero every counter and duration (used between tests)."""
        if cls._instance is not None:
            with cls._instance._lock:
                cls._instance._counters.clear()
                cls._instance._durations.clear()

    def increment(self, name: str, value: int = 1) -> int:
        """Add value to a counter and return its new total."""
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def get_timing(self, name: str) -> DurationStats | None:
        """Copy of the duration stats recorded under name, if any."""
        with self._lock:
            stats = self._durations.get(name)
            if stats is None:
                return None
            return DurationStats(stats.count, stats.total_ms, stats.max_ms)

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Record the wall time of the block under name, even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            with self._lock:
                self._durations.setdefault(name, DurationStats()).add(elapsed_ms)

    def summary(self) -> str:
        """
        One line per counter and duration, sorted by name.

        Example output:
            jobs_blocked: 1
            jobs_processed: 3
            job_duration_ms: 3 jobs, avg 812.4ms, max 1503.0ms
        """
        with self._lock:
            lines = [f"{name}: {value}" for name, value in sorted(self._counters.items())]
            for name, stats in sorted(self._durations.items()):
                lines.append(
                    f"{name}: {stats.count} jobs, "
                    f"avg {stats.avg_ms:.1f}ms, max {stats.max_ms:.1f}ms"
                )

        return "\n".join(lines) if lines else "No jobs recorded"
