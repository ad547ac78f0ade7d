"""
Data models for the storage layer.

Defines dataclasses representing queue entries and result records
with type-safe access and serialization.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from blockscan.core.exceptions import QueuePayloadError


class BlockingMethod(str, Enum):
    """
    How a block was detected, or why no determination was made.

    Values are persisted verbatim and form a closed taxonomy.
    """

    ROBOTS_TXT = "robots.txt"
    HTTP_STATUS = "HTTP Status"
    CONTENT_DETECTION = "Content Detection"  # JavaScript/HTML heuristics
    NONE = "none"  # Passed all tests
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ScanJob:
    """
    One pending (scan, URL) unit of work.

    Serialized on the queue as ``{"scanId": ..., "url": ...}``.
    """

    scan_id: str
    url: str

    def to_payload(self) -> str:
        """Encode for the queue."""
        return json.dumps({"scanId": self.scan_id, "url": self.url})

    @classmethod
    def from_payload(cls, payload: str) -> "ScanJob":
        """
        Decode a queue payload.

        Raises:
            QueuePayloadError: If the payload is not a JSON object with
                string ``scanId`` and ``url`` members
        """
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise QueuePayloadError(
                f"Queue payload is not valid JSON: {e}",
                payload=payload if isinstance(payload, str) else repr(payload),
            ) from e

        if not isinstance(data, dict):
            raise QueuePayloadError(
                "Queue payload must be a JSON object", payload=payload)

        scan_id = data.get("scanId")
        url = data.get("url")
        if not isinstance(scan_id, str) or not scan_id or not isinstance(url, str):
            raise QueuePayloadError(
                "Queue payload is missing 'scanId' or 'url'", payload=payload)

        return cls(scan_id=scan_id, url=url)


@dataclass
class ScanResult:
    """
    Persisted outcome for one (scan, URL) pair.

    Never mutated after creation.
    """

    scan_id: str
    url: str
    is_blocked: bool
    blocking_method: BlockingMethod
    details: str = ""
    id: int | None = None
    created_at: datetime | None = None

    def bounded(self, max_length: int) -> "ScanResult":
        """Return a copy whose details fit in max_length characters."""
        if len(self.details) <= max_length:
            return self
        return ScanResult(
            scan_id=self.scan_id,
            url=self.url,
            is_blocked=self.is_blocked,
            blocking_method=self.blocking_method,
            details=self.details[: max_length - 3] + "...",
            id=self.id,
            created_at=self.created_at,
        )

    def to_dict(self) -> dict:
        """Convert to the public result-read shape."""
        return {
            "url": self.url,
            "isBlocked": self.is_blocked,
            "blockingMethod": self.blocking_method.value,
            "details": self.details,
        }

    @classmethod
    def from_row(cls, row: dict) -> "ScanResult":
        """Create from database row."""
        return cls(
            id=row.get("id"),
            scan_id=row["scan_id"],
            url=row["url"],
            is_blocked=bool(row.get("is_blocked", 0)),
            blocking_method=BlockingMethod(row["blocking_method"]),
            details=row.get("details") or "",
            created_at=_parse_datetime(row.get("created_at")),
        )


def _parse_datetime(value: str | None) -> datetime | None:
    """Parse an SQLite timestamp string, tolerating bad values."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
