"""
Custom exceptions for the blockscan pipeline.

Provides a hierarchy of exceptions for precise error handling across
all subsystems. All exceptions inherit from BlockScanError.

Exception Hierarchy:
    BlockScanError (base)
    ├── ConfigurationError
    ├── InputError
    │   └── EmptySubmissionError
    ├── BrowserError
    │   ├── NavigationError
    │   └── PageLoadError
    ├── StorageError
    │   ├── DatabaseError
    │   └── QueuePayloadError
    └── ScanTimeoutError
"""

from typing import Any


class BlockScanError(Exception):
    """
    Base exception for all blockscan errors.

    All custom exceptions inherit from this class, allowing for
    catch-all handling when needed.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(
                f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BlockScanError):
    """
    Error in configuration loading or validation.

    Raised when:
    - Configuration file is missing or malformed
    - Setting values fail validation
    """

    pass


# =============================================================================
# Input Errors
# =============================================================================


class InputError(BlockScanError):
    """
    Error in caller-supplied input.

    These are client errors: the request should not be retried unchanged.
    """

    pass


class EmptySubmissionError(InputError):
    """
    Raised when a scan submission contains no usable URLs.
    """

    def __init__(
        self,
        message: str = "URL list must not be empty",
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)
        self.source = source


# =============================================================================
# Browser Errors
# =============================================================================


class BrowserError(BlockScanError):
    """
    Base error for browser/Playwright operations.

    Raised for launch and context failures not covered by
    more specific subclasses.
    """

    pass


class NavigationError(BrowserError):
    """
    Error during page navigation.

    Raised when:
    - URL is unreachable
    - Navigation times out
    - Redirect loop detected
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        identity: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        if identity:
            details["identity"] = identity
        super().__init__(message, details)
        self.url = url
        self.identity = identity


class PageLoadError(BrowserError):
    """
    Error reading page content after navigation.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)
        self.url = url


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(BlockScanError):
    """
    Base error for storage operations.
    """

    pass


class DatabaseError(StorageError):
    """
    Error in SQLite database operations.

    Raised when:
    - Database connection fails
    - Query execution fails
    - Schema creation fails
    """

    def __init__(
        self,
        message: str,
        query: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if query:
            # Truncate long queries for readability
            details["query"] = query[:200] + \
                "..." if len(query) > 200 else query
        super().__init__(message, details)
        self.query = query


class QueuePayloadError(StorageError):
    """
    A popped queue entry could not be decoded into a ScanJob.

    The entry has already been removed from the queue; the caller
    must report the failure instead of treating it as an empty queue.
    """

    def __init__(
        self,
        message: str,
        payload: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if payload is not None:
            details["payload"] = payload[:100] + \
                "..." if len(payload) > 100 else payload
        super().__init__(message, details)
        self.payload = payload


# =============================================================================
# Scan Errors
# =============================================================================


class ScanTimeoutError(BlockScanError):
    """
    The worker's wall-clock budget for a single job was exhausted.
    """

    def __init__(
        self,
        message: str,
        elapsed_seconds: float | None = None,
        budget_seconds: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if elapsed_seconds is not None:
            details["elapsed_seconds"] = round(elapsed_seconds, 2)
        if budget_seconds is not None:
            details["budget_seconds"] = budget_seconds
        super().__init__(message, details)
        self.elapsed_seconds = elapsed_seconds
        self.budget_seconds = budget_seconds
