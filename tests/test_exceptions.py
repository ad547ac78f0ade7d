"""
Tests for exception hierarchy.

Tests custom exceptions and error handling.
"""

import pytest

from blockscan.core.exceptions import (
    BlockScanError,
    ConfigurationError,
    InputError,
    EmptySubmissionError,
    BrowserError,
    NavigationError,
    PageLoadError,
    StorageError,
    DatabaseError,
    QueuePayloadError,
    ScanTimeoutError,
)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    def test_base_exception(self):
        """BlockScanError should be the base for all custom exceptions."""
        exc = BlockScanError("Test error")

        assert isinstance(exc, Exception)
        assert str(exc) == "Test error"

    @pytest.mark.parametrize(
        "exc_class, parent",
        [
            (ConfigurationError, BlockScanError),
            (InputError, BlockScanError),
            (EmptySubmissionError, InputError),
            (BrowserError, BlockScanError),
            (NavigationError, BrowserError),
            (PageLoadError, BrowserError),
            (StorageError, BlockScanError),
            (DatabaseError, StorageError),
            (QueuePayloadError, StorageError),
            (ScanTimeoutError, BlockScanError),
        ],
    )
    def test_inheritance(self, exc_class, parent):
        """Each exception sits under its subsystem base."""
        assert issubclass(exc_class, parent)
        assert issubclass(exc_class, BlockScanError)

    def test_catch_all(self):
        """All errors can be caught with the base class."""
        with pytest.raises(BlockScanError):
            raise QueuePayloadError("bad payload")


class TestExceptionDetails:
    """Tests for exception context."""

    def test_details_in_str(self):
        """Details are rendered after the message."""
        exc = BlockScanError("Failed", details={"url": "https://a.example"})

        assert str(exc) == "Failed (url='https://a.example')"

    def test_repr(self):
        exc = ConfigurationError("Bad value")

        assert repr(exc) == "ConfigurationError('Bad value', details={})"

    def test_empty_submission_default_message(self):
        exc = EmptySubmissionError()

        assert exc.message == "URL list must not be empty"
        assert exc.source is None

    def test_empty_submission_source(self):
        exc = EmptySubmissionError("No valid URLs found in urls.csv", source="urls.csv")

        assert exc.details["source"] == "urls.csv"

    def test_navigation_error_context(self):
        exc = NavigationError("Timeout", url="https://a.example", identity="GPTBot")

        assert exc.url == "https://a.example"
        assert exc.details == {"url": "https://a.example", "identity": "GPTBot"}

    def test_database_error_truncates_query(self):
        query = "SELECT " + "x, " * 200
        exc = DatabaseError("Query failed", query=query)

        assert exc.query == query
        assert len(exc.details["query"]) == 203
        assert exc.details["query"].endswith("...")

    def test_queue_payload_error_truncates_payload(self):
        exc = QueuePayloadError("Not JSON", payload="x" * 500)

        assert exc.details["payload"] == "x" * 100 + "..."

    def test_scan_timeout_error_context(self):
        exc = ScanTimeoutError("Budget spent", elapsed_seconds=45.1234, budget_seconds=45)

        assert exc.elapsed_seconds == 45.1234
        assert exc.details == {"elapsed_seconds": 45.12, "budget_seconds": 45}
