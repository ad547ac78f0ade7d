"""
Shared pytest fixtures for blockscan tests.

Provides reusable fixtures for:
- Configuration and settings
- Database, queue and result store instances
- Temporary resources
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from blockscan.config import Settings, reset_settings
from blockscan.storage import Database, JobQueue, ScanResultRepository
from blockscan.utils.logging import reset_logging
from blockscan.utils.metrics import Metrics


@pytest.fixture(autouse=True)
def reset_global_state():
    """
    Reset global settings, logging and metrics state around each test.

    This ensures tests are isolated and don't share global state.
    """
    reset_settings()
    reset_logging()
    Metrics.reset()
    yield
    reset_settings()
    reset_logging()
    Metrics.reset()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """
    Provide test settings with temporary database path.

    Console logging is off so CLI output stays parseable.
    """
    return Settings(
        storage={"database_path": str(temp_dir / "test.db")},
        logging={"log_to_console": False},
    )


@pytest.fixture
def database(test_settings: Settings) -> Generator[Database, None, None]:
    """
    Provide an initialized test database.

    Uses Database.create() for proper dependency injection.
    Creates a fresh database for each test and cleans up after.
    """
    db = Database.create(test_settings)
    yield db
    db.close()


@pytest.fixture
def queue(database: Database) -> JobQueue:
    """Provide a job queue on the test database."""
    return JobQueue(database)


@pytest.fixture
def results(database: Database) -> ScanResultRepository:
    """Provide a result store on the test database."""
    return ScanResultRepository(database)


@pytest.fixture
def sample_urls() -> list[str]:
    """Provide sample URLs for scan tests."""
    return [
        "https://example.com/",
        "https://example.org/pricing",
        "https://news.example.net/article/1",
    ]


@pytest.fixture
def clean_html() -> str:
    """A page with nothing that looks like a block."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head><title>Example Domain</title></head>
    <body>
        <h1>Example Domain</h1>
        <p>This domain is for use in illustrative examples in documents.</p>
        <script>var note = "access denied";</script>
    </body>
    </html>
    """


@pytest.fixture
def blocked_html() -> str:
    """A typical bot-challenge page."""
    return """
    <html>
    <head><title>Just a moment...</title></head>
    <body>
        <h1>Please complete the CAPTCHA</h1>
        <p>Suspicious activity was detected from your network.</p>
    </body>
    </html>
    """
