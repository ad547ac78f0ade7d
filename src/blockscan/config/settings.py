"""
Pydantic settings models for blockscan.

All configuration is defined here with defaults sized for a worker
invocation that must finish inside a one-minute hosting deadline.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class BrowserSettings(BaseModel):
    """Playwright browser configuration."""

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode",
    )
    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to use",
    )
    navigation_timeout_ms: int = Field(
        default=20000,
        ge=1000,
        le=60000,
        description="Timeout for a single page navigation in milliseconds",
    )
    viewport_width: int = Field(
        default=1280,
        ge=320,
        le=3840,
        description="Browser viewport width in pixels",
    )
    viewport_height: int = Field(
        default=720,
        ge=240,
        le=2160,
        description="Browser viewport height in pixels",
    )
    ignore_https_errors: bool = Field(
        default=False,
        description="Whether to ignore HTTPS certificate errors",
    )


class RobotsSettings(BaseModel):
    """robots.txt fetch configuration."""

    timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=5.0,
        description="Timeout for fetching robots.txt in seconds",
    )
    max_redirects: int = Field(
        default=5,
        ge=0,
        le=20,
        description="Maximum redirects followed when fetching robots.txt",
    )


class WorkerSettings(BaseModel):
    """Scan worker time budget and result formatting."""

    time_budget_seconds: float = Field(
        default=45.0,
        gt=0.0,
        le=600.0,
        description="Wall-clock budget for detecting one job",
    )
    invocation_deadline_seconds: float = Field(
        default=60.0,
        gt=0.0,
        le=900.0,
        description="Hard deadline of the hosting invocation",
    )
    details_max_length: int = Field(
        default=200,
        ge=50,
        le=1000,
        description="Maximum length of a result's details text",
    )
    error_message_max_length: int = Field(
        default=150,
        ge=20,
        le=500,
        description="Maximum length of an exception message copied into details",
    )

    @model_validator(mode="after")
    def check_budget_within_deadline(self) -> "WorkerSettings":
        """The detection budget must leave headroom before the hard deadline."""
        if self.time_budget_seconds >= self.invocation_deadline_seconds:
            raise ValueError(
                "time_budget_seconds must be smaller than invocation_deadline_seconds"
            )
        return self


class StorageSettings(BaseModel):
    """SQLite storage configuration."""

    database_path: Path = Field(
        default=Path("data/blockscan.db"),
        description="Path to SQLite database file",
    )
    wal_mode: bool = Field(
        default=True,
        description="Enable WAL mode for better concurrent access",
    )
    cache_size_mb: int = Field(
        default=16,
        ge=1,
        le=512,
        description="SQLite cache size in megabytes",
    )
    busy_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="How long a connection waits on a locked database",
    )

    @field_validator("database_path", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(v) if isinstance(v, str) else v


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format string",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log timestamps",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of backup log files to keep",
    )
    log_to_console: bool = Field(
        default=True,
        description="Whether to output logs to console",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model containing all subsystem settings.

    Settings are loaded from YAML with environment variable overrides.
    """

    browser: BrowserSettings = Field(
        default_factory=BrowserSettings,
        description="Browser/Playwright settings",
    )
    robots: RobotsSettings = Field(
        default_factory=RobotsSettings,
        description="robots.txt analyzer settings",
    )
    worker: WorkerSettings = Field(
        default_factory=WorkerSettings,
        description="Scan worker settings",
    )
    storage: StorageSettings = Field(
        default_factory=StorageSettings,
        description="Database storage settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
