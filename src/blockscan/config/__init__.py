"""
Configuration module for blockscan.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from blockscan.config.settings import (
    Settings,
    BrowserSettings,
    RobotsSettings,
    WorkerSettings,
    StorageSettings,
    LoggingSettings,
)
from blockscan.config.loader import (
    load_config,
    get_settings,
    reset_settings,
    get_default_config_path,
)

__all__ = [
    "Settings",
    "BrowserSettings",
    "RobotsSettings",
    "WorkerSettings",
    "StorageSettings",
    "LoggingSettings",
    "load_config",
    "get_settings",
    "reset_settings",
    "get_default_config_path",
]
