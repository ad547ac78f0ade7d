"""
CLI module for blockscan.

Provides command-line interface using Typer:
- enqueue: Start a scan from URLs or a CSV file
- work: Process queued jobs
- results: Show scan results and completion
- status: Show queue status
- config: Configuration management
"""

from blockscan.cli.main import app

__all__ = ["app"]
