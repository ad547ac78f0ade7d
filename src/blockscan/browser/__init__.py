"""
Browser module for blockscan.

Provides Playwright-based browser automation with:
- Browser lifecycle management
- Per-identity browser contexts
- Page navigation and visible-text extraction
"""

from blockscan.browser.manager import BrowserManager
from blockscan.browser.page_context import PageContext, html_to_text

__all__ = [
    "BrowserManager",
    "PageContext",
    "html_to_text",
]
