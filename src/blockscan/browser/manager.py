"""
Browser lifecycle management using Playwright.

Handles browser instance creation, per-identity browser contexts and
cleanup. Supports chromium, firefox, and webkit engines.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Playwright,
)

from blockscan.config.settings import BrowserSettings
from blockscan.core.exceptions import BrowserError
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)


class BrowserManager:
    """
    Manages Playwright browser lifecycle.

    One browser is launched per scan job; each crawler identity gets its
    own isolated context inside it. Both the browser and every context
    are released on all exit paths, including cancellation.

    Example:
        >>> async with BrowserManager(settings) as manager:
        ...     async with manager.identity_context(user_agent) as context:
        ...         page = await context.new_page()
        ...         await page.goto("https://example.com")
    """

    def __init__(self, settings: BrowserSettings) -> None:
        """
        Initialize browser manager with configuration.

        Args:
            settings: Browser configuration from app settings
        """
        self.settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def start(self) -> None:
        """
        Start Playwright and launch browser.

        Raises:
            BrowserError: If browser fails to launch
        """
        if self._browser is not None:
            logger.warning("Browser already started, skipping launch")
            return

        try:
            logger.debug(
                f"Starting {self.settings.browser_type} browser "
                f"(headless={self.settings.headless})"
            )

            self._playwright = await async_playwright().start()

            browser_type = getattr(
                self._playwright, self.settings.browser_type)

            self._browser = await browser_type.launch(
                headless=self.settings.headless,
            )

            logger.debug("Browser started successfully")

        except Exception as e:
            await self._cleanup()
            raise BrowserError(
                f"Failed to launch browser: {e}",
                details={"browser_type": self.settings.browser_type},
            ) from e
        except BaseException:
            # Cancelled mid-launch: __aexit__ will not run, so release here
            await self._cleanup()
            raise

    async def stop(self) -> None:
        """
        Stop browser and cleanup Playwright resources.

        Safe to call multiple times.
        """
        await self._cleanup()
        logger.debug("Browser stopped")

    async def _cleanup(self) -> None:
        """Internal cleanup of browser resources."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self._playwright = None

    async def new_context(self, user_agent: str | None = None) -> BrowserContext:
        """
        Create a new browser context with configured settings.

        Each context has isolated cookies, cache, and storage.

        Args:
            user_agent: User agent the context presents. None uses the
                browser default.

        Returns:
            Configured BrowserContext

        Raises:
            BrowserError: If browser not started or context creation fails
        """
        if self._browser is None:
            raise BrowserError("Browser not started. Call start() first.")

        try:
            context_options: dict = {
                "viewport": {
                    "width": self.settings.viewport_width,
                    "height": self.settings.viewport_height,
                },
                "ignore_https_errors": self.settings.ignore_https_errors,
            }

            if user_agent:
                context_options["user_agent"] = user_agent

            context = await self._browser.new_context(**context_options)

            context.set_default_timeout(self.settings.navigation_timeout_ms)
            context.set_default_navigation_timeout(
                self.settings.navigation_timeout_ms)

            return context

        except Exception as e:
            raise BrowserError(
                f"Failed to create browser context: {e}",
            ) from e

    @asynccontextmanager
    async def identity_context(self, user_agent: str) -> AsyncIterator[BrowserContext]:
        """
        Scoped browser context presenting user_agent.

        The context is closed when the block exits, whatever the outcome.
        """
        context = await self.new_context(user_agent=user_agent)
        try:
            yield context
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
