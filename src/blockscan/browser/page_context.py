"""
Page context wrapper for crawler probes.

Navigates a page and reduces the rendered HTML to the visible text the
content heuristics search.
"""

import time

from bs4 import BeautifulSoup
from playwright.async_api import Page, Response

from blockscan.core.exceptions import NavigationError, PageLoadError
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)

# Elements whose text never reaches the reader
NON_VISIBLE_TAGS = ("script", "style", "noscript", "template", "svg")


def html_to_text(html: str) -> str:
    """
    Reduce an HTML document to its visible text.

    Args:
        html: Raw or rendered HTML

    Returns:
        Text content with whitespace collapsed to single spaces
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup(NON_VISIBLE_TAGS):
        element.decompose()

    text = soup.get_text(separator=" ")
    return " ".join(text.split())


class PageContext:
    """
    Wrapper around a Playwright Page.

    Unlike a crawler, a probe treats an error status as an answer: the
    response is returned whatever its status, and only a failure to get
    any response at all raises.

    Example:
        >>> page = await context.new_page()
        >>> ctx = PageContext(page, identity="GPTBot")
        >>> response = await ctx.navigate("https://example.com", timeout_ms=20000)
        >>> text = await ctx.visible_text()
    """

    def __init__(self, page: Page, identity: str | None = None) -> None:
        """
        Initialize page context.

        Args:
            page: Playwright Page instance
            identity: Crawler identity the page's context presents
        """
        self.page = page
        self.identity = identity

    async def navigate(
        self,
        url: str,
        timeout_ms: int,
        wait_until: str = "domcontentloaded",
    ) -> Response | None:
        """
        Navigate to URL and wait for the DOM.

        Args:
            url: Target URL
            timeout_ms: Navigation timeout in milliseconds
            wait_until: Load state to wait for

        Returns:
            Main resource response, None for same-document navigations

        Raises:
            NavigationError: If the page could not be reached
        """
        start_time = time.perf_counter()

        try:
            logger.debug(f"Navigating to {url} as {self.identity}")

            response = await self.page.goto(
                url,
                wait_until=wait_until,
                timeout=timeout_ms,
            )

            elapsed = (time.perf_counter() - start_time) * 1000
            status = response.status if response else None
            logger.debug(f"Navigation complete in {elapsed:.0f}ms (status={status})")

            return response

        except Exception as e:
            error_msg = str(e)

            if "timeout" in error_msg.lower():
                raise NavigationError(
                    f"Navigation timeout: {error_msg}",
                    url=url,
                    identity=self.identity,
                ) from e

            raise NavigationError(
                f"Navigation failed: {error_msg}",
                url=url,
                identity=self.identity,
            ) from e

    async def visible_text(self) -> str:
        """
        Get the lower-cased visible text of the current page.

        Raises:
            PageLoadError: If the page content cannot be read
        """
        try:
            html = await self.page.content()
        except Exception as e:
            raise PageLoadError(
                f"Failed to read page content: {e}",
                url=self.page.url,
            ) from e

        return html_to_text(html).lower()
