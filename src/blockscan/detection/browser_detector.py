"""
Browser-based block detection.

Loads the target page in a real browser once per crawler identity and
looks for two kinds of refusal: an error HTTP status, and block-page
wording in the rendered text. The first identity that is refused ends
the probe.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from blockscan.browser.manager import BrowserManager
from blockscan.browser.page_context import PageContext
from blockscan.config.settings import BrowserSettings
from blockscan.detection.identities import AI_CRAWLERS, CrawlerIdentity
from blockscan.storage.models import BlockingMethod
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)

# Checked in order; the first phrase found is reported
BLOCKING_PHRASES: tuple[str, ...] = (
    "access denied",
    "forbidden",
    "not permitted",
    "blocked",
    "bot detected",
    "automated traffic",
    "suspicious activity",
    "captcha",
    "cloudflare",
    "rate limit",
    "too many requests",
)


@dataclass(frozen=True)
class DetectionVerdict:
    """Outcome of a browser probe."""

    is_blocked: bool
    method: BlockingMethod
    details: str
    identity: str | None = None


def find_blocking_phrase(
    text: str,
    phrases: Sequence[str] = BLOCKING_PHRASES,
) -> str | None:
    """
    Find the first blocking phrase contained in text.

    Args:
        text: Lower-cased visible page text
        phrases: Phrases to search, in priority order

    Returns:
        The matching phrase, or None
    """
    for phrase in phrases:
        if phrase in text:
            return phrase
    return None


class BrowserDetector:
    """
    Probes a URL as each AI crawler identity in turn.

    One browser is launched per call; every identity gets a fresh
    context so cookies and cache never leak between probes.

    Example:
        >>> detector = BrowserDetector(settings.browser)
        >>> verdict = await detector.detect("https://example.com")
        >>> verdict.method
        <BlockingMethod.NONE: 'none'>
    """

    def __init__(
        self,
        settings: BrowserSettings,
        identities: Sequence[CrawlerIdentity] = AI_CRAWLERS,
        browser_factory: Callable[[BrowserSettings], BrowserManager] = BrowserManager,
        phrases: Sequence[str] = BLOCKING_PHRASES,
    ) -> None:
        """
        Initialize detector.

        Args:
            settings: Browser configuration
            identities: Crawler identities to probe, in order
            browser_factory: Builds the browser manager for one call
            phrases: Block-page phrases, in priority order
        """
        if not identities:
            raise ValueError("At least one crawler identity is required")

        self.settings = settings
        self.identities = tuple(identities)
        self.phrases = tuple(phrases)
        self._browser_factory = browser_factory

    async def detect(
        self,
        url: str,
        checkpoint: Callable[[], None] | None = None,
    ) -> DetectionVerdict:
        """
        Probe url with every identity until one is refused.

        Args:
            url: Absolute http(s) URL
            checkpoint: Called before each identity; may raise to abort

        Returns:
            DetectionVerdict for the first refusal, or a NONE verdict

        Raises:
            BrowserError: If the browser cannot be launched or the page
                cannot be reached
            ScanTimeoutError: If checkpoint aborts the probe
        """
        async with self._browser_factory(self.settings) as browser:
            for identity in self.identities:
                if checkpoint is not None:
                    checkpoint()

                verdict = await self._probe(browser, url, identity)
                if verdict is not None:
                    logger.info(
                        f"{url} refused {identity.name}: {verdict.method.value}")
                    return verdict

        return DetectionVerdict(
            is_blocked=False,
            method=BlockingMethod.NONE,
            details=(
                "Passed All Tests: no blocking detected for "
                f"{len(self.identities)} crawler identities"
            ),
        )

    async def _probe(
        self,
        browser: BrowserManager,
        url: str,
        identity: CrawlerIdentity,
    ) -> DetectionVerdict | None:
        """Load url as one identity. Returns a verdict only on refusal."""
        async with browser.identity_context(identity.user_agent) as context:
            page = PageContext(await context.new_page(), identity=identity.name)

            response = await page.navigate(
                url,
                timeout_ms=self.settings.navigation_timeout_ms,
            )

            if response is not None and not response.ok:
                return DetectionVerdict(
                    is_blocked=True,
                    method=BlockingMethod.HTTP_STATUS,
                    details=f"Blocked with status {response.status} (as {identity.name})",
                    identity=identity.name,
                )

            text = await page.visible_text()
            phrase = find_blocking_phrase(text, self.phrases)
            if phrase is not None:
                return DetectionVerdict(
                    is_blocked=True,
                    method=BlockingMethod.CONTENT_DETECTION,
                    details=f"Blocked via page content: '{phrase}' (as {identity.name})",
                    identity=identity.name,
                )

        logger.debug(f"{url} accepted {identity.name}")
        return None
