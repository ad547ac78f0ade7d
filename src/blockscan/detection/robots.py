"""
robots.txt policy analysis for AI crawlers.

Fetches a site's robots.txt and evaluates it against a fixed rule
table: a wildcard "disallow everything" rule first, then one rule per
AI crawler identity. A missing, unreadable or unreachable robots.txt
is never evidence of blocking.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence
from urllib.parse import urlparse

import httpx

from blockscan.config.settings import RobotsSettings
from blockscan.detection.identities import AI_CRAWLERS, CrawlerIdentity
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)

ROBOTS_FETCH_USER_AGENT = "Mozilla/5.0 (compatible; blockscan/0.1; robots.txt check)"

WILDCARD_DETAILS = "All crawlers blocked via wildcard (*)"


class RobotsStatus(str, Enum):
    """Outcome of a robots.txt evaluation."""

    BLOCKED = "blocked"
    NO_SIGNAL = "no_signal"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class RobotsVerdict:
    """Result of analyzing one site's robots.txt."""

    status: RobotsStatus
    details: str = ""
    identity: str | None = None
    status_code: int | None = None

    @property
    def blocked(self) -> bool:
        return self.status is RobotsStatus.BLOCKED


def normalize_robots_text(text: str) -> str:
    """
    Normalize robots.txt for rule matching.

    Comments are dropped, all whitespace inside each line is removed,
    blank lines are skipped. Line breaks are kept so that
    ``Disallow: /admin`` never reads as ``Disallow: /``.
    """
    lines = []
    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0]
        line = re.sub(r"\s+", "", line)
        if line:
            lines.append(line)
    return "\n".join(lines)


def _group_disallows_root(agent_pattern: str) -> re.Pattern:
    """
    Compile a rule matching a user-agent group that disallows "/".

    The group may list several User-agent lines and other rules before
    the ``Disallow: /`` line, but may not cross into the next group.
    """
    return re.compile(
        rf"^user-agent:{agent_pattern}\n"
        r"(?:user-agent:[^\n]*\n)*"
        r"(?:(?!user-agent:)[^\n]*\n)*?"
        r"disallow:/$",
        re.IGNORECASE | re.MULTILINE,
    )


WILDCARD_RULE = _group_disallows_root(r"\*")


def build_rule_table(
    identities: Sequence[CrawlerIdentity] = AI_CRAWLERS,
) -> list[tuple[str, re.Pattern]]:
    """Build the ordered ``(identity name, pattern)`` rule table."""
    return [
        (identity.name, _group_disallows_root(re.escape(identity.name)))
        for identity in identities
    ]


def evaluate_robots(
    text: str,
    rules: Sequence[tuple[str, re.Pattern]] | None = None,
) -> RobotsVerdict:
    """
    Evaluate robots.txt content against the wildcard rule and rule table.

    Args:
        text: Raw robots.txt body
        rules: Ordered rule table; defaults to one rule per AI crawler

    Returns:
        BLOCKED verdict on the first matching rule, else NO_SIGNAL
    """
    normalized = normalize_robots_text(text)

    if WILDCARD_RULE.search(normalized):
        return RobotsVerdict(
            status=RobotsStatus.BLOCKED,
            details=WILDCARD_DETAILS,
            identity="*",
        )

    for name, pattern in rules if rules is not None else build_rule_table():
        if pattern.search(normalized):
            return RobotsVerdict(
                status=RobotsStatus.BLOCKED,
                details=f"Specifically blocked: {name}",
                identity=name,
            )

    return RobotsVerdict(status=RobotsStatus.NO_SIGNAL)


def robots_url_for(url: str) -> str:
    """Get the robots.txt URL for a page URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}/robots.txt"


class RobotsPolicyAnalyzer:
    """
    Fetches and evaluates a site's robots.txt.

    Example:
        >>> analyzer = RobotsPolicyAnalyzer(settings.robots)
        >>> verdict = await analyzer.analyze("https://example.com/page")
        >>> verdict.blocked
        False
    """

    def __init__(
        self,
        settings: RobotsSettings,
        identities: Sequence[CrawlerIdentity] = AI_CRAWLERS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize robots.txt analyzer.

        Args:
            settings: Fetch timeout and redirect limits
            identities: Ordered crawler identities to build rules for
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings
        self.rules = build_rule_table(identities)
        self._transport = transport

    async def fetch(self, url: str) -> httpx.Response:
        """
        Fetch robots.txt for the site hosting url.

        Raises:
            httpx.HTTPError: On transport failure or too many redirects
        """
        robots_url = robots_url_for(url)

        async with httpx.AsyncClient(
            timeout=self.settings.timeout_seconds,
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            headers={"User-Agent": ROBOTS_FETCH_USER_AGENT},
            transport=self._transport,
        ) as client:
            return await client.get(robots_url)

    async def analyze(self, url: str) -> RobotsVerdict:
        """
        Analyze the robots.txt policy of url's site.

        Never raises: fetch failures yield an UNREACHABLE verdict.

        Args:
            url: Page URL whose site is checked

        Returns:
            RobotsVerdict
        """
        try:
            response = await self.fetch(url)
        except Exception as e:
            logger.warning(
                f"robots.txt unreachable for {url}: {type(e).__name__}: {e}")
            return RobotsVerdict(
                status=RobotsStatus.UNREACHABLE,
                details=f"robots.txt unreachable: {type(e).__name__}",
            )

        if response.status_code >= 400:
            # No robots.txt or forbidden = no policy published
            logger.debug(
                f"No usable robots.txt for {url} ({response.status_code})")
            return RobotsVerdict(
                status=RobotsStatus.NO_SIGNAL,
                details=f"robots.txt returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        verdict = evaluate_robots(response.text, self.rules)
        if verdict.blocked:
            logger.info(f"robots.txt blocks {verdict.identity} on {url}")

        return RobotsVerdict(
            status=verdict.status,
            details=verdict.details,
            identity=verdict.identity,
            status_code=response.status_code,
        )
