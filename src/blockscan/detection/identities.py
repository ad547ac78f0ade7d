"""
AI crawler identity profiles.

The order of AI_CRAWLERS is significant: robots.txt rules are checked
and browser probes are run in this order, and the first match wins.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CrawlerIdentity:
    """A named crawler signature used to probe how a site treats that crawler."""

    name: str
    user_agent: str


AI_CRAWLERS: tuple[CrawlerIdentity, ...] = (
    CrawlerIdentity(
        name="GPTBot",
        user_agent=(
            "Mozilla/5.0 (Linux; Android 6.0.1; Nexus 5X Build/MMB29P) "
            "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/41.0.2272.96 Mobile "
            "Safari/537.36 (compatible; GPTBot/1.0; +http://www.openai.com/bot.html)"
        ),
    ),
    CrawlerIdentity(
        name="Google-Extended",
        user_agent=(
            "Mozilla/5.0 (Linux; Android 6.0.1; Nexus 5X Build/MMB29P) "
            "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/41.0.2272.96 Mobile "
            "Safari/537.36 (compatible; Google-Extended; +http://www.google.com/bot.html)"
        ),
    ),
    CrawlerIdentity(name="anthropic-ai", user_agent="anthropic-ai"),
    CrawlerIdentity(name="cohere-ai", user_agent="cohere-ai"),
    CrawlerIdentity(
        name="PerplexityBot",
        user_agent="PerplexityBot/1.0 (+https://about.perplexity.ai/perplexity-bot)",
    ),
    CrawlerIdentity(
        name="YouBot",
        user_agent="Mozilla/5.0 (compatible; YouBot/1.0; +http://about.you.com/youbot)",
    ),
    CrawlerIdentity(
        name="magpie-crawler",
        user_agent="magpie-crawler/1.0 (+https://www.magpie-crawler.com)",
    ),
    CrawlerIdentity(
        name="CCBot",
        user_agent="CCBot/2.0 (https://commoncrawl.org/faq/)",
    ),
    CrawlerIdentity(name="Bytespider", user_agent="Bytespider"),
)


def get_identity(name: str) -> CrawlerIdentity:
    """
    Look up an identity by name (case-insensitive).

    Raises:
        KeyError: If no identity has that name
    """
    lowered = name.lower()
    for identity in AI_CRAWLERS:
        if identity.name.lower() == lowered:
            return identity
    raise KeyError(name)
