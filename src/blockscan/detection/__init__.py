"""
Detection module for blockscan.

Provides the two block signals a scan combines:
- robots.txt policy analysis
- Browser probes under spoofed AI crawler identities
"""

from blockscan.detection.identities import (
    AI_CRAWLERS,
    CrawlerIdentity,
    get_identity,
)
from blockscan.detection.robots import (
    RobotsPolicyAnalyzer,
    RobotsStatus,
    RobotsVerdict,
    evaluate_robots,
    normalize_robots_text,
    robots_url_for,
)
from blockscan.detection.browser_detector import (
    BLOCKING_PHRASES,
    BrowserDetector,
    DetectionVerdict,
    find_blocking_phrase,
)

__all__ = [
    # Identities
    "AI_CRAWLERS",
    "CrawlerIdentity",
    "get_identity",
    # Robots
    "RobotsPolicyAnalyzer",
    "RobotsStatus",
    "RobotsVerdict",
    "evaluate_robots",
    "normalize_robots_text",
    "robots_url_for",
    # Browser
    "BLOCKING_PHRASES",
    "BrowserDetector",
    "DetectionVerdict",
    "find_blocking_phrase",
]
