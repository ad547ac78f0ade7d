"""
URL list input handling.

Turns an uploaded CSV (or one-URL-per-line text file) into the
de-duplicated list of absolute URLs a scan is started with.
"""

import csv
import io
from pathlib import Path
from typing import Iterable
from urllib.parse import urlparse

from blockscan.core.exceptions import EmptySubmissionError, InputError
from blockscan.utils.logging import get_logger

logger = get_logger(__name__)


def clean_url_list(values: Iterable[str]) -> list[str]:
    """
    Reduce raw cell values to a de-duplicated URL list.

    Values are trimmed; only those starting with "http" are kept.
    First occurrence wins, so the input order is preserved.

    Args:
        values: Raw strings, e.g. flattened CSV cells

    Returns:
        Ordered list of distinct URL strings
    """
    seen: set[str] = set()
    urls = []

    for value in values:
        if not isinstance(value, str):
            continue
        candidate = value.strip()
        if not candidate.startswith("http"):
            continue
        if candidate in seen:
            continue
        seen.add(candidate)
        urls.append(candidate)

    return urls


def parse_url_text(text: str) -> list[str]:
    """
    Parse CSV text into a URL list.

    Every cell of every row is considered; there is no header row.
    """
    reader = csv.reader(io.StringIO(text))
    return clean_url_list(cell for row in reader for cell in row)


def read_url_file(path: Path | str, require_urls: bool = True) -> list[str]:
    """
    Read a URL list from a CSV or plain text file.

    Args:
        path: File to read
        require_urls: Raise when the file holds no URL. Callers that merge
            several sources pass False and check the combined list.

    Returns:
        Ordered list of distinct URL strings

    Raises:
        InputError: If the file cannot be read
        EmptySubmissionError: If require_urls is set and the file holds no URL
    """
    path = Path(path)

    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(
            f"Cannot read URL file: {e}",
            details={"path": str(path)},
        ) from e

    urls = parse_url_text(text)
    if not urls and require_urls:
        raise EmptySubmissionError(
            f"No valid URLs found in {path.name}", source=str(path))

    logger.debug(f"Read {len(urls)} URLs from {path}")
    return urls


def is_valid_target_url(url: str) -> bool:
    """
    Check that url is an absolute http(s) URL with a host.

    Args:
        url: URL to check

    Returns:
        True if the URL can be scanned
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https"):
        return False

    return bool(parsed.hostname)
