"""
Stable identifiers for feeds and episodes.

Identifiers are one-way md5 digests of stable source fields, prefixed with
a namespace tag, so the same source always yields the same id across runs.
"""

import hashlib
from typing import Optional

FEED_PREFIX = "feed_"
EPISODE_PREFIX = "ep_"


def _digest(content: str) -> str:
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def derive_feed_id(url: str) -> str:
    """
    Derive the feed id from its source URL.

    Example:
        >>> derive_feed_id("https://example.com/rss")[:5]
        'feed_'
    """
    return FEED_PREFIX + _digest(url or "")


def derive_episode_id(
    feed_url: str,
    title: Optional[str],
    pub_date: Optional[str],
) -> str:
    """
    Derive an episode id for entries that carry no native identifier.

    The three inputs are joined with ``|``; missing title or date are
    treated as empty strings.
    """
    content = f"{feed_url or ''}|{title or ''}|{pub_date or ''}"
    return EPISODE_PREFIX + _digest(content)
