"""
RSS/Atom feed ingestion.

Fetches a feed document, parses it with feedparser and normalizes the feed
and every entry into a single ``Feed`` aggregate. Entries are never dropped
for missing optional fields; a feed that cannot be fetched or parsed raises
``FetchError`` and yields nothing.

Example:
    >>> feed = ingest_feed("https://example.com/podcast/rss")
    >>> print(f"{feed.title}: {len(feed.episodes)} episodes")
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import feedparser
import requests

from podcast_catalog.errors import FetchError
from podcast_catalog.ingestion.identifiers import derive_episode_id, derive_feed_id
from podcast_catalog.ingestion.normalizer import (
    extract_artwork,
    extract_audio_url,
    extract_description,
    get_field,
    normalize_duration,
    resolve_publish_date,
    unwrap_identifier,
    utc_now_iso,
)
from podcast_catalog.models.entities import EpisodeRecord, Feed

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0  # seconds
DEFAULT_USER_AGENT = "podcast-catalog/0.1"

# (url, timeout) -> raw document bytes
Fetcher = Callable[[str, float], bytes]


def fetch_document(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bytes:
    """
    Download a feed document.

    Args:
        url: Feed URL
        timeout: Request timeout in seconds
        user_agent: User-Agent header value

    Returns:
        Raw response body

    Raises:
        FetchError: On timeout, connection failure or non-2xx status
    """
    try:
        response = requests.get(
            url,
            headers={"User-Agent": user_agent},
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.exceptions.Timeout as exc:
        raise FetchError(f"Failed to parse RSS feed: request timed out after {timeout}s") from exc
    except requests.exceptions.HTTPError as exc:
        raise FetchError(f"Failed to parse RSS feed: {exc}") from exc
    except requests.exceptions.RequestException as exc:
        raise FetchError(f"Failed to parse RSS feed: {exc}") from exc

    return response.content


def parse_document(url: str, document: bytes) -> Any:
    """
    Parse a raw document with feedparser.

    Raises:
        FetchError: If the document is not a readable feed
    """
    parsed = feedparser.parse(document)

    has_entries = bool(parsed.entries)
    has_title = bool(parsed.feed.get("title")) if hasattr(parsed, "feed") else False
    is_feed = bool(parsed.get("version"))

    if not has_entries and not has_title and (parsed.bozo or not is_feed):
        cause = parsed.get("bozo_exception") or "document is not an RSS or Atom feed"
        raise FetchError(f"Failed to parse RSS feed: {cause}")

    if parsed.bozo:
        logger.warning("Feed %s parsed with errors: %s", url, parsed.get("bozo_exception"))

    return parsed


def build_episode(
    feed_url: str,
    entry: Any,
    now: Optional[datetime] = None,
) -> EpisodeRecord:
    """
    Normalize one feed entry into an EpisodeRecord.

    The native identifier is used when present and non-empty; otherwise the
    id is derived from the feed URL, title and the source publish date text.
    """
    title = get_field(entry, "title") or ""
    raw_pub_date = (
        get_field(entry, "published")
        or get_field(entry, "updated")
        or get_field(entry, "pubDate")
        or ""
    )

    raw_guid = get_field(entry, "id")
    if raw_guid is None:
        raw_guid = get_field(entry, "guid")
    guid = unwrap_identifier(raw_guid)

    episode_id = guid or derive_episode_id(feed_url, title, raw_pub_date)

    return EpisodeRecord(
        episode_id=episode_id,
        guid=guid,
        title=title,
        pub_date=resolve_publish_date(raw_pub_date, now),
        description=extract_description(entry),
        duration=normalize_duration(get_field(entry, "itunes_duration")),
        image=extract_artwork(entry),
        audio_url=extract_audio_url(entry),
    )


def ingest_feed(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    fetcher: Optional[Fetcher] = None,
    now: Optional[datetime] = None,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Feed:
    """
    Fetch, parse and normalize the feed at ``url``.

    Args:
        url: Feed URL
        timeout: Fetch timeout in seconds
        fetcher: Optional replacement for the HTTP download
        now: Ingest time (defaults to the current UTC time)
        user_agent: User-Agent header for the default fetcher

    Returns:
        Feed aggregate with ``last_fetched_at`` set to the ingest time

    Raises:
        FetchError: If the feed is unreachable or not a readable feed
    """
    now = now or datetime.now(timezone.utc)
    logger.info("Fetching RSS feed from: %s", url)

    if fetcher is None:
        document = fetch_document(url, timeout=timeout, user_agent=user_agent)
    else:
        try:
            document = fetcher(url, timeout)
        except FetchError:
            raise
        except (OSError, requests.exceptions.RequestException) as exc:
            raise FetchError(f"Failed to parse RSS feed: {exc}") from exc

    parsed = parse_document(url, document)
    root = parsed.feed

    episodes = [build_episode(url, entry, now) for entry in parsed.entries]

    feed = Feed(
        id=derive_feed_id(url),
        url=url,
        title=root.get("title") or "",
        description=root.get("description") or root.get("subtitle") or "",
        image=extract_artwork(root),
        last_fetched_at=utc_now_iso(now),
        episodes=episodes,
    )

    logger.info("Successfully parsed %d episodes from feed '%s'", len(episodes), feed.title)
    return feed
