"""
Catalog service: the operations exposed to the REST API and CLI.

Wires the feed ingestor, the catalog aggregator and the tag index to an
injected storage collaborator. Every read-modify-write against storage runs
inside the service lock; network fetches run outside it so a slow feed
never blocks unrelated requests.

Example:
    >>> service = CatalogService(MemoryStorage())
    >>> feed = service.add_feed("https://example.com/rss")
    >>> service.set_episode_tags(feed.episodes[0].episode_id, ["ai"])
    >>> service.list_episodes(EpisodeFilters(tag="ai"))
"""

import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from podcast_catalog.catalog.aggregator import list_episodes
from podcast_catalog.catalog.tags import collect_tags, remove_episode_tags, set_tags, validate_tags
from podcast_catalog.errors import CatalogError, ConflictError, NotFoundError, ValidationError
from podcast_catalog.ingestion.rss_parser import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    Fetcher,
    ingest_feed,
)
from podcast_catalog.models.entities import EpisodeFilters, EpisodeView, Feed, FeedSummary, TagIndex
from podcast_catalog.models.storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class RefreshReport:
    """
    Result of refreshing every stored feed.

    Attributes:
        refreshed: Ids of feeds refreshed successfully
        errors: Feed id -> error message for feeds that failed
    """

    refreshed: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "refreshed": self.refreshed,
            "errors": self.errors,
            "refreshed_count": len(self.refreshed),
            "error_count": len(self.errors),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def validate_feed_url(url: Any) -> str:
    """
    Check that ``url`` is an absolute http(s) URL.

    Raises:
        ValidationError: If the URL is missing or malformed
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required")

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Please provide a valid HTTP/HTTPS URL")
    return url.strip()


def _find_index(feeds: List[Feed], feed_id: str) -> int:
    for index, feed in enumerate(feeds):
        if feed.id == feed_id:
            return index
    raise NotFoundError(f"Feed with ID {feed_id} not found")


class CatalogService:
    """
    Feed subscriptions, episode catalog and tagging over one storage.

    Args:
        storage: Storage collaborator (owned by the caller)
        fetcher: Optional replacement for the HTTP download
        timeout: Fetch timeout in seconds
        user_agent: User-Agent header for feed requests
        refresh_workers: Concurrent fetches used by refresh_all
    """

    def __init__(
        self,
        storage: Storage,
        fetcher: Optional[Fetcher] = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        refresh_workers: int = 4,
    ):
        self.storage = storage
        self.fetcher = fetcher
        self.timeout = timeout
        self.user_agent = user_agent
        self.refresh_workers = refresh_workers
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Any, storage: Optional[Storage] = None) -> "CatalogService":
        """Build a service from an application Config."""
        from podcast_catalog.models.storage import create_storage

        return cls(
            storage if storage is not None else create_storage(config),
            timeout=config.fetch_timeout,
            user_agent=config.user_agent,
            refresh_workers=config.refresh_workers,
        )

    # -------------------------------------------------------------------
    #  Feeds
    # -------------------------------------------------------------------

    def ingest_feed(self, url: str) -> Feed:
        """Fetch and normalize a feed without storing it."""
        url = validate_feed_url(url)
        return ingest_feed(
            url,
            timeout=self.timeout,
            fetcher=self.fetcher,
            user_agent=self.user_agent,
        )

    def add_feed(self, url: str) -> Feed:
        """
        Subscribe to a new feed.

        Raises:
            ValidationError: If the URL is malformed
            ConflictError: If a feed with the same URL is already stored
            FetchError: If the feed cannot be fetched or parsed
        """
        url = validate_feed_url(url)
        self._ensure_new_url(self.storage.get_feeds(), url)

        feed = self.ingest_feed(url)

        with self._lock:
            feeds = self.storage.get_feeds()
            self._ensure_new_url(feeds, url)
            feeds.append(feed)
            self.storage.save_feeds(feeds)

        logger.info("Added feed '%s' (%s) with %d episode(s)", feed.title, feed.id, len(feed.episodes))
        return feed

    @staticmethod
    def _ensure_new_url(feeds: List[Feed], url: str) -> None:
        for existing in feeds:
            if existing.url == url:
                raise ConflictError("This RSS feed has already been added", existing=existing)

    def refresh_feed(self, feed_id: str) -> Feed:
        """
        Re-ingest a stored feed, replacing its episodes. The id is kept.

        Raises:
            NotFoundError: If the feed is not stored
            FetchError: If the feed cannot be fetched or parsed
        """
        feeds = self.storage.get_feeds()
        url = feeds[_find_index(feeds, feed_id)].url

        refreshed = self.ingest_feed(url)
        refreshed = refreshed.model_copy(update={"id": feed_id})

        with self._lock:
            feeds = self.storage.get_feeds()
            feeds[_find_index(feeds, feed_id)] = refreshed
            self.storage.save_feeds(feeds)

        logger.info("Refreshed feed '%s' (%s): %d episode(s)", refreshed.title, feed_id, len(refreshed.episodes))
        return refreshed

    def refresh_all(self) -> RefreshReport:
        """Refresh every stored feed concurrently; failures are reported per feed."""
        report = RefreshReport()
        feed_ids = [feed.id for feed in self.storage.get_feeds()]
        if not feed_ids:
            return report

        def _refresh(feed_id: str) -> Optional[str]:
            try:
                self.refresh_feed(feed_id)
            except CatalogError as exc:
                logger.error("Refresh failed for %s: %s", feed_id, exc.message)
                return exc.message
            return None

        with ThreadPoolExecutor(max_workers=self.refresh_workers) as pool:
            outcomes = list(pool.map(_refresh, feed_ids))

        for feed_id, error in zip(feed_ids, outcomes):
            if error is None:
                report.refreshed.append(feed_id)
            else:
                report.errors[feed_id] = error

        return report

    def delete_feed(self, feed_id: str) -> Feed:
        """
        Remove a feed and the tag entries of its episodes.

        Raises:
            NotFoundError: If the feed is not stored
        """
        with self._lock:
            feeds = self.storage.get_feeds()
            deleted = feeds.pop(_find_index(feeds, feed_id))
            self.storage.save_feeds(feeds)

            tag_index = self.storage.get_tags()
            removed = remove_episode_tags(tag_index, (ep.episode_id for ep in deleted.episodes))
            if removed:
                self.storage.save_tags(tag_index)

        logger.info("Deleted feed '%s' (%s); removed tags for %d episode(s)", deleted.title, feed_id, removed)
        return deleted

    def get_feed(self, feed_id: str) -> Feed:
        feeds = self.storage.get_feeds()
        return feeds[_find_index(feeds, feed_id)]

    def list_feeds(self) -> List[FeedSummary]:
        return [feed.summary() for feed in self.storage.get_feeds()]

    # -------------------------------------------------------------------
    #  Episodes and tags
    # -------------------------------------------------------------------

    def list_episodes(self, filters: Optional[EpisodeFilters] = None) -> List[EpisodeView]:
        return list_episodes(self.storage.get_feeds(), self.storage.get_tags(), filters)

    def set_episode_tags(self, episode_id: str, tags: Any) -> List[str]:
        """
        Replace an episode's tags; an empty list removes them.

        Raises:
            ValidationError: If tags is not a list of strings
        """
        validate_tags(tags)
        with self._lock:
            tag_index = self.storage.get_tags()
            updated = set_tags(tag_index, episode_id, tags)
            self.storage.save_tags(tag_index)
        return updated

    def list_tags(self) -> List[str]:
        """Sorted unique union of every tag in use."""
        return collect_tags(self.storage.get_tags())

    def tags_by_episode(self) -> TagIndex:
        return self.storage.get_tags()
