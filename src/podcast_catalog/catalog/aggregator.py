"""
Catalog aggregation: flatten stored feeds and the tag index into episode
views, then filter, search and sort them.

``list_episodes`` is a pure read. It never mutates the feeds, their
episode records, or the tag index it is given.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from podcast_catalog.ingestion.normalizer import parse_pub_date
from podcast_catalog.models.entities import EpisodeFilters, EpisodeView, Feed, TagIndex


def flatten_episodes(feeds: Iterable[Feed], tag_index: TagIndex) -> List[EpisodeView]:
    """One view per episode record, in feed order then episode order."""
    views: List[EpisodeView] = []
    for feed in feeds:
        for episode in feed.episodes:
            views.append(
                EpisodeView(
                    episode_id=episode.episode_id,
                    podcast_id=feed.id,
                    podcast_title=feed.title,
                    podcast_image=feed.image,
                    episode_title=episode.title,
                    episode_image=episode.image,
                    pub_date=episode.pub_date,
                    duration=episode.duration,
                    description=episode.description,
                    audio_url=episode.audio_url,
                    tags=list(tag_index.get(episode.episode_id) or []),
                )
            )
    return views


def matches_query(view: EpisodeView, query: str) -> bool:
    """Case-insensitive containment in episode title, podcast title or description."""
    needle = query.lower()
    return any(
        needle in (text or "").lower()
        for text in (view.episode_title, view.podcast_title, view.description)
    )


def apply_filters(views: List[EpisodeView], filters: EpisodeFilters) -> List[EpisodeView]:
    """AND-combine the podcast, search and tag filters."""
    result = views

    if filters.podcast_id:
        result = [v for v in result if v.podcast_id == filters.podcast_id]

    if filters.query:
        result = [v for v in result if matches_query(v, filters.query)]

    if filters.tag:
        result = [v for v in result if filters.tag in v.tags]

    return result


def _date_sort_key(view: EpisodeView) -> Tuple[int, float]:
    # Parsable dates first (newest first), unparsable dates last.
    parsed: Optional[datetime] = parse_pub_date(view.pub_date)
    if parsed is None:
        return (1, 0.0)
    return (0, -parsed.timestamp())


def sort_by_date(views: List[EpisodeView]) -> List[EpisodeView]:
    """Newest first; ties and unparsable dates keep flattening order."""
    return sorted(views, key=_date_sort_key)


def list_episodes(
    feeds: Iterable[Feed],
    tag_index: TagIndex,
    filters: Optional[EpisodeFilters] = None,
) -> List[EpisodeView]:
    """
    Build the filtered, date-sorted episode catalog.

    Args:
        feeds: Stored feed aggregates
        tag_index: Episode id -> tags
        filters: Optional podcast/query/tag filters

    Returns:
        Episode views, most recent first

    Example:
        >>> views = list_episodes(feeds, tags, EpisodeFilters(tag="AI"))
        >>> [v.episode_title for v in views]
    """
    views = flatten_episodes(feeds, tag_index)
    views = apply_filters(views, filters or EpisodeFilters())
    return sort_by_date(views)
