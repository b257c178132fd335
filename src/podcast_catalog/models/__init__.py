"""
Data models and storage collaborators.

Provides Pydantic models for feeds, episode records and catalog views, and
the storage backends that persist the feed collection and tag index.
"""

from podcast_catalog.models.entities import (
    EpisodeFilters,
    EpisodeRecord,
    EpisodeView,
    Feed,
    FeedSummary,
    TagIndex,
)
from podcast_catalog.models.storage import (
    JsonFileStorage,
    MemoryStorage,
    Storage,
    create_storage,
)

__all__ = [
    "EpisodeFilters",
    "EpisodeRecord",
    "EpisodeView",
    "Feed",
    "FeedSummary",
    "TagIndex",
    "Storage",
    "JsonFileStorage",
    "MemoryStorage",
    "create_storage",
]
