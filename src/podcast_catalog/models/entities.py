"""
Pydantic data models for feeds, episodes and catalog views.

Python attributes are snake_case; the persisted JSON records and the API
payloads use the camelCase aliases. Models accept either form on input.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


TagIndex = Dict[str, List[str]]


class CatalogModel(BaseModel):
    """Base model: camelCase aliases on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        """Convert to a JSON-compatible dictionary using wire names."""
        return self.model_dump(by_alias=True, mode="json")


class EpisodeRecord(CatalogModel):
    """
    Episode data model.

    Owned by exactly one Feed and replaced wholesale when the feed is
    refreshed.
    """
    episode_id: str = Field(alias="episodeId")
    guid: Optional[str] = None
    title: str = ""
    pub_date: str = Field(alias="pubDate")
    description: str = ""
    duration: Optional[str] = None
    image: Optional[str] = None
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")


class Feed(CatalogModel):
    """
    Feed aggregate.

    One per subscribed source. ``id`` is derived from ``url`` and never
    changes across refreshes.
    """
    id: str
    url: str
    title: str = ""
    description: str = ""
    image: Optional[str] = None
    last_fetched_at: str = Field(alias="lastFetchedAt")
    episodes: List[EpisodeRecord] = Field(default_factory=list)

    def summary(self) -> "FeedSummary":
        """Feed metadata without its episodes, plus the episode count."""
        return FeedSummary(
            id=self.id,
            url=self.url,
            title=self.title,
            description=self.description,
            image=self.image,
            last_fetched_at=self.last_fetched_at,
            episode_count=len(self.episodes),
        )


class FeedSummary(CatalogModel):
    """Listing row for a stored feed."""
    id: str
    url: str
    title: str = ""
    description: str = ""
    image: Optional[str] = None
    last_fetched_at: str = Field(alias="lastFetchedAt")
    episode_count: int = Field(default=0, ge=0, alias="episodeCount")


class EpisodeView(CatalogModel):
    """
    Flattened episode joined with podcast-level fields and resolved tags.

    Rebuilt on every query; never persisted.
    """
    episode_id: str = Field(alias="episodeId")
    podcast_id: str = Field(alias="podcastId")
    podcast_title: str = Field(default="", alias="podcastTitle")
    podcast_image: Optional[str] = Field(default=None, alias="podcastImage")
    episode_title: str = Field(default="", alias="episodeTitle")
    episode_image: Optional[str] = Field(default=None, alias="episodeImage")
    pub_date: str = Field(alias="pubDate")
    duration: Optional[str] = None
    description: str = ""
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    tags: List[str] = Field(default_factory=list)


class EpisodeFilters(CatalogModel):
    """Optional, AND-combined episode filters. Empty values mean no filter."""
    podcast_id: Optional[str] = Field(default=None, alias="podcastId")
    query: Optional[str] = Field(default=None, alias="q")
    tag: Optional[str] = None
