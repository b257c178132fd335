"""
Ingestion module for feed fetching and normalization.

Provides stable identifier derivation, field normalization for the many
feed dialects, and the ingestor that turns a feed URL into a Feed aggregate.
"""

from podcast_catalog.ingestion.identifiers import derive_episode_id, derive_feed_id
from podcast_catalog.ingestion.rss_parser import ingest_feed

__all__ = ["derive_feed_id", "derive_episode_id", "ingest_feed"]
