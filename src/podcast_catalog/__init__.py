"""
Podcast Catalog

Aggregates podcast RSS feeds into a searchable, taggable episode catalog.
Provides feed ingestion and normalization, combined episode listing with
filters, a user tagging layer, a REST API and a CLI.
"""

__version__ = "0.1.0"
__author__ = "Podcast Catalog Team"

from podcast_catalog.config import Config

__all__ = ["Config", "__version__"]
