"""
Catalog module: episode aggregation, tag index and the catalog service.
"""

from podcast_catalog.catalog.aggregator import list_episodes
from podcast_catalog.catalog.service import CatalogService, RefreshReport
from podcast_catalog.catalog.tags import collect_tags, set_tags

__all__ = ["CatalogService", "RefreshReport", "list_episodes", "collect_tags", "set_tags"]
