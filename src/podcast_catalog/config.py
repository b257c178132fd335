"""
Configuration management for the Podcast Catalog.

Provides centralized configuration using Pydantic for validation and
environment variable support. Supports catalog.yaml for per-deployment settings.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Default data paths relative to project root
DATA_DIR = PROJECT_ROOT / "data"

YAML_FILENAME = "catalog.yaml"


def load_catalog_yaml(search_dir: Optional[Path] = None) -> dict:
    """
    Load catalog.yaml configuration file.

    Searches for catalog.yaml starting from search_dir (or PROJECT_ROOT)
    and walking up to 3 parent directories.

    Args:
        search_dir: Directory to start searching from

    Returns:
        Dictionary with catalog.yaml contents, or empty dict if not found
    """
    start = search_dir or PROJECT_ROOT
    for parent in [start] + list(start.parents)[:3]:
        candidate = parent / YAML_FILENAME
        if candidate.exists():
            with open(candidate, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
    return {}


class Config(BaseSettings):
    """
    Application configuration with environment variable support.

    Configuration can be provided via:
    1. Environment variables (prefixed with PODCAST_CATALOG_)
    2. .env file
    3. catalog.yaml
    4. Default values

    Example:
        export PODCAST_CATALOG_DATA_DIR="/srv/podcasts"
        export PODCAST_CATALOG_FETCH_TIMEOUT=10
    """

    model_config = SettingsConfigDict(
        env_prefix="PODCAST_CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage
    storage_backend: str = Field(
        default="json",
        description="Storage backend (json/memory)"
    )
    data_dir: Path = Field(
        default=DATA_DIR,
        description="Directory holding feeds.json and tags.json"
    )
    feeds_file: str = Field(
        default="feeds.json",
        description="Feed collection file name inside data_dir"
    )
    tags_file: str = Field(
        default="tags.json",
        description="Tag index file name inside data_dir"
    )

    # Fetching
    fetch_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Timeout in seconds for fetching a feed document"
    )
    user_agent: str = Field(
        default="podcast-catalog/0.1 (+https://github.com/)",
        description="User-Agent header sent when fetching feeds"
    )
    refresh_workers: int = Field(
        default=4,
        ge=1,
        description="Concurrent fetches when refreshing every feed"
    )

    # Server
    host: str = Field(default="127.0.0.1", description="API bind address")
    port: int = Field(default=3001, description="API port")

    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def feeds_path(self) -> Path:
        return self.data_dir / self.feeds_file

    @property
    def tags_path(self) -> Path:
        return self.data_dir / self.tags_file

    def ensure_directories(self) -> None:
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


def _yaml_overrides(yaml_config: Dict[str, Any]) -> Dict[str, Any]:
    """Pick known Config fields out of a catalog.yaml mapping."""
    section = yaml_config.get("catalog", yaml_config)
    if not isinstance(section, dict):
        return {}
    return {k: v for k, v in section.items() if k in Config.model_fields}


def get_config(search_dir: Optional[Path] = None) -> Config:
    """
    Get the application configuration instance.

    Values from catalog.yaml (if present) are used as defaults; environment
    variables and the .env file take precedence over them.

    Args:
        search_dir: Directory to start looking for catalog.yaml

    Returns:
        Config: Application configuration
    """
    overrides = _yaml_overrides(load_catalog_yaml(search_dir))
    config = Config()
    env_set = config.model_fields_set
    merged = {k: v for k, v in overrides.items() if k not in env_set}
    if merged:
        config = Config(**{**config.model_dump(include=env_set), **merged})
    if config.storage_backend == "json":
        config.ensure_directories()
    return config
