"""
Storage collaborators for the feed collection and the tag index.

Both records are read and written as a whole (full-replace semantics).
Two backends are provided:

- ``JsonFileStorage`` -- feeds.json / tags.json on disk, written atomically
  via a temp file and ``os.replace`` so a write is never observed half-applied.
- ``MemoryStorage`` -- process-local store for demos and tests. Values are
  deep-copied on every read and write so callers never share state with it.

Example:
    >>> storage = JsonFileStorage(Path("data/feeds.json"), Path("data/tags.json"))
    >>> feeds = storage.get_feeds()
    >>> storage.save_feeds(feeds)
"""

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from podcast_catalog.errors import StorageError
from podcast_catalog.models.entities import Feed, TagIndex

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Full-replace read/write pairs for the two persisted records."""

    @abstractmethod
    def get_feeds(self) -> List[Feed]:
        """Return every stored feed, in insertion order."""

    @abstractmethod
    def save_feeds(self, feeds: List[Feed]) -> None:
        """Replace the stored feed collection."""

    @abstractmethod
    def get_tags(self) -> TagIndex:
        """Return the tag index (episode id -> tags)."""

    @abstractmethod
    def save_tags(self, tags: TagIndex) -> None:
        """Replace the stored tag index. Empty tag lists are dropped."""


def _drop_empty(tags: TagIndex) -> TagIndex:
    return {episode_id: list(values) for episode_id, values in tags.items() if values}


def _feeds_from_records(records: List[Dict[str, Any]]) -> List[Feed]:
    try:
        return [Feed.model_validate(record) for record in records]
    except PydanticValidationError as exc:
        raise StorageError(f"Stored feed record is malformed: {exc}") from exc


# ---------------------------------------------------------------------------
#  JSON file backend
# ---------------------------------------------------------------------------

def read_json(path: Path, default: Dict[str, Any]) -> Dict[str, Any]:
    """
    Read a JSON object from disk.

    Args:
        path: File to read
        default: Value returned when the file does not exist

    Returns:
        Parsed JSON object

    Raises:
        StorageError: If the file cannot be read or is not a JSON object
    """
    if not path.exists():
        return copy.deepcopy(default)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise StorageError(f"Could not read {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise StorageError(f"Could not read {path}: expected a JSON object")
    return data


def write_json_atomic(path: Path, data: Dict[str, Any]) -> None:
    """
    Write a JSON object to disk atomically (temp file + rename).

    Each write gets its own uniquely named temp file beside ``path`` so
    concurrent writers never share one.

    Args:
        path: Destination file
        data: JSON-compatible object

    Raises:
        StorageError: If the write fails; the temp file is removed
    """
    tmp_name: Optional[str] = None
    try:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name + ".", suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as exc:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
        raise StorageError(f"Could not write {path}: {exc}") from exc


class JsonFileStorage(Storage):
    """
    Feed collection and tag index persisted as two JSON files.

    File shapes:
        feeds.json: {"feeds": [Feed, ...]}
        tags.json:  {"tagsByEpisodeId": {episodeId: [tag, ...]}}
    """

    def __init__(self, feeds_path: Path, tags_path: Path):
        """
        Initialize file storage.

        Args:
            feeds_path: Path to the feed collection file
            tags_path: Path to the tag index file
        """
        self.feeds_path = Path(feeds_path)
        self.tags_path = Path(tags_path)

    def get_feeds(self) -> List[Feed]:
        data = read_json(self.feeds_path, {"feeds": []})
        return _feeds_from_records(data.get("feeds") or [])

    def save_feeds(self, feeds: List[Feed]) -> None:
        write_json_atomic(self.feeds_path, {"feeds": [feed.to_dict() for feed in feeds]})
        logger.debug("Saved %d feed(s) to %s", len(feeds), self.feeds_path)

    def get_tags(self) -> TagIndex:
        data = read_json(self.tags_path, {"tagsByEpisodeId": {}})
        tags = data.get("tagsByEpisodeId") or {}
        if not isinstance(tags, dict):
            raise StorageError(f"Could not read {self.tags_path}: tagsByEpisodeId is not a mapping")
        return _drop_empty(tags)

    def save_tags(self, tags: TagIndex) -> None:
        cleaned = _drop_empty(tags)
        write_json_atomic(self.tags_path, {"tagsByEpisodeId": cleaned})
        logger.debug("Saved tags for %d episode(s) to %s", len(cleaned), self.tags_path)


# ---------------------------------------------------------------------------
#  In-memory backend
# ---------------------------------------------------------------------------

class MemoryStorage(Storage):
    """Single-writer in-memory store; each instance is isolated."""

    def __init__(
        self,
        feeds: Optional[List[Feed]] = None,
        tags: Optional[TagIndex] = None,
    ):
        self._feeds: List[Dict[str, Any]] = [feed.to_dict() for feed in feeds or []]
        self._tags: TagIndex = _drop_empty(tags or {})

    def get_feeds(self) -> List[Feed]:
        return _feeds_from_records(copy.deepcopy(self._feeds))

    def save_feeds(self, feeds: List[Feed]) -> None:
        self._feeds = [feed.to_dict() for feed in feeds]

    def get_tags(self) -> TagIndex:
        return copy.deepcopy(self._tags)

    def save_tags(self, tags: TagIndex) -> None:
        self._tags = _drop_empty(copy.deepcopy(tags))


def create_storage(config: Any) -> Storage:
    """
    Build the storage backend named by ``config.storage_backend``.

    Args:
        config: Application Config object

    Returns:
        A Storage instance

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = config.storage_backend.lower()
    if backend == "json":
        return JsonFileStorage(config.feeds_path, config.tags_path)
    if backend == "memory":
        return MemoryStorage()
    raise ValueError(
        f"Unknown storage backend '{config.storage_backend}'. "
        f"Available backends: json, memory"
    )
