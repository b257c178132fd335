"""
Tag index operations.

The tag index maps an episode id to the user's labels for it. An episode
without tags has no entry at all: setting an empty list removes the entry.
Tags are stored exactly as given; de-duplication and lowercasing belong to
the caller.
"""

from typing import Any, Iterable, List

from podcast_catalog.errors import ValidationError
from podcast_catalog.models.entities import TagIndex


def validate_tags(tags: Any) -> List[str]:
    """
    Check that ``tags`` is a list of strings.

    Raises:
        ValidationError: If it is not
    """
    if not isinstance(tags, list):
        raise ValidationError("Tags must be an array of strings")
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError("Tags must be an array of strings")
    return list(tags)


def set_tags(tag_index: TagIndex, episode_id: str, tags: Any) -> List[str]:
    """
    Replace the tags of one episode in ``tag_index`` (in place).

    Args:
        tag_index: Tag index to update
        episode_id: Episode to tag
        tags: New tag list; an empty list removes the entry

    Returns:
        The episode's tag list after the update

    Raises:
        ValidationError: If episode_id is empty or tags is not a list of strings
    """
    if not isinstance(episode_id, str) or not episode_id:
        raise ValidationError("Episode ID is required")

    new_tags = validate_tags(tags)

    if not new_tags:
        tag_index.pop(episode_id, None)
    else:
        tag_index[episode_id] = new_tags

    return new_tags


def remove_episode_tags(tag_index: TagIndex, episode_ids: Iterable[str]) -> int:
    """
    Drop the entries of the given episodes (feed-delete cascade).

    Returns:
        Number of entries removed
    """
    removed = 0
    for episode_id in episode_ids:
        if tag_index.pop(episode_id, None) is not None:
            removed += 1
    return removed


def collect_tags(tag_index: TagIndex) -> List[str]:
    """Sorted union of every tag in the index."""
    unique = set()
    for episode_tags in tag_index.values():
        unique.update(episode_tags)
    return sorted(unique)
