"""
Tests for tag index operations.
"""

import pytest

from podcast_catalog.catalog.tags import collect_tags, remove_episode_tags, set_tags
from podcast_catalog.errors import ValidationError


def test_set_replaces_without_merge():
    index = {"ep1": ["old", "tags"]}
    assert set_tags(index, "ep1", ["new"]) == ["new"]
    assert index == {"ep1": ["new"]}


def test_set_keeps_duplicates_and_case():
    index = {}
    set_tags(index, "ep1", ["AI", "ai", "AI"])
    assert index["ep1"] == ["AI", "ai", "AI"]


def test_empty_list_removes_entry():
    index = {"ep1": ["a"], "ep2": ["b"]}
    assert set_tags(index, "ep1", []) == []
    assert "ep1" not in index
    assert index == {"ep2": ["b"]}


def test_empty_list_on_unknown_episode_is_noop():
    index = {}
    set_tags(index, "missing", [])
    assert index == {}


@pytest.mark.parametrize("tags", [None, "ai", {"ai": 1}, ["ai", 3], [None], ("ai",)])
def test_rejects_non_list_of_strings(tags):
    index = {"ep1": ["keep"]}
    with pytest.raises(ValidationError, match="array of strings"):
        set_tags(index, "ep1", tags)
    assert index == {"ep1": ["keep"]}


def test_rejects_missing_episode_id():
    with pytest.raises(ValidationError, match="Episode ID"):
        set_tags({}, "", ["ai"])


def test_remove_episode_tags_counts_removed():
    index = {"e1": ["a"], "e2": ["b"], "e3": ["c"]}
    assert remove_episode_tags(index, ["e1", "e2", "absent"]) == 2
    assert index == {"e3": ["c"]}


def test_collect_tags_sorted_unique():
    index = {"e1": ["news", "AI"], "e2": ["ai", "news"]}
    assert collect_tags(index) == ["AI", "ai", "news"]
    assert collect_tags({}) == []
