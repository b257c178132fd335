"""
Shared test fixtures.

Provides pytest fixtures for common test resources including:
- Sample RSS documents and a canned fetcher
- Isolated in-memory and file-backed storage
- Sample feeds with episodes
- A catalog service wired to the canned fetcher
"""

from typing import Dict, List

import pytest

from podcast_catalog.catalog.service import CatalogService
from podcast_catalog.errors import FetchError
from podcast_catalog.models.entities import EpisodeRecord, Feed
from podcast_catalog.models.storage import JsonFileStorage, MemoryStorage


SHOW_URL = "https://feeds.example.com/ai-odyssey.rss"
OTHER_URL = "https://feeds.example.com/garden-talk.rss"

SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>AI Odyssey</title>
    <link>https://example.com/ai-odyssey</link>
    <description>Your journey through artificial intelligence.</description>
    <itunes:image href="https://cdn.example.com/show.jpg"/>
    <item>
      <title>Episode One: Agents</title>
      <guid isPermaLink="false">guid-001</guid>
      <pubDate>Sat, 31 Jan 2026 23:50:39 GMT</pubDate>
      <description>Summary of episode one.</description>
      <content:encoded><![CDATA[<p>Rich notes for episode one.</p>]]></content:encoded>
      <itunes:duration>1:02:03</itunes:duration>
      <itunes:image href="https://cdn.example.com/ep1.jpg"/>
      <enclosure url="https://cdn.example.com/ep1.mp3" type="audio/mpeg" length="52428800"/>
    </item>
    <item>
      <title>Episode Two: Robots</title>
      <pubDate>Fri, 30 Jan 2026 10:00:00 GMT</pubDate>
      <description>Summary of episode two.</description>
      <itunes:duration>799</itunes:duration>
      <enclosure url="https://cdn.example.com/ep2.mp3" type="audio/mpeg" length="1024"/>
    </item>
  </channel>
</rss>
"""

OTHER_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Garden Talk</title>
    <description>Plants and soil.</description>
    <item>
      <title>Composting 101</title>
      <guid>garden-001</guid>
      <pubDate>Mon, 02 Feb 2026 08:00:00 GMT</pubDate>
      <description>All about compost.</description>
      <enclosure url="https://cdn.example.com/g1.mp3" type="audio/mpeg" length="10"/>
    </item>
  </channel>
</rss>
"""


class FakeFetcher:
    """Serves canned documents by URL and records every request."""

    def __init__(self, documents: Dict[str, str]):
        self.documents = dict(documents)
        self.calls: List[str] = []

    def __call__(self, url: str, timeout: float) -> bytes:
        self.calls.append(url)
        if url not in self.documents:
            raise FetchError(f"Failed to parse RSS feed: no route to {url}")
        return self.documents[url].encode("utf-8")


def make_feed(feed_id: str, title: str, episodes: List[EpisodeRecord], image=None) -> Feed:
    return Feed(
        id=feed_id,
        url=f"https://feeds.example.com/{feed_id}.rss",
        title=title,
        description=f"{title} description",
        image=image,
        last_fetched_at="2026-02-04T00:00:30.183Z",
        episodes=episodes,
    )


def make_episode(episode_id: str, title: str, pub_date: str, description: str = "") -> EpisodeRecord:
    return EpisodeRecord(
        episode_id=episode_id,
        guid=episode_id,
        title=title,
        pub_date=pub_date,
        description=description,
        duration="600",
        audio_url=f"https://cdn.example.com/{episode_id}.mp3",
    )


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher({SHOW_URL: SAMPLE_RSS, OTHER_URL: OTHER_RSS})


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def file_storage(tmp_path) -> JsonFileStorage:
    return JsonFileStorage(tmp_path / "feeds.json", tmp_path / "tags.json")


@pytest.fixture
def service(memory_storage, fetcher) -> CatalogService:
    return CatalogService(memory_storage, fetcher=fetcher, refresh_workers=2)


@pytest.fixture
def sample_feeds() -> List[Feed]:
    """Two feeds, three episodes, one with an unparsable date."""
    return [
        make_feed(
            "feed_a",
            "AI Odyssey",
            [
                make_episode("a1", "Large Language Models", "Sat, 31 Jan 2026 23:50:39 GMT",
                             "Talking about transformers."),
                make_episode("a2", "Robot Vacuums", "Thu, 01 Jan 2026 09:00:00 GMT",
                             "Cleaning machines."),
            ],
            image="https://cdn.example.com/a.jpg",
        ),
        make_feed(
            "feed_b",
            "Garden Talk",
            [
                make_episode("b1", "Composting", "Mon, 02 Feb 2026 08:00:00 GMT",
                             "Soil and worms."),
                make_episode("b2", "Mystery Date", "not-a-date", "Unknown date."),
            ],
        ),
    ]
