"""
Tests for feed field normalization.

Covers artwork extraction across feed dialects, duration normalization and
formatting (including the clock round-trip), guid unwrapping, description
precedence, enclosure handling and the publish date policy.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from podcast_catalog.ingestion.normalizer import (
    Absent,
    StringValue,
    StructuredValue,
    classify_image,
    extract_artwork,
    extract_audio_url,
    extract_description,
    format_duration_long,
    format_duration_short,
    normalize_duration,
    parse_pub_date,
    resolve_publish_date,
    unwrap_identifier,
)


# ===================================================================
# Artwork
# ===================================================================

class TestArtwork:

    def test_classify_shapes(self):
        assert classify_image(None) == Absent()
        assert classify_image("") == Absent()
        assert classify_image("https://x/a.jpg") == StringValue("https://x/a.jpg")
        assert classify_image({"href": "https://x/h.jpg"}) == StructuredValue("https://x/h.jpg")
        assert classify_image({"url": "https://x/u.jpg"}) == StructuredValue("https://x/u.jpg")
        assert classify_image({"title": "no url"}) == Absent()
        assert classify_image(42) == Absent()

    def test_whitespace_around_url_is_trimmed(self):
        assert classify_image("  https://x/a.jpg\n") == StringValue("https://x/a.jpg")
        assert extract_artwork({"itunes_image": {"href": " https://x/h.jpg "}}) == "https://x/h.jpg"

    def test_itunes_image_href_wins(self):
        node = {
            "itunes_image": {"href": "https://x/itunes.jpg"},
            "image": "https://x/plain.jpg",
        }
        assert extract_artwork(node) == "https://x/itunes.jpg"

    def test_itunes_image_as_string(self):
        assert extract_artwork({"itunes_image": "https://x/itunes.jpg"}) == "https://x/itunes.jpg"

    def test_plain_string_image(self):
        assert extract_artwork({"image": "https://x/plain.jpg"}) == "https://x/plain.jpg"

    def test_structured_image_url(self):
        assert extract_artwork({"image": {"url": "https://x/rss.png"}}) == "https://x/rss.png"

    def test_attribute_style_node(self):
        node = SimpleNamespace(image=SimpleNamespace(href="https://x/ns.jpg"))
        assert extract_artwork(node) == "https://x/ns.jpg"

    @pytest.mark.parametrize("node", [
        {},
        None,
        {"image": None},
        {"image": {}},
        {"itunes_image": {"href": ""}},
        {"itunes_image": ["not", "an", "object"]},
    ])
    def test_missing_or_malformed_returns_none(self, node):
        assert extract_artwork(node) is None


# ===================================================================
# Duration
# ===================================================================

class TestNormalizeDuration:

    def test_hms(self):
        assert normalize_duration("1:02:03") == "3723"

    def test_plain_seconds_unchanged(self):
        assert normalize_duration("45") == "45"
        assert normalize_duration("0045") == "0045"

    def test_empty_and_none(self):
        assert normalize_duration("") is None
        assert normalize_duration(None) is None

    def test_minutes_seconds(self):
        assert normalize_duration("45:30") == "2730"

    def test_non_numeric_segments_count_as_zero(self):
        assert normalize_duration("xx:10") == "10"
        assert normalize_duration("1:ab:05") == "3605"

    def test_segments_beyond_hours_ignored(self):
        assert normalize_duration("9:1:00:00") == "3600"


class TestFormatDuration:

    @pytest.mark.parametrize("seconds,expected", [
        (59, "0:59"),
        (60, "1:00"),
        (3599, "59:59"),
        (3600, "1:00:00"),
        (3661, "1:01:01"),
        ("3723", "1:02:03"),
    ])
    def test_long(self, seconds, expected):
        assert format_duration_long(seconds) == expected

    @pytest.mark.parametrize("seconds,expected", [
        (59, "0m"),
        (2730, "45m"),
        (3661, "1h 1m"),
        ("7380", "2h 3m"),
    ])
    def test_short(self, seconds, expected):
        assert format_duration_short(seconds) == expected

    @pytest.mark.parametrize("value", [None, "", 0, "0", "abc"])
    def test_absent_or_zero_is_empty(self, value):
        assert format_duration_long(value) == ""
        assert format_duration_short(value) == ""

    @pytest.mark.parametrize("seconds", [59, 60, 3599, 3600, 3661, 86399])
    def test_clock_round_trip(self, seconds):
        assert normalize_duration(format_duration_long(seconds)) == str(seconds)


# ===================================================================
# Identifiers and descriptions
# ===================================================================

class TestUnwrapIdentifier:

    def test_plain_string(self):
        assert unwrap_identifier("guid-1") == "guid-1"

    def test_structured_underscore_first(self):
        assert unwrap_identifier({"_": "a", "content": "b"}) == "a"

    def test_structured_content(self):
        assert unwrap_identifier({"content": "b", "isPermaLink": "false"}) == "b"

    def test_empty_values(self):
        assert unwrap_identifier(None) is None
        assert unwrap_identifier("") is None
        assert unwrap_identifier("   ") is None
        assert unwrap_identifier({"isPermaLink": "false"}) is None

    def test_numeric(self):
        assert unwrap_identifier(1234) == "1234"


class TestDescription:

    def test_content_first(self):
        entry = {
            "content": [{"value": "<p>rich</p>"}],
            "content_snippet": "snippet",
            "summary": "summary",
        }
        assert extract_description(entry) == "<p>rich</p>"

    def test_snippet_then_summary(self):
        assert extract_description({"content_snippet": "snippet", "summary": "s"}) == "snippet"
        assert extract_description({"content": [], "summary": "s"}) == "s"

    def test_string_content(self):
        assert extract_description({"content": "plain rich"}) == "plain rich"

    def test_nothing_is_empty_string(self):
        assert extract_description({}) == ""


class TestAudioUrl:

    def test_first_enclosure_href(self):
        entry = {"enclosures": [{"href": "https://x/1.mp3"}, {"href": "https://x/2.mp3"}]}
        assert extract_audio_url(entry) == "https://x/1.mp3"

    def test_single_enclosure_object(self):
        assert extract_audio_url({"enclosure": {"url": "https://x/e.mp3"}}) == "https://x/e.mp3"

    def test_no_enclosure(self):
        assert extract_audio_url({}) is None
        assert extract_audio_url({"enclosures": []}) is None


# ===================================================================
# Dates
# ===================================================================

class TestPublishDate:

    def test_keeps_source_text(self):
        assert resolve_publish_date("Mon, 01 Jan 2024 12:00:00 GMT") == "Mon, 01 Jan 2024 12:00:00 GMT"

    def test_missing_defaults_to_now(self):
        now = datetime(2026, 2, 4, 0, 0, 30, 183000, tzinfo=timezone.utc)
        assert resolve_publish_date(None, now) == "2026-02-04T00:00:30.183Z"
        assert resolve_publish_date("", now) == "2026-02-04T00:00:30.183Z"

    def test_parse_rfc822(self):
        parsed = parse_pub_date("Sat, 31 Jan 2026 23:50:39 GMT")
        assert parsed == datetime(2026, 1, 31, 23, 50, 39, tzinfo=timezone.utc)

    def test_parse_naive_is_utc(self):
        assert parse_pub_date("2026-01-31T10:00:00").tzinfo is not None

    @pytest.mark.parametrize("value", [None, "", "not-a-date", 12])
    def test_unparsable_is_none(self, value):
        assert parse_pub_date(value) is None

    @pytest.mark.parametrize("value", [
        "Mon, 01 Jan 2024 00:00:00 +9999",
        "2024-01-01T00:00:00+25:00",
    ])
    def test_out_of_range_offset_is_none(self, value):
        assert parse_pub_date(value) is None
