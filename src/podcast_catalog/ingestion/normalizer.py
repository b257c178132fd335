"""
Field normalization for inconsistently-shaped feed documents.

Feed dialects disagree on how artwork, durations, identifiers and
descriptions are expressed. The helpers in this module reduce those shapes
to the canonical values stored on ``Feed`` and ``EpisodeRecord``. None of
them raise on missing or malformed input.

Nodes may be feedparser ``FeedParserDict`` objects, plain dicts, or any
object exposing the fields as attributes.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union

from dateutil import parser as date_parser

_DIGITS = re.compile(r"\d+")
_LEADING_INT = re.compile(r"\s*(\d+)")

# Key order used to reduce structured guid values to their text
IDENTIFIER_TEXT_KEYS = ("_", "content", "value", "#text")


def get_field(node: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from a mapping or attribute-style node."""
    if node is None:
        return default
    if isinstance(node, Mapping):
        return node.get(key, default)
    return getattr(node, key, default)


# ---------------------------------------------------------------------------
#  Artwork
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Absent:
    """No usable image value."""


@dataclass(frozen=True)
class StringValue:
    """Image given directly as a URL string."""
    text: str


@dataclass(frozen=True)
class StructuredValue:
    """Image given as an object carrying a ``href`` or ``url`` field."""
    url: str


ImageValue = Union[Absent, StringValue, StructuredValue]


def classify_image(value: Any) -> ImageValue:
    """
    Classify a raw image field into the artwork tagged union.

    Args:
        value: Raw field value (string, mapping/object, or None)

    Returns:
        Absent, StringValue or StructuredValue
    """
    if value is None:
        return Absent()

    if isinstance(value, str):
        return StringValue(value.strip()) if value.strip() else Absent()

    for key in ("href", "url"):
        candidate = get_field(value, key)
        if isinstance(candidate, str) and candidate.strip():
            return StructuredValue(candidate.strip())

    return Absent()


def extract_artwork(node: Any) -> Optional[str]:
    """
    Extract an artwork URL from a feed root or entry.

    Tries the iTunes image reference first, then the plain ``image`` field
    (string form, then structured form).

    Example:
        >>> extract_artwork({"itunes_image": {"href": "https://x/a.jpg"}})
        'https://x/a.jpg'
        >>> extract_artwork({"image": {"url": "https://x/b.png"}})
        'https://x/b.png'
    """
    for key in ("itunes_image", "image"):
        value = classify_image(get_field(node, key))
        if isinstance(value, StringValue):
            return value.text
        if isinstance(value, StructuredValue):
            return value.url
    return None


# ---------------------------------------------------------------------------
#  Duration
# ---------------------------------------------------------------------------

def _leading_int(segment: str) -> int:
    match = _LEADING_INT.match(segment)
    return int(match.group(1)) if match else 0


def normalize_duration(raw: Any) -> Optional[str]:
    """
    Normalize an iTunes duration to total seconds as a string.

    Purely numeric values are already seconds and are returned unchanged.
    Otherwise the value is read as ``[[HH:]MM:]SS`` from right to left, each
    segment defaulting to 0 when it is not numeric.

    Example:
        >>> normalize_duration("1:02:03")
        '3723'
        >>> normalize_duration("45")
        '45'
        >>> normalize_duration("") is None
        True
    """
    if raw is None:
        return None

    text = str(raw)
    if not text:
        return None

    if _DIGITS.fullmatch(text):
        return text

    parts = list(reversed(text.split(":")))
    seconds = 0
    for index, multiplier in enumerate((1, 60, 3600)):
        if index < len(parts) and parts[index]:
            seconds += _leading_int(parts[index]) * multiplier

    return str(seconds)


def _to_seconds(seconds: Any) -> int:
    if seconds is None or seconds == "":
        return 0
    try:
        return int(seconds)
    except (TypeError, ValueError):
        return _leading_int(str(seconds))


def format_duration_short(seconds: Any) -> str:
    """
    Render a duration for episode cards, e.g. ``"1h 2m"`` or ``"45m"``.

    Absent or zero input renders as an empty string.
    """
    total = _to_seconds(seconds)
    if total <= 0:
        return ""

    hours, remainder = divmod(total, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_duration_long(seconds: Any) -> str:
    """
    Render a duration as a clock value, ``"H:MM:SS"`` or ``"M:SS"``.

    Absent or zero input renders as an empty string.
    """
    total = _to_seconds(seconds)
    if total <= 0:
        return ""

    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


# ---------------------------------------------------------------------------
#  Identifiers, descriptions, dates
# ---------------------------------------------------------------------------

def unwrap_identifier(value: Any) -> Optional[str]:
    """
    Reduce a native entry identifier to its primary text value.

    Structured identifiers (e.g. ``{"_": "abc", "isPermaLink": "false"}``)
    are unwrapped using ``IDENTIFIER_TEXT_KEYS`` in order. Returns None when
    no non-empty text is found.
    """
    if value is None:
        return None

    if isinstance(value, Mapping):
        for key in IDENTIFIER_TEXT_KEYS:
            text = get_field(value, key)
            if text is not None and str(text).strip():
                return str(text)
        return None

    text = str(value)
    return text if text.strip() else None


def _content_text(content: Any) -> str:
    """feedparser exposes ``content`` as a list of {"value": ...} dicts."""
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        for item in content:
            text = get_field(item, "value") if not isinstance(item, str) else item
            if text:
                return text
        return ""
    if content is not None:
        return get_field(content, "value") or ""
    return ""


def extract_description(entry: Any) -> str:
    """
    Pick an entry description: rich content, then content snippet, then
    summary. Empty string when none is present.
    """
    for candidate in (
        _content_text(get_field(entry, "content")),
        get_field(entry, "content_snippet"),
        get_field(entry, "summary"),
    ):
        if isinstance(candidate, str) and candidate:
            return candidate
    return ""


def extract_audio_url(entry: Any) -> Optional[str]:
    """Return the URL of the entry's first enclosure, or None."""
    enclosures = get_field(entry, "enclosures") or []
    if enclosures:
        first = enclosures[0]
        return get_field(first, "href") or get_field(first, "url") or None

    # rss-style single enclosure object
    enclosure = get_field(entry, "enclosure")
    if enclosure is not None:
        return get_field(enclosure, "url") or get_field(enclosure, "href") or None
    return None


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and ``Z`` suffix."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def resolve_publish_date(raw: Any, now: Optional[datetime] = None) -> str:
    """
    Publish date policy: keep the source text, default to ingest time.

    A missing date is replaced with the current time, which places the
    entry at the top of date-sorted listings.
    """
    if isinstance(raw, str) and raw.strip():
        return raw
    return utc_now_iso(now)


def parse_pub_date(text: Any) -> Optional[datetime]:
    """
    Best-effort parse of a textual publish date.

    Naive results are assumed to be UTC. Returns None when the text cannot
    be interpreted as a date.
    """
    if not isinstance(text, str) or not text.strip():
        return None

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError, TypeError):
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        # offsets of a day or more cannot be compared or converted
        parsed.utcoffset()
    except (ValueError, OverflowError):
        return None
    return parsed
