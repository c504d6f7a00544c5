"""Timed-text caption markup parsing

YouTube serves caption tracks as XML-like timed text, but the attribute names
carrying the start time and duration vary between responses. Each known
variant ("dialect") is tried in priority order and the first one matching any
tag claims the whole document, even if all of its entries are blank. When none
match, a permissive pass extracts bare ``<text>`` blocks and assigns synthetic
timings.
"""

import logging
import re
from typing import List, Optional, Pattern, Tuple

from ..errors import ParseFailed
from ..models.transcript import TranscriptSegment

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 3.0

# (name, pattern); groups are start, optional duration, text
DIALECTS: List[Tuple[str, Pattern]] = [
    ("dur", re.compile(r'<text start="([^"]+)"[^>]*dur="([^"]+)"[^>]*>([^<]*)</text>')),
    ("duration", re.compile(r'<text start="([^"]+)"[^>]*duration="([^"]+)"[^>]*>([^<]*)</text>')),
    ("start-only", re.compile(r'<text start="([^"]+)"[^>]*>()([^<]*)</text>')),
    ("d", re.compile(r'<text start="([^"]+)"[^>]*d="([^"]+)"[^>]*>([^<]*)</text>')),
    ("start-anywhere", re.compile(r'<text[^>]*start="([^"]+)"[^>]*>()([^<]*)</text>')),
]

_PATTERNS_BY_NAME = dict(DIALECTS)

FALLBACK_PATTERN = re.compile(r"<text[^>]*>([^<]*)</text>")

_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&#x27;": "'",
    "&#x2f;": "/",
    "&#x3c;": "<",
    "&#x3e;": ">",
}
_ENTITY_PATTERN = re.compile(
    r"&(?:amp|lt|gt|quot|#39|apos|#x27|#x2[fF]|#x3[cC]|#x3[eE]);"
)


def unescape_entities(text: str) -> str:
    """Replace the known entity references in a single left-to-right pass.

    ``&amp;amp;`` becomes ``&amp;``; the result is never unescaped again.
    """
    return _ENTITY_PATTERN.sub(lambda m: _ENTITIES[m.group(0).lower()], text)


def _parse_seconds(value: str) -> Optional[float]:
    try:
        seconds = float(value)
    except ValueError:
        return None
    if seconds != seconds or seconds in (float("inf"), float("-inf")):
        return None
    return seconds


def _parse_dialect(pattern: Pattern, markup: str) -> List[TranscriptSegment]:
    segments = []
    for start_raw, duration_raw, text_raw in pattern.findall(markup):
        text = unescape_entities(text_raw).strip()
        if not text:
            continue

        offset = _parse_seconds(start_raw)
        if offset is None or offset < 0:
            continue

        duration = _parse_seconds(duration_raw) if duration_raw else None
        if duration is None:
            duration = DEFAULT_DURATION

        segments.append(TranscriptSegment(text=text, offset=offset, duration=duration))
    return segments


def _parse_fallback(markup: str) -> List[TranscriptSegment]:
    segments = []
    for index, text_raw in enumerate(FALLBACK_PATTERN.findall(markup)):
        text = unescape_entities(text_raw).strip()
        if text:
            segments.append(
                TranscriptSegment(
                    text=text,
                    offset=index * DEFAULT_DURATION,
                    duration=DEFAULT_DURATION,
                )
            )
    return segments


def detect_dialect(markup: str) -> Optional[str]:
    """Name of the first dialect with any entry in the markup, if any

    A dialect claims the document as soon as one of its tags matches, even
    when every matched entry turns out to be empty.
    """
    for name, pattern in DIALECTS:
        if pattern.search(markup):
            return name
    if FALLBACK_PATTERN.search(markup):
        return "fallback"
    return None


def parse_caption_markup(markup: str) -> List[TranscriptSegment]:
    """Parse caption markup into ordered transcript segments

    Args:
        markup: Raw timed-text document as returned by a caption track URL

    Returns:
        Segments in document order

    Raises:
        ParseFailed: If the claiming dialect (or the fallback) yields no non-empty entry
    """
    if not markup or not markup.strip():
        raise ParseFailed("Failed to parse transcript XML: empty document")

    dialect = detect_dialect(markup)
    if dialect == "fallback":
        segments = _parse_fallback(markup)
    elif dialect is not None:
        segments = _parse_dialect(_PATTERNS_BY_NAME[dialect], markup)
    else:
        segments = []

    logger.debug(f"Caption markup dialect: {dialect}, {len(segments)} segments")
    if not segments:
        raise ParseFailed("Failed to parse transcript XML: No transcript entries found in XML")
    return segments
