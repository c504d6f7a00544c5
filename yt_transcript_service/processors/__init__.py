"""Caption markup parsing and track selection"""

from .caption_parser import parse_caption_markup, unescape_entities
from .caption_tracks import available_languages, extract_caption_tracks, select_caption_track

__all__ = [
    "parse_caption_markup",
    "unescape_entities",
    "available_languages",
    "extract_caption_tracks",
    "select_caption_track",
]
