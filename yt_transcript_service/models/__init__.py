"""Data models for YouTube transcript retrieval"""

from .transcript import TranscriptSegment, CaptionTrack, LanguageOption, TranscriptResult
from .responses import TranscriptResponse, StrategyReport, DebugReport

__all__ = [
    "TranscriptSegment",
    "CaptionTrack",
    "LanguageOption",
    "TranscriptResult",
    "TranscriptResponse",
    "StrategyReport",
    "DebugReport",
]
