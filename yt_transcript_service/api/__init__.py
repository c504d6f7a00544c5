"""API clients for YouTube caption retrieval"""

from .youtube_client import YouTubeClient, resolve_video_id
from .strategies import StrategyProfile, build_strategies
from .transcript_fetcher import TranscriptFetcher

__all__ = [
    "YouTubeClient",
    "resolve_video_id",
    "StrategyProfile",
    "build_strategies",
    "TranscriptFetcher",
]
