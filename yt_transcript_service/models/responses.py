"""Wire shapes returned by the HTTP API and the CLI"""

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .transcript import LanguageOption, TranscriptResult, TranscriptSegment


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class TranscriptResponse(CamelModel):
    """Successful transcript lookup"""

    video_id: str = Field(..., description="Resolved YouTube video ID")
    language: str = Field(..., description="Language code of the returned transcript")
    method: str = Field(..., description="Strategy that produced the transcript")
    transcript: List[TranscriptSegment] = Field(default_factory=list)
    full_text: str = Field("", description="Segment texts joined with single spaces")
    available_languages: List[LanguageOption] = Field(default_factory=list)

    @classmethod
    def from_result(cls, video_id: str, result: TranscriptResult) -> "TranscriptResponse":
        return cls(
            video_id=video_id,
            language=result.language,
            method=result.method,
            transcript=result.segments,
            full_text=result.full_text,
            available_languages=result.available_languages,
        )


class StrategyReport(CamelModel):
    """Outcome of running one strategy in isolation"""

    name: str
    success: bool = False
    skipped: bool = False
    error: Optional[str] = None
    error_type: Optional[str] = None
    processing_time_ms: float = 0.0
    segment_count: int = 0
    language: Optional[str] = None
    available_languages: List[str] = Field(default_factory=list)


class DebugReport(CamelModel):
    """Per-strategy diagnostics for one video"""

    video_id: str
    requested_language: str
    timestamp: datetime = Field(default_factory=_utc_now)
    strategies: List[StrategyReport] = Field(default_factory=list)

    @property
    def any_success(self) -> bool:
        return any(report.success for report in self.strategies)
