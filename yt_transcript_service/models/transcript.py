"""Transcript data models"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field


class TranscriptSegment(BaseModel):
    """A single segment of a transcript with timestamp"""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, description="The text content of this segment")
    offset: float = Field(..., ge=0, description="Start time in seconds")
    duration: float = Field(3.0, description="Duration in seconds")


class CaptionTrack(BaseModel):
    """One caption track listed by the platform for a video"""

    language_code: str = Field(..., description="Language code (e.g., 'en', 'en-US')")
    display_name: str = Field(..., description="Human readable track name")
    fetch_url: Optional[str] = Field(None, description="Timed-text URL for this track")
    kind: Optional[str] = Field(None, description="Track kind, 'asr' for auto-generated")

    @property
    def is_auto_generated(self) -> bool:
        return self.kind == "asr" or self.language_code == "auto"


class LanguageOption(BaseModel):
    """Language advertised by a caption listing"""

    code: str
    name: str


class TranscriptResult(BaseModel):
    """Complete transcript with metadata"""

    segments: List[TranscriptSegment] = Field(default_factory=list, description="Transcript segments with timestamps")
    language: str = Field(..., description="Language code of the selected track")
    available_languages: List[LanguageOption] = Field(default_factory=list)
    method: str = Field(..., description="Name of the strategy that produced this result")

    @computed_field
    @property
    def full_text(self) -> str:
        """Complete transcript text joined from all segments"""
        return " ".join(segment.text for segment in self.segments)

    @computed_field
    @property
    def word_count(self) -> int:
        """Approximate word count"""
        return len(self.full_text.split())
