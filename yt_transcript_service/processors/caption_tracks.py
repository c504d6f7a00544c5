"""Caption track listing and language selection"""

from typing import Any, Dict, List, Optional

from ..errors import (
    MalformedResponse,
    NoCaptionsAvailable,
    PlayabilityError,
    RateLimited,
    UpstreamBlocked,
)
from ..models.transcript import CaptionTrack, LanguageOption

# Playability reasons that mean the client was challenged rather than the video being unplayable
BLOCKING_REASON_MARKERS = ("bot", "sign in to confirm", "unusual traffic")
RATE_LIMIT_MARKERS = ("too many requests", "rate limit", "rate-limit", "ratelimit", "quota exceeded")


def _track_name(track: Dict[str, Any]) -> Optional[str]:
    name = track.get("name")
    if not isinstance(name, dict):
        return None
    if name.get("simpleText"):
        return name["simpleText"]
    runs = name.get("runs")
    if isinstance(runs, list):
        text = "".join(run.get("text", "") for run in runs if isinstance(run, dict))
        return text or None
    return None


def mentions_rate_limit(text: Optional[str]) -> bool:
    """Whether upstream text reports throttling"""
    lowered = (text or "").lower()
    return any(marker in lowered for marker in RATE_LIMIT_MARKERS)


def check_playability(player_response: Dict[str, Any]) -> None:
    """Raise if the player response reports the video as unplayable

    Raises:
        RateLimited: If the reason reports throttling
        UpstreamBlocked: If the reason looks like a bot check or sign-in wall
        PlayabilityError: For any other non-OK status
    """
    status = player_response.get("playabilityStatus")
    if not isinstance(status, dict):
        return

    state = status.get("status")
    if not state or state == "OK":
        return

    reason = str(status.get("reason") or state)
    if mentions_rate_limit(reason):
        raise RateLimited(f"Playability check failed ({state}): {reason}")
    if any(marker in reason.lower() for marker in BLOCKING_REASON_MARKERS):
        raise UpstreamBlocked(f"Playability check failed ({state}): {reason}")
    raise PlayabilityError(f"Video not playable ({state}): {reason}")


def extract_caption_tracks(player_response: Any) -> List[CaptionTrack]:
    """Build the caption track listing from a player response

    Args:
        player_response: Decoded player response (expected to be a dict)

    Returns:
        Tracks in listing order

    Raises:
        MalformedResponse: If the response is not a JSON object
        NoCaptionsAvailable: If no tracks are listed
    """
    if not isinstance(player_response, dict):
        raise MalformedResponse(
            f"Invalid player response: expected object, got {type(player_response).__name__}"
        )

    check_playability(player_response)

    captions = player_response.get("captions")
    renderer = captions.get("playerCaptionsTracklistRenderer") if isinstance(captions, dict) else None
    raw_tracks = renderer.get("captionTracks") if isinstance(renderer, dict) else None
    if not isinstance(raw_tracks, list):
        raw_tracks = []

    tracks = []
    for raw in raw_tracks:
        if not isinstance(raw, dict) or not raw.get("languageCode"):
            continue
        code = raw["languageCode"]
        tracks.append(
            CaptionTrack(
                language_code=code,
                display_name=_track_name(raw) or code,
                fetch_url=raw.get("baseUrl") or None,
                kind=raw.get("kind"),
            )
        )

    if not tracks:
        raise NoCaptionsAvailable("No captions found for this video")
    return tracks


def _primary_subtag(code: str) -> str:
    return code.split("-")[0].lower()


def select_caption_track(tracks: List[CaptionTrack], language: str) -> CaptionTrack:
    """Pick the track to fetch for the requested language

    Precedence: exact code, auto-generated track naming the language,
    shared primary subtag, then the first listed track.
    """
    if not tracks:
        raise NoCaptionsAvailable("No captions found for this video")

    for track in tracks:
        if track.language_code == language:
            return track

    # Tracks listed under the placeholder code "auto" only name their language
    for track in tracks:
        if track.language_code == "auto" and language in track.display_name:
            return track

    primary = _primary_subtag(language)
    for track in tracks:
        if _primary_subtag(track.language_code) == primary:
            return track

    return tracks[0]


def available_languages(tracks: List[CaptionTrack]) -> List[LanguageOption]:
    """Distinct languages in listing order"""
    seen = set()
    options = []
    for track in tracks:
        if track.language_code in seen:
            continue
        seen.add(track.language_code)
        options.append(LanguageOption(code=track.language_code, name=track.display_name))
    return options
