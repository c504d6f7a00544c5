"""HTTP client for YouTube's internal player and caption endpoints"""

import json
import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urljoin

import requests

from ..errors import (
    CaptionTrackUnavailable,
    InvalidIdentifier,
    MalformedResponse,
    PlayabilityError,
    RateLimited,
    TransientNetwork,
    UpstreamBlocked,
    UpstreamHTTPError,
)
from ..processors.caption_tracks import mentions_rate_limit
from .strategies import StrategyProfile

logger = logging.getLogger(__name__)

YOUTUBE_BASE_URL = "https://www.youtube.com"
INNERTUBE_PLAYER_URL = f"{YOUTUBE_BASE_URL}/youtubei/v1/player"
LEGACY_VIDEO_INFO_URL = f"{YOUTUBE_BASE_URL}/get_video_info"
WATCH_URL = f"{YOUTUBE_BASE_URL}/watch"

_ID = r"([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"
VIDEO_URL_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/)" + _ID),
    re.compile(r"youtube\.com/(?:shorts|live)/" + _ID),
    re.compile(r"[?&]v=" + _ID),
]
DIRECT_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")

PLAYER_RESPONSE_MARKER = re.compile(r"ytInitialPlayerResponse\s*=\s*")
BLOCKED_PAGE_MARKERS = ("www.google.com/sorry", "unusual traffic from your computer network")


def resolve_video_id(value: Optional[str]) -> Optional[str]:
    """Extract an 11-character video ID from a URL or a bare ID

    URL shapes are tried first, then the whole input as a direct ID.
    Returns None when neither matches.
    """
    if not value:
        return None
    value = value.strip()

    for pattern in VIDEO_URL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)

    if DIRECT_VIDEO_ID.match(value):
        return value

    return None


class YouTubeClient:
    """Client for YouTube's undocumented player endpoints"""

    def __init__(self, session: Optional[requests.Session] = None, caption_timeout: float = 10.0):
        """Initialize client

        Args:
            session: HTTP session to use (a new one is created if omitted)
            caption_timeout: Timeout in seconds for caption markup downloads
        """
        self.session = session or requests.Session()
        self.caption_timeout = caption_timeout

    @staticmethod
    def extract_video_id(video_input: Optional[str]) -> str:
        """Resolve a video ID, falling back to the raw input

        Raises:
            InvalidIdentifier: If the input is empty
        """
        video_id = resolve_video_id(video_input) or (video_input or "").strip()
        if not video_id:
            raise InvalidIdentifier(video_input)
        return video_id

    def _request(self, method: str, url: str, timeout: float, **kwargs) -> requests.Response:
        """Send a request and map transport and status failures to strategy errors"""
        try:
            response = self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.Timeout as e:
            raise TransientNetwork(f"Request timeout after {timeout}s: {url}") from e
        except requests.ConnectionError as e:
            raise TransientNetwork(f"network error: {e}") from e
        except requests.RequestException as e:
            raise UpstreamHTTPError(f"Request failed: {e}") from e

        status = response.status_code
        if status == 429:
            raise RateLimited(f"Rate limited by upstream (HTTP 429): {url}")
        if status == 403:
            raise UpstreamBlocked(f"Access forbidden (HTTP 403): {url}")
        if status >= 500:
            raise TransientNetwork(f"Upstream server error (HTTP {status}): {url}")
        if status >= 400:
            raise UpstreamHTTPError(f"Upstream returned HTTP {status}: {url}", status_code=status)
        return response

    def _headers(self, profile: StrategyProfile, video_id: str, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(profile.headers)
        if profile.send_referer:
            headers["Referer"] = f"{WATCH_URL}?v={video_id}"
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _decode_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"Invalid JSON in upstream response: {e}") from e

    def fetch_innertube_player(self, video_id: str, profile: StrategyProfile) -> Any:
        """POST to the innertube player endpoint as the profile's client"""
        client_context: Dict[str, Any] = {
            "clientName": profile.client_name,
            "clientVersion": profile.client_version,
            "hl": "en",
            "gl": "US",
        }
        client_context.update(profile.client_extra)

        payload: Dict[str, Any] = {"context": {"client": client_context}, "videoId": video_id}
        if profile.client_name == "TVHTML5_SIMPLY_EMBEDDED_PLAYER":
            payload["context"]["thirdParty"] = {"embedUrl": f"{YOUTUBE_BASE_URL}/embed/{video_id}"}

        response = self._request(
            "POST",
            INNERTUBE_PLAYER_URL,
            timeout=profile.timeout_seconds,
            json=payload,
            headers=self._headers(profile, video_id, {"Content-Type": "application/json"}),
        )
        return self._decode_json(response)

    def fetch_legacy_player(self, video_id: str, profile: StrategyProfile) -> Any:
        """GET the legacy video-info endpoint and unwrap its embedded player response"""
        response = self._request(
            "GET",
            LEGACY_VIDEO_INFO_URL,
            timeout=profile.timeout_seconds,
            params={
                "video_id": video_id,
                "html5": "1",
                "c": profile.client_name,
                "cver": profile.client_version,
                "hl": "en",
                "eurl": f"https://youtube.googleapis.com/v/{video_id}",
            },
            headers=self._headers(profile, video_id),
        )

        fields = parse_qs(response.text or "")
        raw_player = fields.get("player_response", [None])[0]
        if not raw_player:
            reason = fields.get("reason", [""])[0]
            if mentions_rate_limit(reason) or mentions_rate_limit(response.text):
                raise RateLimited(f"Legacy endpoint reported rate limiting: {reason or 'no reason given'}")
            if fields.get("status", [""])[0] == "fail":
                reason = reason or "unknown reason"
                raise PlayabilityError(f"Legacy endpoint refused request: {reason}")
            raise MalformedResponse("Legacy response has no player_response field")

        try:
            return json.loads(raw_player)
        except ValueError as e:
            raise MalformedResponse(f"Invalid player_response JSON: {e}") from e

    def fetch_watch_page_player(self, video_id: str, profile: StrategyProfile) -> Any:
        """Scrape the watch page for its embedded initial player response"""
        response = self._request(
            "GET",
            WATCH_URL,
            timeout=profile.timeout_seconds,
            params={"v": video_id},
            headers=self._headers(profile, video_id),
        )
        html = response.text or ""

        match = PLAYER_RESPONSE_MARKER.search(html)
        if not match:
            if mentions_rate_limit(html):
                raise RateLimited("Watch page reported rate limiting instead of video data")
            if any(marker in html for marker in BLOCKED_PAGE_MARKERS):
                raise UpstreamBlocked("Watch page served a bot check instead of video data")
            raise MalformedResponse("Could not find video data in page")

        try:
            player_response, _ = json.JSONDecoder().raw_decode(html, match.end())
        except ValueError as e:
            raise MalformedResponse(f"Invalid embedded player response: {e}") from e
        return player_response

    def fetch_relay(
        self,
        video_id: str,
        language: str,
        profile: StrategyProfile,
        relay_url: str,
        api_key: str,
    ) -> Any:
        """Ask the third-party relay for caption data"""
        response = self._request(
            "GET",
            relay_url,
            timeout=profile.timeout_seconds,
            params={"videoId": video_id, "lang": language},
            headers=self._headers(profile, video_id, {"X-API-Key": api_key}),
        )
        return self._decode_json(response)

    def fetch_caption_markup(self, fetch_url: Optional[str], profile: StrategyProfile) -> str:
        """Download the timed-text markup for a caption track

        Raises:
            CaptionTrackUnavailable: If there is no URL or the body is empty
        """
        if not fetch_url:
            raise CaptionTrackUnavailable("No valid caption URL found")

        url = urljoin(YOUTUBE_BASE_URL, fetch_url)
        response = self._request(
            "GET",
            url,
            timeout=self.caption_timeout,
            headers=dict(profile.caption_headers),
        )

        markup = response.text
        if not markup or not markup.strip():
            raise CaptionTrackUnavailable("Empty transcript response")
        return markup
