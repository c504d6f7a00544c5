"""Acquisition strategy profiles

Each profile describes one way of asking YouTube (or a relay) for caption data:
which endpoint shape to hit, which client identity to present, which headers to
send and how long to wait. A single executor in ``TranscriptFetcher`` runs them
in order.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..config import Config, config as default_config

Endpoint = Literal["innertube", "relay", "get_video_info", "watch_page"]

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
ANDROID_USER_AGENT = "com.google.android.youtube/19.09.37 (Linux; U; Android 11) gzip"
TV_USER_AGENT = (
    "Mozilla/5.0 (PlayStation; PlayStation 4/12.00) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/15.4 Safari/605.1.15"
)

WEB_HEADERS = {
    "User-Agent": DESKTOP_USER_AGENT,
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
    "Origin": "https://www.youtube.com",
    "Connection": "keep-alive",
    "Cache-Control": "no-cache",
}
PAGE_HEADERS = {
    "User-Agent": DESKTOP_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
}
CAPTION_HEADERS = {
    "User-Agent": DESKTOP_USER_AGENT,
    "Accept": "application/xml, text/xml, */*",
    "Accept-Language": "en-US,en;q=0.9",
}


class StrategyProfile(BaseModel):
    """Configuration record for one acquisition strategy"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name reported as the result's method")
    endpoint: Endpoint = Field(..., description="Upstream endpoint shape")
    client_name: Optional[str] = Field(None, description="Innertube client name")
    client_version: Optional[str] = Field(None, description="Innertube client version")
    client_extra: Dict[str, Any] = Field(default_factory=dict, description="Extra innertube client context")
    headers: Dict[str, str] = Field(default_factory=dict, description="Headers for the metadata request")
    caption_headers: Dict[str, str] = Field(default_factory=lambda: dict(CAPTION_HEADERS))
    send_referer: bool = Field(True, description="Add a watch-page Referer header")
    timeout_seconds: float = Field(15.0, description="Metadata request timeout")
    request_delay_seconds: float = Field(0.0, description="Pause before each upstream request")


def build_strategies(cfg: Optional[Config] = None) -> List[StrategyProfile]:
    """Ordered strategy table for the given configuration

    The relay profile is always present; the fetcher skips it when the relay
    is not configured.
    """
    cfg = cfg or default_config
    timeout = cfg.request_timeout_seconds

    return [
        StrategyProfile(
            name="innertube-web",
            endpoint="innertube",
            client_name="WEB",
            client_version="2.20250710.09.00",
            headers=dict(WEB_HEADERS),
            timeout_seconds=timeout,
        ),
        StrategyProfile(
            name="innertube-android",
            endpoint="innertube",
            client_name="ANDROID",
            client_version="19.09.37",
            client_extra={"androidSdkVersion": 30, "osName": "Android", "osVersion": "11"},
            headers={
                "User-Agent": ANDROID_USER_AGENT,
                "Accept": "application/json",
                "X-YouTube-Client-Name": "3",
                "X-YouTube-Client-Version": "19.09.37",
            },
            caption_headers={"User-Agent": ANDROID_USER_AGENT, "Accept": "*/*"},
            send_referer=False,
            timeout_seconds=timeout,
        ),
        StrategyProfile(
            name="relay-service",
            endpoint="relay",
            headers={"Accept": "application/json"},
            send_referer=False,
            timeout_seconds=max(timeout, 20.0),
        ),
        StrategyProfile(
            name="innertube-tv",
            endpoint="innertube",
            client_name="TVHTML5_SIMPLY_EMBEDDED_PLAYER",
            client_version="2.0",
            client_extra={"clientScreen": "EMBED"},
            headers={
                "User-Agent": TV_USER_AGENT,
                "Accept": "application/json",
                "X-YouTube-Client-Name": "85",
                "X-YouTube-Client-Version": "2.0",
            },
            caption_headers={"User-Agent": TV_USER_AGENT, "Accept": "*/*"},
            timeout_seconds=timeout,
        ),
        StrategyProfile(
            name="innertube-web-minimal",
            endpoint="innertube",
            client_name="WEB",
            client_version="2.20250710.09.00",
            headers={"User-Agent": DESKTOP_USER_AGENT},
            caption_headers={"User-Agent": DESKTOP_USER_AGENT},
            send_referer=False,
            timeout_seconds=min(timeout, 10.0),
            request_delay_seconds=cfg.minimal_client_delay_seconds,
        ),
        StrategyProfile(
            name="legacy-get-video-info",
            endpoint="get_video_info",
            client_name="TVHTML5",
            client_version="7.20220325",
            headers={"User-Agent": DESKTOP_USER_AGENT, "Accept-Language": "en-US,en;q=0.9"},
            send_referer=False,
            timeout_seconds=min(timeout, 10.0),
        ),
        StrategyProfile(
            name="page-parsing",
            endpoint="watch_page",
            headers=dict(PAGE_HEADERS),
            send_referer=False,
            timeout_seconds=timeout,
        ),
    ]
