"""Shared fixtures for all tests."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from yt_transcript_service.config import Config  # noqa: E402


# ── Configuration ──────────────────────────────────────────────────


TEST_ENV = {
    "RELAY_URL": "",
    "RELAY_API_KEY": "",
    "RATE_LIMIT_DELAY_SECONDS": "5",
    "BLOCK_DELAY_SECONDS": "2",
    "MINIMAL_CLIENT_DELAY_SECONDS": "0",
    "CHAIN_RETRY_ATTEMPTS": "3",
    "CHAIN_RETRY_DELAY_SECONDS": "2",
    "DEFAULT_LANGUAGE": "en",
    "ENABLE_DEBUG_ENDPOINT": "true",
}


@pytest.fixture
def make_config():
    """Build a Config from the test environment plus overrides."""

    def _make(**overrides):
        env = dict(TEST_ENV)
        env.update(overrides)
        with patch.dict(os.environ, env, clear=False):
            return Config()

    return _make


@pytest.fixture
def test_config(make_config):
    return make_config()


# ── Sample data factories ──────────────────────────────────────────


@pytest.fixture
def sample_segments():
    """Raw segment dicts for building TranscriptSegment objects."""
    return [
        {"text": "Hello world.", "offset": 0.0, "duration": 2.5},
        {"text": "This is a test.", "offset": 2.5, "duration": 3.0},
        {"text": "Goodbye.", "offset": 5.5, "duration": 1.5},
    ]


@pytest.fixture
def caption_xml():
    """Timed-text document in the common start/dur dialect."""
    return (
        '<?xml version="1.0" encoding="utf-8" ?><transcript>'
        '<text start="0.0" dur="2.5">Hello world.</text>'
        '<text start="2.5" dur="3.0">This is a test.</text>'
        '<text start="5.5" dur="1.5">Goodbye.</text>'
        "</transcript>"
    )


def build_player_response(*tracks, status="OK"):
    """Player response listing the given (languageCode, name) tracks."""
    caption_tracks = []
    for code, name in tracks:
        caption_tracks.append({
            "baseUrl": f"https://www.youtube.com/api/timedtext?v=x&lang={code}",
            "name": {"simpleText": name},
            "languageCode": code,
        })
    response = {"playabilityStatus": {"status": status}}
    if caption_tracks:
        response["captions"] = {
            "playerCaptionsTracklistRenderer": {"captionTracks": caption_tracks}
        }
    return response


@pytest.fixture
def player_response():
    return build_player_response(("en", "English"), ("es", "Spanish"))


def make_response(status_code=200, text="", json_data=None, json_error=False):
    """Minimal stand-in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if json_error:
        resp.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        resp.json.return_value = json_data
    return resp
