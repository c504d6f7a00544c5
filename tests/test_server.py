"""Tests for the Flask HTTP API (no network)."""

from unittest.mock import MagicMock

import pytest

from conftest import build_player_response
from yt_transcript_service.api.transcript_fetcher import TranscriptFetcher
from yt_transcript_service.api.youtube_client import YouTubeClient
from yt_transcript_service.errors import AcquisitionFailed, NoCaptionsAvailable, PlayabilityError
from yt_transcript_service.models import (
    DebugReport,
    LanguageOption,
    StrategyReport,
    TranscriptResult,
    TranscriptSegment,
)
from yt_transcript_service.server import create_app

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.fixture
def fetcher(test_config, sample_segments):
    mock = MagicMock(spec=TranscriptFetcher)
    mock.config = test_config
    mock.fetch_transcript.return_value = TranscriptResult(
        segments=[TranscriptSegment(**s) for s in sample_segments],
        language="en",
        available_languages=[LanguageOption(code="en", name="English")],
        method="innertube-web",
    )
    return mock


@pytest.fixture
def http(fetcher):
    app = create_app(fetcher)
    app.testing = True
    return app.test_client()


def _failure():
    return AcquisitionFailed(VIDEO_ID, "en", [("innertube-web", NoCaptionsAvailable("No captions found for this video"))])


# ── GET /transcript ────────────────────────────────────────────────


class TestGetTranscript:
    def test_success(self, http, fetcher):
        resp = http.get(f"/transcript/{VIDEO_ID}")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["videoId"] == VIDEO_ID
        assert data["language"] == "en"
        assert data["method"] == "innertube-web"
        assert len(data["transcript"]) == 3
        assert data["fullText"] == " ".join(seg["text"] for seg in data["transcript"])
        assert data["availableLanguages"] == [{"code": "en", "name": "English"}]
        fetcher.fetch_transcript.assert_called_once_with(VIDEO_ID, "en")

    def test_lang_query(self, http, fetcher):
        http.get(f"/transcript/{VIDEO_ID}?lang=es")
        fetcher.fetch_transcript.assert_called_once_with(VIDEO_ID, "es")

    def test_url_in_path(self, http, fetcher):
        resp = http.get(f"/transcript/youtu.be/{VIDEO_ID}")
        assert resp.status_code == 200
        fetcher.fetch_transcript.assert_called_once_with(VIDEO_ID, "en")

    def test_watch_url_query_recovered(self, http, fetcher):
        resp = http.get(f"/transcript/youtube.com/watch?v={VIDEO_ID}")
        assert resp.status_code == 200
        fetcher.fetch_transcript.assert_called_once_with(VIDEO_ID, "en")

    def test_unavailable(self, http, fetcher):
        fetcher.fetch_transcript.side_effect = _failure()

        resp = http.get(f"/transcript/{VIDEO_ID}?lang=de")

        assert resp.status_code == 404
        data = resp.get_json()
        assert data["error"] == "No transcript available for this video"
        assert data["videoId"] == VIDEO_ID
        assert data["requestedLanguage"] == "de"
        assert "All strategies failed" in data["details"]


# ── POST /transcript ───────────────────────────────────────────────


class TestPostTranscript:
    def test_video_id(self, http, fetcher):
        resp = http.post("/transcript", json={"videoId": VIDEO_ID, "lang": "es"})
        assert resp.status_code == 200
        fetcher.fetch_transcript.assert_called_once_with(VIDEO_ID, "es")

    def test_video_url(self, http, fetcher):
        resp = http.post("/transcript", json={"videoUrl": f"https://www.youtube.com/watch?v={VIDEO_ID}"})
        assert resp.status_code == 200
        assert resp.get_json()["videoId"] == VIDEO_ID
        fetcher.fetch_transcript.assert_called_once_with(VIDEO_ID, "en")

    def test_form_body(self, http, fetcher):
        resp = http.post("/transcript", data={"videoId": VIDEO_ID})
        assert resp.status_code == 200

    def test_missing_identifier(self, http, fetcher):
        resp = http.post("/transcript", json={"lang": "en"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Please provide either videoId or videoUrl"
        fetcher.fetch_transcript.assert_not_called()

    def test_invalid_url(self, http, fetcher):
        resp = http.post("/transcript", json={"videoUrl": "https://example.com/nothing"})
        assert resp.status_code == 400
        data = resp.get_json()
        assert data["error"] == "Invalid YouTube video ID or URL"
        assert data["provided"] == "https://example.com/nothing"
        fetcher.fetch_transcript.assert_not_called()

    def test_failure(self, http, fetcher):
        fetcher.fetch_transcript.side_effect = _failure()

        resp = http.post("/transcript", json={"videoId": VIDEO_ID})

        assert resp.status_code == 500
        data = resp.get_json()
        assert data["error"] == "Failed to fetch transcript"
        assert data["videoId"] == VIDEO_ID
        assert data["requestedLanguage"] == "en"
        assert "No captions found" in data["details"]


# ── Diagnostics and misc ───────────────────────────────────────────


class TestDebugEndpoint:
    def test_report(self, http, fetcher):
        fetcher.debug_strategies.return_value = DebugReport(
            video_id=VIDEO_ID,
            requested_language="en",
            strategies=[StrategyReport(name="innertube-web", success=True, segment_count=3, language="en")],
        )

        resp = http.get(f"/debug/{VIDEO_ID}")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["videoId"] == VIDEO_ID
        assert data["strategies"][0]["segmentCount"] == 3
        fetcher.debug_strategies.assert_called_once_with(VIDEO_ID, "en")

    def test_disabled(self, make_config, fetcher):
        fetcher.config = make_config(ENABLE_DEBUG_ENDPOINT="false")
        app = create_app(fetcher)

        resp = app.test_client().get(f"/debug/{VIDEO_ID}")

        assert resp.status_code == 404
        fetcher.debug_strategies.assert_not_called()


class TestMisc:
    def test_health(self, http):
        resp = http.get("/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "OK"
        assert data["timestamp"].endswith("Z")

    def test_index(self, http):
        data = http.get("/").get_json()
        assert data["message"] == "YouTube Transcript API"
        assert "GET /transcript/:videoId" in data["endpoints"]

    def test_unknown_route(self, http):
        resp = http.get("/nope")
        assert resp.status_code == 404
        data = resp.get_json()
        assert data["error"] == "Endpoint not found"
        assert "POST /transcript" in data["availableEndpoints"]

    def test_cors_headers(self, http):
        resp = http.get("/health")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]

    def test_method_not_allowed(self, http):
        resp = http.delete("/health")
        assert resp.status_code == 405


# ── End to end with a mocked upstream ─────────────────────────────


class TestEndToEnd:
    @pytest.fixture
    def upstream(self, caption_xml):
        client = MagicMock(spec=YouTubeClient)
        client.fetch_innertube_player.return_value = build_player_response(("en", "English"))
        client.fetch_legacy_player.side_effect = PlayabilityError("refused")
        client.fetch_watch_page_player.side_effect = PlayabilityError("refused")
        client.fetch_caption_markup.return_value = caption_xml
        return client

    def test_transcript_served(self, upstream, test_config):
        fetcher = TranscriptFetcher(client=upstream, cfg=test_config, sleep=MagicMock())
        resp = create_app(fetcher).test_client().get(f"/transcript/{VIDEO_ID}?lang=en")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["language"] == "en"
        assert data["transcript"]
        assert data["fullText"] == " ".join(seg["text"] for seg in data["transcript"])

    def test_no_tracks_is_not_found(self, upstream, test_config):
        upstream.fetch_innertube_player.return_value = {"playabilityStatus": {"status": "OK"}}
        fetcher = TranscriptFetcher(client=upstream, cfg=test_config, sleep=MagicMock())

        resp = create_app(fetcher).test_client().get(f"/transcript/{VIDEO_ID}")

        assert resp.status_code == 404
        assert resp.get_json()["error"] == "No transcript available for this video"
