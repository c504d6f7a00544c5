"""YouTube Transcript API - Flask web application."""

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .api.transcript_fetcher import TranscriptFetcher
from .api.youtube_client import resolve_video_id
from .config import Config, config
from .errors import AcquisitionFailed
from .models import TranscriptResponse

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "GET /transcript/:videoId": "Get transcript by video ID or URL",
    "POST /transcript": "Get transcript by sending data in request body",
    "GET /debug/:videoId": "Run every strategy and report per-strategy results",
    "GET /health": "Health check",
}
NO_TRANSCRIPT_ERROR = "No transcript available for this video"
INVALID_ID_ERROR = "Invalid YouTube video ID or URL"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _fetcher() -> TranscriptFetcher:
    return current_app.extensions["transcript_fetcher"]


def _settings() -> Config:
    return _fetcher().config


def _resolve(raw: Optional[str]) -> Optional[str]:
    """Resolve an ID or URL, falling back to the raw value"""
    if raw is None:
        return None
    resolved = resolve_video_id(raw)
    if not resolved and "youtu" in raw:
        # A full URL in the path loses its query string to request.args
        resolved = resolve_video_id(request.full_path)
    return resolved or raw.strip() or None


def create_app(fetcher: Optional[TranscriptFetcher] = None) -> Flask:
    """Build the Flask application

    Args:
        fetcher: Transcript fetcher to serve requests with (default: a new one)
    """
    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions["transcript_fetcher"] = fetcher or TranscriptFetcher()

    # ============================================
    # TRANSCRIPT ROUTES
    # ============================================

    @app.route("/transcript/<path:video_id>", methods=["GET"])
    def get_transcript(video_id):
        """Fetch a transcript by ID or URL in the path."""
        lang = request.args.get("lang") or _settings().default_language
        actual_id = _resolve(video_id)

        if not actual_id:
            return jsonify({"error": INVALID_ID_ERROR, "provided": video_id}), 400

        try:
            result = _fetcher().fetch_transcript(actual_id, lang)
        except AcquisitionFailed as e:
            logger.warning(f"Transcript unavailable for {actual_id} ({lang}): {e}")
            return jsonify({
                "error": NO_TRANSCRIPT_ERROR,
                "videoId": video_id,
                "requestedLanguage": lang,
                "details": str(e),
            }), 404

        return jsonify(TranscriptResponse.from_result(actual_id, result).to_json_dict())

    @app.route("/transcript", methods=["POST"])
    def post_transcript():
        """Fetch a transcript by ID or URL in the request body."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = request.form.to_dict()

        video_id = str(data["videoId"]) if data.get("videoId") else None
        video_url = str(data["videoUrl"]) if data.get("videoUrl") else None
        lang = str(data.get("lang") or _settings().default_language)

        if not video_id and not video_url:
            return jsonify({"error": "Please provide either videoId or videoUrl"}), 400

        provided = video_id or video_url
        actual_id = _resolve(video_id) if video_id else resolve_video_id(video_url)
        if not actual_id:
            return jsonify({"error": INVALID_ID_ERROR, "provided": provided}), 400

        try:
            result = _fetcher().fetch_transcript(actual_id, lang)
        except AcquisitionFailed as e:
            logger.warning(f"Transcript fetch failed for {actual_id} ({lang}): {e}")
            return jsonify({
                "error": "Failed to fetch transcript",
                "videoId": actual_id,
                "requestedLanguage": lang,
                "details": str(e),
            }), 500

        return jsonify(TranscriptResponse.from_result(actual_id, result).to_json_dict())

    # ============================================
    # DIAGNOSTICS
    # ============================================

    @app.route("/debug/<path:video_id>", methods=["GET"])
    def debug(video_id):
        """Run every strategy independently for troubleshooting."""
        if not _settings().enable_debug_endpoint:
            return _not_found(None)

        lang = request.args.get("lang") or _settings().default_language
        actual_id = _resolve(video_id)
        if not actual_id:
            return jsonify({"error": INVALID_ID_ERROR, "provided": video_id}), 400

        report = _fetcher().debug_strategies(actual_id, lang)
        return jsonify(report.to_json_dict())

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "OK", "timestamp": _utc_timestamp()})

    @app.route("/")
    def index():
        """Capability listing."""
        return jsonify({"message": "YouTube Transcript API", "endpoints": ENDPOINTS})

    # ============================================
    # ERRORS & HEADERS
    # ============================================

    @app.errorhandler(404)
    def _not_found(error):
        return jsonify({
            "error": "Endpoint not found",
            "availableEndpoints": list(ENDPOINTS) + ["GET /"],
        }), 404

    @app.errorhandler(Exception)
    def _unhandled(error):
        if isinstance(error, HTTPException):
            return jsonify({"error": error.name, "details": error.description}), error.code
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return jsonify({"error": "Internal server error", "details": str(error)}), 500

    @app.after_request
    def _cors(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    create_app().run(host=config.host, port=config.port, debug=False)
