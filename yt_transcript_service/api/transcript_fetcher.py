"""Transcript acquisition across multiple upstream strategies"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from ..config import Config, config as default_config
from ..errors import (
    AcquisitionFailed,
    MalformedResponse,
    ParseFailed,
    StrategyError,
)
from ..models import DebugReport, LanguageOption, StrategyReport, TranscriptResult, TranscriptSegment
from ..processors import (
    available_languages,
    extract_caption_tracks,
    parse_caption_markup,
    select_caption_track,
    unescape_entities,
)
from .strategies import StrategyProfile, build_strategies
from .youtube_client import YouTubeClient

logger = logging.getLogger(__name__)


def _is_retryable_failure(exc: BaseException) -> bool:
    return isinstance(exc, AcquisitionFailed) and exc.retryable


class TranscriptFetcher:
    """Fetch YouTube transcripts by trying each configured strategy in turn"""

    def __init__(
        self,
        client: Optional[YouTubeClient] = None,
        strategies: Optional[List[StrategyProfile]] = None,
        cfg: Optional[Config] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize transcript fetcher

        Args:
            client: Upstream HTTP client
            strategies: Ordered strategy table (defaults to build_strategies(cfg))
            cfg: Configuration (defaults to the global config)
            sleep: Function used for every pacing and retry delay
        """
        self.config = cfg or default_config
        self.client = client or YouTubeClient(caption_timeout=self.config.caption_timeout_seconds)
        self.strategies = strategies if strategies is not None else build_strategies(self.config)
        self._sleep = sleep

    def is_enabled(self, profile: StrategyProfile) -> bool:
        """Relay strategies only run when the relay is configured"""
        return profile.endpoint != "relay" or self.config.relay_enabled

    def fetch_transcript(self, video_id: str, language: Optional[str] = None) -> TranscriptResult:
        """Fetch a transcript, re-running the whole chain on transient failures

        Args:
            video_id: YouTube video ID
            language: Preferred language code (defaults to config.default_language)

        Returns:
            TranscriptResult from the first strategy that succeeded

        Raises:
            AcquisitionFailed: If every strategy failed on every attempt
        """
        language = language or self.config.default_language
        delay = self.config.chain_retry_delay_seconds

        retrying = Retrying(
            stop=stop_after_attempt(self.config.chain_retry_attempts),
            wait=wait_incrementing(start=delay, increment=delay),
            retry=retry_if_exception(_is_retryable_failure),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._run_chain, video_id, language)

    def _run_chain(self, video_id: str, language: str) -> TranscriptResult:
        """Try each enabled strategy in order until one succeeds"""
        enabled = [profile for profile in self.strategies if self.is_enabled(profile)]
        errors = []

        for index, profile in enumerate(enabled):
            logger.info(f"Trying {profile.name} for {video_id} (lang={language})")
            try:
                result = self.run_strategy(profile, video_id, language)
            except StrategyError as e:
                errors.append((profile.name, e))
                logger.warning(f"{profile.name} failed for {video_id}: {type(e).__name__}: {e}")
                if index < len(enabled) - 1:
                    self._pace(e)
                continue

            logger.info(
                f"{profile.name} succeeded for {video_id}: "
                f"{len(result.segments)} segments in {result.language}"
            )
            return result

        raise AcquisitionFailed(video_id, language, errors)

    def _pace(self, error: StrategyError) -> None:
        """Wait before the next strategy when the failure hints at throttling"""
        if error.rate_limited:
            wait = self.config.rate_limit_delay_seconds
            logger.info(f"Rate limiting detected, waiting {wait}s before next strategy")
        elif error.blocking_suspected:
            wait = self.config.block_delay_seconds
            logger.info(f"Possible blocking detected, waiting {wait}s before next strategy")
        else:
            return

        if wait > 0:
            self._sleep(wait)

    def _fetch_player_response(self, profile: StrategyProfile, video_id: str) -> Any:
        if profile.endpoint == "innertube":
            return self.client.fetch_innertube_player(video_id, profile)
        if profile.endpoint == "get_video_info":
            return self.client.fetch_legacy_player(video_id, profile)
        if profile.endpoint == "watch_page":
            return self.client.fetch_watch_page_player(video_id, profile)
        raise ValueError(f"Unsupported endpoint for player lookup: {profile.endpoint}")

    def run_strategy(self, profile: StrategyProfile, video_id: str, language: str) -> TranscriptResult:
        """Run a single strategy end to end

        Raises:
            StrategyError: Any failure along the way (lookup, selection, download, parse)
        """
        if profile.request_delay_seconds > 0:
            self._sleep(profile.request_delay_seconds)

        if profile.endpoint == "relay":
            payload = self.client.fetch_relay(
                video_id,
                language,
                profile,
                relay_url=self.config.relay_url,
                api_key=self.config.relay_api_key,
            )
            if isinstance(payload, dict) and "transcript" in payload:
                return self._result_from_relay(payload, language, profile)
            player_response = payload
        else:
            player_response = self._fetch_player_response(profile, video_id)

        tracks = extract_caption_tracks(player_response)
        track = select_caption_track(tracks, language)
        logger.debug(
            f"{profile.name} selected {track.language_code} track "
            f"({'auto-generated' if track.is_auto_generated else 'manual'}) of {len(tracks)} listed"
        )

        if profile.request_delay_seconds > 0:
            self._sleep(profile.request_delay_seconds)

        markup = self.client.fetch_caption_markup(track.fetch_url, profile)
        segments = parse_caption_markup(markup)

        return TranscriptResult(
            segments=segments,
            language=track.language_code,
            available_languages=available_languages(tracks),
            method=profile.name,
        )

    def _result_from_relay(
        self, payload: Dict[str, Any], language: str, profile: StrategyProfile
    ) -> TranscriptResult:
        """Build a result from a relay that returns ready-made segments"""
        items = payload.get("transcript")
        if not isinstance(items, list):
            raise MalformedResponse("Relay transcript field is not a list")

        segments = []
        for item in items:
            if not isinstance(item, dict):
                continue
            text = unescape_entities(str(item.get("text") or "")).strip()
            if not text:
                continue
            try:
                offset = float(item.get("offset", item.get("start", 0.0)))
                duration = float(item.get("duration", item.get("dur", 3.0)))
            except (TypeError, ValueError):
                continue
            if offset < 0:
                continue
            segments.append(TranscriptSegment(text=text, offset=offset, duration=duration))

        if not segments:
            raise ParseFailed("No transcript content found in relay response")

        resolved = payload.get("language") or language
        languages = []
        for entry in payload.get("availableLanguages") or []:
            if isinstance(entry, dict) and entry.get("code"):
                languages.append(LanguageOption(code=entry["code"], name=entry.get("name") or entry["code"]))
            elif isinstance(entry, str) and entry:
                languages.append(LanguageOption(code=entry, name=entry))
        if resolved not in {option.code for option in languages}:
            languages.append(LanguageOption(code=resolved, name=resolved))

        return TranscriptResult(
            segments=segments,
            language=resolved,
            available_languages=languages,
            method=profile.name,
        )

    def debug_strategies(self, video_id: str, language: Optional[str] = None) -> DebugReport:
        """Run every strategy independently and report each outcome

        No short-circuiting, pacing or whole-chain retry is applied.
        """
        language = language or self.config.default_language
        report = DebugReport(video_id=video_id, requested_language=language)

        for profile in self.strategies:
            if not self.is_enabled(profile):
                report.strategies.append(
                    StrategyReport(
                        name=profile.name,
                        skipped=True,
                        error="Relay not configured (set RELAY_URL and RELAY_API_KEY)",
                    )
                )
                continue

            start = time.perf_counter()
            try:
                result = self.run_strategy(profile, video_id, language)
            except StrategyError as e:
                report.strategies.append(
                    StrategyReport(
                        name=profile.name,
                        error=str(e),
                        error_type=type(e).__name__,
                        processing_time_ms=round((time.perf_counter() - start) * 1000, 1),
                    )
                )
                continue

            report.strategies.append(
                StrategyReport(
                    name=profile.name,
                    success=True,
                    processing_time_ms=round((time.perf_counter() - start) * 1000, 1),
                    segment_count=len(result.segments),
                    language=result.language,
                    available_languages=[option.code for option in result.available_languages],
                )
            )

        return report
