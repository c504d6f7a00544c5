"""Error taxonomy for transcript acquisition"""

from typing import List, Optional, Tuple


class TranscriptServiceError(Exception):
    pass


class InvalidIdentifier(TranscriptServiceError):
    """Input does not resolve to a usable video ID."""

    def __init__(self, provided: Optional[str]):
        self.provided = provided
        super().__init__(f"Invalid YouTube video ID or URL: {provided!r}")


class StrategyError(TranscriptServiceError):
    """A single acquisition strategy failed.

    The class flags drive pacing and retry decisions in the acquisition chain:
    ``blocking_suspected`` inserts the short block delay before the next strategy,
    ``rate_limited`` inserts the longer rate-limit delay, and ``retryable`` marks
    the whole chain as worth re-running.
    """

    blocking_suspected = False
    rate_limited = False
    retryable = False


class NoCaptionsAvailable(StrategyError):
    """The platform listed zero caption tracks."""

    blocking_suspected = True


class MalformedResponse(StrategyError):
    """Upstream answered with something that is not a player response object."""

    blocking_suspected = True
    retryable = True


class UpstreamBlocked(StrategyError):
    """Explicit blocking signal: 403, bot check, sign-in wall."""

    blocking_suspected = True
    retryable = True


class RateLimited(UpstreamBlocked):
    """Upstream answered 429 or reported rate limiting."""

    rate_limited = True


class TransientNetwork(StrategyError):
    """Timeout, connection reset, DNS failure or upstream 5xx."""

    retryable = True


class PlayabilityError(StrategyError):
    """The platform reported the video as unplayable for this client."""


class CaptionTrackUnavailable(StrategyError):
    """Selected track had no fetch URL, or its markup came back empty."""


class ParseFailed(StrategyError):
    """Markup was present but no dialect produced any entries."""


class UpstreamHTTPError(StrategyError):
    """Any other non-success HTTP status from upstream."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AcquisitionFailed(TranscriptServiceError):
    """Every strategy failed (after any whole-chain retries)."""

    def __init__(self, video_id: str, language: str, errors: List[Tuple[str, StrategyError]]):
        self.video_id = video_id
        self.language = language
        self.errors = list(errors)
        super().__init__(self._build_message())

    @property
    def last_strategy(self) -> Optional[str]:
        return self.errors[-1][0] if self.errors else None

    @property
    def last_error(self) -> Optional[StrategyError]:
        return self.errors[-1][1] if self.errors else None

    @property
    def blocking_suspected(self) -> bool:
        return any(err.blocking_suspected for _, err in self.errors)

    @property
    def retryable(self) -> bool:
        return any(err.retryable for _, err in self.errors)

    @property
    def parse_failed(self) -> bool:
        return any(isinstance(err, ParseFailed) for _, err in self.errors)

    def _build_message(self) -> str:
        if not self.errors:
            return "No acquisition strategies were available"

        message = f"All strategies failed. Last ({self.last_strategy}): {self.last_error}"
        if self.blocking_suspected:
            message += " (likely blocked by YouTube from this network)"
        if len(self.errors) > 1:
            summary = "; ".join(f"{name}: {err}" for name, err in self.errors)
            message += f" | All errors: {summary}"
        return message
