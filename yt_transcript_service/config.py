"""Configuration management"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration"""

    def __init__(self):
        # Server Configuration
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "3000"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.enable_debug_endpoint = self._parse_bool(
            os.getenv("ENABLE_DEBUG_ENDPOINT", "true")
        )

        # Transcript Configuration
        self.default_language = os.getenv("DEFAULT_LANGUAGE", "en").strip() or "en"

        # Upstream Request Configuration
        self.request_timeout_seconds = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))
        self.caption_timeout_seconds = float(os.getenv("CAPTION_TIMEOUT_SECONDS", "10"))

        # Optional third-party relay (skipped when either value is missing)
        self.relay_url = self._parse_optional(os.getenv("RELAY_URL"))
        self.relay_api_key = self._parse_optional(os.getenv("RELAY_API_KEY"))

        # Pacing and Retry Configuration
        self.rate_limit_delay_seconds = float(os.getenv("RATE_LIMIT_DELAY_SECONDS", "5"))
        self.block_delay_seconds = float(os.getenv("BLOCK_DELAY_SECONDS", "2"))
        self.minimal_client_delay_seconds = float(
            os.getenv("MINIMAL_CLIENT_DELAY_SECONDS", "1")
        )
        self.chain_retry_attempts = int(os.getenv("CHAIN_RETRY_ATTEMPTS", "3"))
        self.chain_retry_delay_seconds = float(os.getenv("CHAIN_RETRY_DELAY_SECONDS", "2"))

    @property
    def relay_enabled(self) -> bool:
        """Whether the relay strategy has everything it needs to run"""
        return bool(self.relay_url and self.relay_api_key)

    def _parse_optional(self, value: Optional[str]) -> Optional[str]:
        """Treat unset and blank values alike"""
        if value is None or not value.strip():
            return None
        return value.strip()

    def _parse_bool(self, value: str) -> bool:
        """Parse boolean from string"""
        return value.lower() in ("true", "1", "yes", "on")

    def validate(self) -> None:
        """Validate configuration"""
        if not 0 < self.port < 65536:
            raise ValueError("PORT must be between 1 and 65535")

        if self.chain_retry_attempts < 1:
            raise ValueError("CHAIN_RETRY_ATTEMPTS must be at least 1")

        if self.request_timeout_seconds <= 0 or self.caption_timeout_seconds <= 0:
            raise ValueError("Request timeouts must be positive")

        for name in (
            "rate_limit_delay_seconds",
            "block_delay_seconds",
            "minimal_client_delay_seconds",
            "chain_retry_delay_seconds",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name.upper()} cannot be negative")


# Global configuration instance
config = Config()
