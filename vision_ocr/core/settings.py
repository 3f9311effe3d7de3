"""
Centralized client settings using Pydantic.

All environment variables are read once at import and validated.
Use this instead of scattered os.getenv() calls throughout the codebase.
"""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings

from vision_ocr.core.config import (
    DEFAULT_ANALYZE_URL,
    OCR_CLIENT_TIMEOUT_SECONDS,
    POLL_BACKOFF_MULTIPLIER,
    POLL_DEADLINE_SECONDS,
    POLL_INITIAL_DELAY_SECONDS,
    POLL_MAX_DELAY_SECONDS,
)


class VisionSettings(BaseSettings):
    """Computer Vision Read service configuration."""

    VISION_ANALYZE_URL: str = DEFAULT_ANALYZE_URL
    VISION_SUBSCRIPTION_KEY: Optional[SecretStr] = None
    VISION_CLIENT_TIMEOUT_SECONDS: float = OCR_CLIENT_TIMEOUT_SECONDS
    VISION_VERIFY_SSL: bool = True
    VISION_POLL_INITIAL_DELAY_SECONDS: float = POLL_INITIAL_DELAY_SECONDS
    VISION_POLL_MAX_DELAY_SECONDS: float = POLL_MAX_DELAY_SECONDS
    VISION_POLL_BACKOFF: float = POLL_BACKOFF_MULTIPLIER
    VISION_POLL_MAX_ATTEMPTS: Optional[int] = None
    VISION_POLL_DEADLINE_SECONDS: Optional[float] = POLL_DEADLINE_SECONDS

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}

    @property
    def subscription_key(self) -> Optional[str]:
        """Plain subscription key, or None when not configured."""
        if self.VISION_SUBSCRIPTION_KEY is None:
            return None
        return self.VISION_SUBSCRIPTION_KEY.get_secret_value() or None


class AppSettings(BaseSettings):
    """General logging settings."""

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


# Singleton instances - loaded once at module import
vision_settings = VisionSettings()
app_settings = AppSettings()
