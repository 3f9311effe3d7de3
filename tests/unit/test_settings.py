"""Unit tests for environment-driven settings."""

from vision_ocr.core.config import DEFAULT_ANALYZE_URL
from vision_ocr.core.settings import AppSettings, VisionSettings


def test_vision_defaults(monkeypatch):
    monkeypatch.delenv("VISION_ANALYZE_URL", raising=False)
    monkeypatch.delenv("VISION_SUBSCRIPTION_KEY", raising=False)

    settings = VisionSettings(_env_file=None)

    assert settings.VISION_ANALYZE_URL == DEFAULT_ANALYZE_URL
    assert settings.subscription_key is None
    assert settings.VISION_CLIENT_TIMEOUT_SECONDS == 60
    assert settings.VISION_VERIFY_SSL is True
    assert settings.VISION_POLL_MAX_ATTEMPTS is None


def test_vision_from_env(monkeypatch):
    monkeypatch.setenv("VISION_ANALYZE_URL", "https://eu.vision.test/analyze")
    monkeypatch.setenv("VISION_SUBSCRIPTION_KEY", "secret-key")
    monkeypatch.setenv("VISION_VERIFY_SSL", "false")
    monkeypatch.setenv("VISION_POLL_MAX_ATTEMPTS", "12")

    settings = VisionSettings(_env_file=None)

    assert settings.VISION_ANALYZE_URL == "https://eu.vision.test/analyze"
    assert settings.subscription_key == "secret-key"
    assert "secret-key" not in repr(settings)
    assert settings.VISION_VERIFY_SSL is False
    assert settings.VISION_POLL_MAX_ATTEMPTS == 12


def test_empty_key_is_none(monkeypatch):
    monkeypatch.setenv("VISION_SUBSCRIPTION_KEY", "")

    assert VisionSettings(_env_file=None).subscription_key is None


def test_app_settings(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_JSON", "0")

    settings = AppSettings(_env_file=None)

    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_JSON is False
