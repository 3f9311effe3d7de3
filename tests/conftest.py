"""Shared pytest configuration and fixtures."""

import os

# Settings are read at import time; pin them before vision_ocr is imported
os.environ.setdefault(
    "VISION_ANALYZE_URL",
    "https://vision.test/vision/v2.0/read/core/asyncBatchAnalyze",
)
os.environ.pop("VISION_SUBSCRIPTION_KEY", None)

import pytest  # noqa: E402

from vision_ocr.clients.polling import PollingPolicy  # noqa: E402


@pytest.fixture
def fast_policy():
    """No waiting between status checks, no deadline."""
    return PollingPolicy(initial_delay_seconds=0.0, jitter=False, deadline_seconds=None)
