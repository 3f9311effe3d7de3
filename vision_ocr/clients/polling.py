"""Polling policy with exponential backoff, jitter and hard bounds.

Replaces a fixed-interval, unbounded status loop: each wait grows by
``exponential_base`` up to ``max_delay_seconds``, and the loop gives up after
``max_attempts`` status requests or ``deadline_seconds`` of polling.

Example:
    >>> policy = PollingPolicy(initial_delay_seconds=0.5, jitter=False)
    >>> policy.delay_for(2)
    1.125
"""

import random
from dataclasses import dataclass, field
from typing import Optional

from vision_ocr.core.config import (
    POLL_BACKOFF_MULTIPLIER,
    POLL_DEADLINE_SECONDS,
    POLL_INITIAL_DELAY_SECONDS,
    POLL_MAX_DELAY_SECONDS,
    RUNNING_STATUS,
)


@dataclass(frozen=True)
class PollingPolicy:
    """Configuration for the status polling loop.

    Attributes:
        initial_delay_seconds: Wait after the first running status
        max_delay_seconds: Maximum wait between status requests
        exponential_base: Multiplier applied to the wait after every request
        jitter: Whether to scale each wait by a random 50%-150% factor
        max_attempts: Maximum number of status requests, None for no cap
        deadline_seconds: Maximum total polling time, None for no deadline
        running_statuses: Status values that keep the loop going
    """

    initial_delay_seconds: float = POLL_INITIAL_DELAY_SECONDS
    max_delay_seconds: float = POLL_MAX_DELAY_SECONDS
    exponential_base: float = POLL_BACKOFF_MULTIPLIER
    jitter: bool = True
    max_attempts: Optional[int] = None
    deadline_seconds: Optional[float] = POLL_DEADLINE_SECONDS
    running_statuses: frozenset = field(
        default_factory=lambda: frozenset({RUNNING_STATUS})
    )

    def __post_init__(self) -> None:
        if self.initial_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("poll delays must be non-negative")
        if self.exponential_base < 1:
            raise ValueError("exponential_base must be >= 1")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise ValueError("deadline_seconds must be positive")

    @classmethod
    def from_settings(cls, settings=None) -> "PollingPolicy":
        """Build a policy from VISION_POLL_* settings."""
        if settings is None:
            from vision_ocr.core.settings import vision_settings as settings

        return cls(
            initial_delay_seconds=settings.VISION_POLL_INITIAL_DELAY_SECONDS,
            max_delay_seconds=settings.VISION_POLL_MAX_DELAY_SECONDS,
            exponential_base=settings.VISION_POLL_BACKOFF,
            max_attempts=settings.VISION_POLL_MAX_ATTEMPTS,
            deadline_seconds=settings.VISION_POLL_DEADLINE_SECONDS,
        )

    def is_running(self, status: Optional[str]) -> bool:
        return status is not None and status in self.running_statuses

    def delay_for(self, attempt: int) -> float:
        """Wait before status request number ``attempt + 2``.

        Args:
            attempt: Zero-based index of the request that just reported running

        Returns:
            Delay in seconds, capped and optionally jittered
        """
        delay = min(
            self.initial_delay_seconds * (self.exponential_base**attempt),
            self.max_delay_seconds,
        )
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay

    def attempts_exhausted(self, attempts: int) -> bool:
        return self.max_attempts is not None and attempts >= self.max_attempts

    def remaining(self, elapsed: float) -> Optional[float]:
        """Seconds left before the deadline, None when unbounded."""
        if self.deadline_seconds is None:
            return None
        return self.deadline_seconds - elapsed
