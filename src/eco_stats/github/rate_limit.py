"""GitHub API rate limit monitoring."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)

MAX_WAIT_SECONDS = 3600


def _parse_header(response: httpx.Response, name: str, convert):
    raw = response.headers.get(name)
    if raw is None:
        return None
    try:
        return convert(raw.strip())
    except (TypeError, ValueError, AttributeError):
        logger.debug("Ignoring malformed %s header: %r", name, raw)
        return None


class RateLimitMonitor:
    """Tracks the primary rate limit budget from response headers.

    When the remaining budget drops to ``threshold`` the next request waits
    until the window resets.
    """

    def __init__(self, threshold: int = 10) -> None:
        self._remaining: int | None = None
        self._reset_at: float | None = None
        self._threshold = threshold

    @property
    def remaining(self) -> int | None:
        return self._remaining

    def update(self, response: httpx.Response) -> None:
        """Record the budget headers; unparsable values keep the last known state."""
        remaining = _parse_header(response, "X-RateLimit-Remaining", int)
        reset_at = _parse_header(response, "X-RateLimit-Reset", float)
        if remaining is not None:
            self._remaining = remaining
        if reset_at is not None:
            self._reset_at = reset_at

    def seconds_until_reset(self) -> float:
        if (
            self._remaining is None
            or self._remaining > self._threshold
            or self._reset_at is None
        ):
            return 0.0
        wait_seconds = max(0.0, self._reset_at - time.time()) + 1
        return min(wait_seconds, MAX_WAIT_SECONDS)

    async def wait_if_needed(self) -> None:
        wait_seconds = self.seconds_until_reset()
        if wait_seconds > 0:
            logger.warning(
                "Rate limit nearly exhausted (%d left), sleeping %.0fs until reset",
                self._remaining,
                wait_seconds,
            )
            await asyncio.sleep(wait_seconds)
            self._remaining = None
