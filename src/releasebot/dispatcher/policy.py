"""Rate-limit detection for HTTP responses."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from datetime import datetime

import httpx

from releasebot.dispatcher.models import ACCEPTED, RateLimitVerdict

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429
RESET_HEADER = "X-RateLimit-Reset"
DEFAULT_FALLBACK_DELAY = 1.0  # seconds
DEFAULT_MAX_DELAY = 3600.0  # seconds
# Epoch seconds stay below this until the year 5138, larger values are milliseconds
MILLISECONDS_THRESHOLD = 1e11


def parse_reset_header(value: str) -> float | None:
    """Parse a rate-limit reset header into an epoch timestamp.

    Accepts epoch seconds (``1700000000``), epoch milliseconds
    (``1700000000000``) or an ISO 8601 date-time (``2024-01-01T10:00Z``).
    Returns None when the value is none of these, negative or not finite.
    """
    value = value.strip()
    try:
        timestamp = float(value)
    except ValueError:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
        except (ValueError, OverflowError):
            return None

    if not math.isfinite(timestamp) or timestamp < 0:
        return None
    if timestamp >= MILLISECONDS_THRESHOLD:
        timestamp /= 1000
    return timestamp


class HttpRateLimitPolicy:
    """Verify function for a RateLimitedDispatcher sending httpx requests.

    A 429 response is rejected and holds the queue until the time given by
    the reset header, or for ``fallback_delay`` seconds when the header is
    missing or unreadable. A reset time further away than ``max_delay``
    seconds is clamped to it. Any other response is accepted with no delay.
    """

    def __init__(
        self,
        fallback_delay: float = DEFAULT_FALLBACK_DELAY,
        clock: Callable[[], float] = time.time,
        reset_header: str = RESET_HEADER,
        max_delay: float = DEFAULT_MAX_DELAY,
    ) -> None:
        self.fallback_delay = fallback_delay
        self.max_delay = max_delay
        self.clock = clock
        self.reset_header = reset_header

    def __call__(self, response: httpx.Response) -> RateLimitVerdict:
        if response.status_code != TOO_MANY_REQUESTS:
            return ACCEPTED

        now = self.clock()
        retry_not_before = None
        header = response.headers.get(self.reset_header)
        if header is not None:
            retry_not_before = parse_reset_header(header)
            if retry_not_before is None:
                logger.warning("Unreadable %s header: %r", self.reset_header, header)

        if retry_not_before is None:
            retry_not_before = now + self.fallback_delay
        elif retry_not_before - now > self.max_delay:
            logger.warning(
                "%s header %r is too far ahead, waiting %.0fs", self.reset_header, header, self.max_delay
            )
            retry_not_before = now + self.max_delay

        logger.info("Rate limited, retrying in %.2fs", max(retry_not_before - now, 0.0))
        return RateLimitVerdict(accepted=False, retry_not_before=retry_not_before)
