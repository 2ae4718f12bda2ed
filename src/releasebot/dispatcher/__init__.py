"""Dispatcher - Serialized, rate-limit-aware request execution."""

from releasebot.dispatcher.dispatcher import RateLimitedDispatcher, accept_all
from releasebot.dispatcher.exceptions import (
    DispatcherClosedError,
    DispatcherError,
    RateLimitExhaustedError,
)
from releasebot.dispatcher.models import (
    ACCEPTED,
    DispatcherStatus,
    RateLimitedTask,
    RateLimitVerdict,
)
from releasebot.dispatcher.policy import HttpRateLimitPolicy, parse_reset_header

__all__ = [
    "ACCEPTED",
    "DispatcherClosedError",
    "DispatcherError",
    "DispatcherStatus",
    "HttpRateLimitPolicy",
    "RateLimitExhaustedError",
    "RateLimitVerdict",
    "RateLimitedDispatcher",
    "RateLimitedTask",
    "accept_all",
    "parse_reset_header",
]
