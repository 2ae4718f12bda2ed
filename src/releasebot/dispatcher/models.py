"""Data models for the dispatcher module."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

RequestT = TypeVar("RequestT")


class DispatcherStatus(str, Enum):
    """Scheduling state of a dispatcher."""

    IDLE = "idle"
    RUNNING = "running"
    DELAYED = "delayed"


@dataclass(frozen=True)
class RateLimitVerdict:
    """Outcome of verifying a response.

    Attributes:
        accepted: False when the upstream asked us to slow down; the request
            will be queued again.
        retry_not_before: Epoch timestamp before which no other request may
            start, or None for no delay.
    """

    accepted: bool
    retry_not_before: float | None = None


ACCEPTED = RateLimitVerdict(accepted=True)


@dataclass
class RateLimitedTask(Generic[RequestT]):
    """A submitted request and the future its caller is waiting on."""

    request: RequestT
    future: asyncio.Future[Any]
    attempts: int = 0
