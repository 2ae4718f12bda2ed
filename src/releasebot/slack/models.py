"""Data models for Slack notifications."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AttachmentColor(str, Enum):
    """Slack attachment side-bar colors."""

    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class Attachment:
    text: str
    color: AttachmentColor = AttachmentColor.DANGER

    @classmethod
    def warning(cls, text: str) -> Attachment:
        return cls(text=text, color=AttachmentColor.WARNING)

    @classmethod
    def error(cls, text: str) -> Attachment:
        return cls(text=text, color=AttachmentColor.DANGER)

    def to_payload(self) -> dict[str, Any]:
        return {"text": self.text, "color": self.color.value}


@dataclass(frozen=True)
class Notification:
    """A message to deliver to whoever triggered a workflow."""

    text: str
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)


Notify = Callable[[Notification], Awaitable[None]]
