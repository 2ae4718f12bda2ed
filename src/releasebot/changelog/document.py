"""Rendering of changelog sections as a Jira rich-text document.

The result is serialized to the Atlassian Document Format (ADF) so it can be
sent as-is in a Jira text-area field. See
https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from releasebot.changelog.models import ChangelogSection
from releasebot.changelog.parser import find_ticket_references

HEADING_LEVEL = 3
UNCLASSIFIED_HEADING = "Other"


@dataclass(frozen=True)
class TextSpan:
    """A run of plain text."""

    text: str

    def to_adf(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class TicketLinkSpan:
    """A ticket reference rendered as a Jira inline card.

    ``text`` is the matched substring as it appears in the message (brackets
    included), ``key`` the ticket key the card points to.
    """

    text: str
    key: str
    url: str

    def to_adf(self) -> dict[str, Any]:
        return {"type": "inlineCard", "attrs": {"url": self.url}}


Span = Union[TextSpan, TicketLinkSpan]


@dataclass(frozen=True)
class Paragraph:
    spans: tuple[Span, ...]

    def to_adf(self) -> dict[str, Any]:
        return {"type": "paragraph", "content": [span.to_adf() for span in self.spans]}


@dataclass(frozen=True)
class ListItem:
    """One bullet, i.e. one commit message split into spans."""

    spans: tuple[Span, ...]

    @property
    def text(self) -> str:
        """The original text, rebuilt from the spans."""
        return "".join(span.text for span in self.spans)

    @property
    def links(self) -> list[TicketLinkSpan]:
        return [span for span in self.spans if isinstance(span, TicketLinkSpan)]

    def to_adf(self) -> dict[str, Any]:
        return {"type": "listItem", "content": [Paragraph(self.spans).to_adf()]}


@dataclass(frozen=True)
class Heading:
    title: str
    level: int = HEADING_LEVEL

    def to_adf(self) -> dict[str, Any]:
        return {
            "type": "heading",
            "attrs": {"level": self.level},
            "content": [TextSpan(self.title).to_adf()],
        }


@dataclass(frozen=True)
class BulletList:
    items: tuple[ListItem, ...]

    def to_adf(self) -> dict[str, Any]:
        return {"type": "bulletList", "content": [item.to_adf() for item in self.items]}


Block = Union[Heading, BulletList, Paragraph]


@dataclass(frozen=True)
class Document:
    """A Jira text-area document."""

    content: tuple[Block, ...]

    @classmethod
    def from_text(cls, text: str) -> Document:
        """Create a document holding a single paragraph of plain text."""
        spans: tuple[Span, ...] = (TextSpan(text),) if text else ()
        return cls(content=(Paragraph(spans),))

    def to_adf(self) -> dict[str, Any]:
        """Serialize to an ADF payload."""
        return {
            "type": "doc",
            "version": 1,
            "content": [block.to_adf() for block in self.content],
        }


def ticket_card_url(jira_base_url: str, ticket_key: str) -> str:
    """URL of the inline card for a ticket."""
    return f"{jira_base_url.rstrip('/')}/browse/{ticket_key}#icft={ticket_key}"


def format_message_line(message: str, jira_base_url: str) -> ListItem:
    """Split a commit message into text runs and ticket links.

    Every ticket reference in the message becomes a link, not only the first
    one. Concatenating the span texts gives back the message unchanged.

    Args:
        message: The commit message.
        jira_base_url: Base URL of the Jira instance, used for link targets.

    Returns:
        A ListItem with the interleaved spans.
    """
    spans: list[Span] = []
    last_index = 0
    for match in find_ticket_references(message):
        start, end = match.span()
        if start > last_index:
            spans.append(TextSpan(message[last_index:start]))
        key = match.group(1).upper()
        spans.append(
            TicketLinkSpan(text=match.group(0), key=key, url=ticket_card_url(jira_base_url, key))
        )
        last_index = end
    if last_index < len(message):
        spans.append(TextSpan(message[last_index:]))
    return ListItem(spans=tuple(spans))


def section_heading(section: ChangelogSection) -> str:
    if section.board is None:
        return UNCLASSIFIED_HEADING
    return f"{section.board} tickets"


def build_changelog_document(sections: Sequence[ChangelogSection], jira_base_url: str) -> Document:
    """Transform changelog sections into a Jira document.

    Each section becomes a heading followed by a bullet list with one item
    per commit.

    Args:
        sections: The ordered changelog sections.
        jira_base_url: Base URL of the Jira instance.

    Returns:
        The Document, ready to be serialized with ``to_adf()``.
    """
    content: list[Block] = []
    for section in sections:
        content.append(Heading(section_heading(section)))
        items = tuple(format_message_line(entry.message, jira_base_url) for entry in section.entries)
        content.append(BulletList(items))
    return Document(content=tuple(content))
