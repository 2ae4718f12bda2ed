"""Changelog - Parsing, grouping and rendering of release commit messages."""

from releasebot.changelog.document import (
    BulletList,
    Document,
    Heading,
    ListItem,
    Paragraph,
    TextSpan,
    TicketLinkSpan,
    build_changelog_document,
    format_message_line,
)
from releasebot.changelog.grouper import group_changelog, has_sdk_changes
from releasebot.changelog.models import ChangelogEntry, ChangelogSection, TicketReference
from releasebot.changelog.parser import TICKET_PATTERN, find_ticket_references, parse_ticket

__all__ = [
    "TICKET_PATTERN",
    "BulletList",
    "ChangelogEntry",
    "ChangelogSection",
    "Document",
    "Heading",
    "ListItem",
    "Paragraph",
    "TextSpan",
    "TicketLinkSpan",
    "TicketReference",
    "build_changelog_document",
    "find_ticket_references",
    "format_message_line",
    "group_changelog",
    "has_sdk_changes",
    "parse_ticket",
]
