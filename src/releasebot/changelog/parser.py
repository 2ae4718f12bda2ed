"""Extraction of Jira ticket references from commit messages."""

from __future__ import annotations

import re

from releasebot.changelog.models import TicketReference

# Group 1 is the ticket key, groups 2 and 3 its board and number.
# Surrounding brackets are part of the match but not of the key.
TICKET_PATTERN = re.compile(r"\[?\b(([A-Za-z]+)-([0-9]+))\b\]?")


def parse_ticket(message: str) -> TicketReference | None:
    """Extract the first ticket reference from a commit message.

    Args:
        message: The commit message.

    Returns:
        The first TicketReference found, or None if the message has none.
    """
    match = TICKET_PATTERN.search(message)
    if match is None:
        return None
    return TicketReference(board=match.group(2), number=match.group(3))


def find_ticket_references(message: str) -> list[re.Match[str]]:
    """Return every non-overlapping ticket reference match in a message."""
    return list(TICKET_PATTERN.finditer(message))
