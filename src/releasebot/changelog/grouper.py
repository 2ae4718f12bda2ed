"""Grouping of commit messages into per-board changelog sections."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from releasebot.changelog.models import ChangelogEntry, ChangelogSection
from releasebot.changelog.parser import parse_ticket

if TYPE_CHECKING:
    from collections.abc import Iterable

    from releasebot.release.models import Release

logger = logging.getLogger(__name__)

SDK_MARKER = "#SDK"
SDK_TICKET_PATTERN = re.compile(r"\bSDKS?-[0-9]+\b")


def has_sdk_changes(message: str) -> bool:
    """Whether a commit message is tagged as touching the SDK."""
    return SDK_MARKER in message or SDK_TICKET_PATTERN.search(message) is not None


def group_changelog(messages: Iterable[str], release: Release) -> list[ChangelogSection]:
    """Filter, parse and group commit messages by Jira board.

    SDK releases only keep the commits tagged as SDK changes. Sections are
    ordered by board name, with the unclassified section (no ticket) last.
    Entries keep their original order inside each section.

    Args:
        messages: Commit messages gathered between the last release and this one.
        release: The release the changelog is built for.

    Returns:
        The ordered list of ChangelogSection.
    """
    messages = list(messages)
    if release.is_sdk:
        retained = [message for message in messages if has_sdk_changes(message)]
        logger.debug("SDK release: kept %d of %d commits", len(retained), len(messages))
    else:
        retained = messages

    groups: dict[str | None, list[ChangelogEntry]] = {}
    for message in retained:
        ticket = parse_ticket(message)
        board = ticket.board if ticket is not None else None
        groups.setdefault(board, []).append(ChangelogEntry(message=message, ticket=ticket))

    ordered_boards = sorted(groups, key=lambda board: (board is None, board or ""))
    sections = [ChangelogSection(board=board, entries=tuple(groups[board])) for board in ordered_boards]

    logger.info(
        "Grouped %d commits into %d changelog sections for %s",
        len(retained),
        len(sections),
        release.branch,
    )
    return sections
