"""Data models for the Changelog module."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TicketReference:
    """A reference to a Jira ticket found in a commit message, e.g. ``[CNSMR-123]``.

    Attributes:
        board: The board code, upper-cased (e.g. ``CNSMR``).
        number: The part after the dash (e.g. ``123``).
    """

    board: str
    number: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "board", self.board.upper())

    @property
    def key(self) -> str:
        """The full ticket key, as used by the Jira API (e.g. ``CNSMR-123``)."""
        return f"{self.board}-{self.number}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class ChangelogEntry:
    """One commit message, with the ticket it refers to (if any)."""

    message: str
    ticket: TicketReference | None = None


@dataclass(frozen=True)
class ChangelogSection:
    """Commits grouped under a single Jira board.

    Attributes:
        board: Board code, or None for commits without a ticket reference.
        entries: Entries in their original commit order.
    """

    board: str | None
    entries: tuple[ChangelogEntry, ...] = field(default_factory=tuple)

    @property
    def is_unclassified(self) -> bool:
        return self.board is None

    def ticket_keys(self) -> list[str]:
        """Keys of every ticket referenced in this section, in commit order."""
        return [entry.ticket.key for entry in self.entries if entry.ticket is not None]
