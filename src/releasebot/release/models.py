"""Data models for the Release module."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from releasebot.release.exceptions import InvalidParameterError

BRANCH_PATTERN = re.compile(r"(?P<kind>release|hotfix)/(?:(?P<app>[^/]+)/)?(?P<version>[^/]+)")
BRANCH_FORMAT = "(release|hotfix)/[<app>/]<version>"


@dataclass(frozen=True)
class Repository:
    """A source repository, e.g. "acme/mobile-ios"."""

    full_name: str
    base_branch: str = "develop"


@dataclass(frozen=True)
class Release:
    """A release, described by its release or hotfix branch.

    The branch is parsed on construction: ``release/1.2.3`` and
    ``hotfix/telus/1.2.3`` are valid, anything else raises
    InvalidParameterError.
    """

    repository: Repository
    branch: str
    app_name: str | None = field(init=False)
    version: str = field(init=False)

    def __post_init__(self) -> None:
        match = BRANCH_PATTERN.fullmatch(self.branch)
        if match is None:
            raise InvalidParameterError(key="branch", value=self.branch, expected=BRANCH_FORMAT)
        object.__setattr__(self, "app_name", match.group("app"))
        object.__setattr__(self, "version", match.group("version"))

    @property
    def is_hotfix(self) -> bool:
        return self.branch.startswith("hotfix/")

    @property
    def is_sdk(self) -> bool:
        return (self.app_name or "").lower() == "sdk"


class FixVersionErrorKind(str, Enum):
    """What went wrong while setting Fix Versions."""

    NOT_IN_WHITELIST = "not_in_whitelist"
    VERSION_CREATION_FAILED = "version_creation_failed"
    FIX_VERSION_FAILED = "fix_version_failed"


@dataclass(frozen=True)
class FixVersionError:
    """One failed sub-operation of the Fix Version step.

    Attributes:
        kind: The failed operation.
        subject: Board code, or ticket key for FIX_VERSION_FAILED.
        reason: Description of the underlying error.
        url: Browse URL of the ticket, for FIX_VERSION_FAILED.
    """

    kind: FixVersionErrorKind
    subject: str
    reason: str = ""
    url: str | None = None

    @classmethod
    def not_in_whitelist(cls, board: str) -> FixVersionError:
        return cls(kind=FixVersionErrorKind.NOT_IN_WHITELIST, subject=board)

    @classmethod
    def version_creation_failed(cls, board: str, reason: str) -> FixVersionError:
        return cls(kind=FixVersionErrorKind.VERSION_CREATION_FAILED, subject=board, reason=reason)

    @classmethod
    def fix_version_failed(cls, ticket_key: str, url: str, reason: str) -> FixVersionError:
        return cls(
            kind=FixVersionErrorKind.FIX_VERSION_FAILED,
            subject=ticket_key,
            reason=reason,
            url=url,
        )

    @property
    def message(self) -> str:
        match self.kind:
            case FixVersionErrorKind.NOT_IN_WHITELIST:
                return f"Project `{self.subject}` is not part of our whitelist for creating JIRA versions"
            case FixVersionErrorKind.VERSION_CREATION_FAILED:
                return f"Error creating JIRA release in board `{self.subject}`: {self.reason}"
            case _:
                return f"Error setting Fix Version field for <{self.url}|{self.subject}>: {self.reason}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class FixVersionReport:
    """Outcome of the Fix Version step. No errors means full success.

    Reports are immutable; combine them with ``merge``.
    """

    errors: tuple[FixVersionError, ...] = ()

    @classmethod
    def failure(cls, error: FixVersionError) -> FixVersionReport:
        return cls(errors=(error,))

    @classmethod
    def merge(cls, *reports: FixVersionReport) -> FixVersionReport:
        """Concatenate the errors of several reports, in order."""
        return cls(errors=tuple(error for report in reports for error in report.errors))

    @property
    def succeeded(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(error.message for error in self.errors)

    @property
    def description(self) -> str:
        return "\n".join(f" • {message}" for message in self.messages)

    def status_text(self, release_name: str) -> str:
        """One-line summary for the person who started the release."""
        if self.succeeded:
            return f'✅ Successfully added "{release_name}" in the "Fix Version" field of all tickets'
        return (
            f'❌ Some errors occurred when trying to add "{release_name}" in the "Fix Version" '
            "field of some tickets.\n"
            "Please double-check those tickets; you might need to update some of them manually."
        )
