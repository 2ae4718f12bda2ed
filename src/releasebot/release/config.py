"""Configuration for the release workflow.

Configuration objects are immutable and injected where needed; nothing in
the workflow reads global state.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from releasebot.jira import JiraClient
from releasebot.slack import SlackNotifier
from releasebot.release.exceptions import InvalidParameterError, MissingParameterError
from releasebot.release.issue import CRPEnvironment
from releasebot.release.models import Release, Repository


class RepoMapping(BaseModel):
    """CRP settings for one app repository."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., min_length=3, pattern=r"^[\w\-\.]+/[\w\-\.]+$")
    base_branch: str = "develop"
    platform: str = Field(..., min_length=1)
    store: str = Field(..., min_length=1)
    environment: CRPEnvironment = CRPEnvironment.NOT_APPLICABLE
    default_app_name: str = "Babylon"
    summary_template: str = "Publish {platform} {app} App v{version} to the {store}"
    version_name_template: str = "{platform} {app} {version}"

    def to_repository(self) -> Repository:
        return Repository(full_name=self.repository, base_branch=self.base_branch)

    def _render(self, template: str, release: Release) -> str:
        return template.format(
            platform=self.platform,
            store=self.store,
            app=release.app_name or self.default_app_name,
            version=release.version,
        )

    def summary(self, release: Release) -> str:
        """Summary of the CRP issue for a release."""
        return self._render(self.summary_template, release)

    def version_name(self, release: Release) -> str:
        """Name of the Jira version created on each board for a release."""
        return self._render(self.version_name_template, release)


class ReleaseConfig(BaseModel):
    """Settings of the release workflow.

    Attributes:
        known_projects: Whitelist of board codes we may create versions on,
            mapped to their Jira project id.
        repos: Repository mappings keyed by short name (e.g. "ios").
        crp_project_id: Jira project id of the CRP board.
        crp_issue_type_id: Issue type id of a CRP code change request.
        accountable_person_id: Default accountable person (Jira account id).
        accountable_people: Per-app accountable person, keyed by lower-case app name.
        release_estimate_days: Days between CRP creation and store release.
        rate_limit_fallback: Seconds to wait after a 429 without reset header.
        reuse_existing_versions: Reuse a board version with the same name
            instead of creating a new one.
    """

    model_config = ConfigDict(frozen=True)

    known_projects: dict[str, int] = Field(default_factory=dict)
    repos: dict[str, RepoMapping] = Field(default_factory=dict)
    crp_project_id: str = "13402"
    crp_issue_type_id: str = "11439"
    accountable_person_id: str = Field(..., min_length=1)
    accountable_people: dict[str, str] = Field(default_factory=dict)
    release_estimate_days: int = Field(default=7, ge=0)
    rate_limit_fallback: float = Field(default=1.0, gt=0)
    reuse_existing_versions: bool = False

    @field_validator("known_projects")
    @classmethod
    def _normalize_boards(cls, value: dict[str, int]) -> dict[str, int]:
        return {board.upper(): project_id for board, project_id in value.items()}

    @field_validator("repos", "accountable_people")
    @classmethod
    def _normalize_names(cls, value: dict[str, object]) -> dict[str, object]:
        return {name.lower(): item for name, item in value.items()}

    def project_id_for(self, board: str) -> int | None:
        """Jira project id of a whitelisted board, or None."""
        return self.known_projects.get(board.upper())

    def resolve_repo(self, name: str) -> RepoMapping:
        """Look up a repository mapping by short name.

        Raises:
            InvalidParameterError: If the name is not configured
        """
        mapping = self.repos.get(name.lower())
        if mapping is None:
            raise InvalidParameterError(key="repo", value=name, expected="|".join(sorted(self.repos)))
        return mapping

    def mapping_for(self, release: Release) -> RepoMapping:
        """Find the mapping of the repository a release belongs to.

        Raises:
            InvalidParameterError: If the repository is not configured
        """
        for mapping in self.repos.values():
            if mapping.repository.lower() == release.repository.full_name.lower():
                return mapping
        raise InvalidParameterError(
            key="repo",
            value=release.repository.full_name,
            expected="|".join(sorted(item.repository for item in self.repos.values())),
        )

    def accountable_person_for(self, release: Release) -> str:
        return self.accountable_people.get((release.app_name or "").lower(), self.accountable_person_id)


def _require(environ: Mapping[str, str], key: str) -> str:
    value = environ.get(key, "").strip()
    if not value:
        raise MissingParameterError(key)
    return value


class JiraSettings(BaseModel):
    """Jira credentials."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., pattern=r"^https?://")
    username: str
    api_token: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> JiraSettings:
        """Read JIRA_BASE_URL, JIRA_USERNAME and JIRA_API_TOKEN.

        Raises:
            MissingParameterError: If a variable is unset or empty
        """
        environ = os.environ if environ is None else environ
        return cls(
            base_url=_require(environ, "JIRA_BASE_URL"),
            username=_require(environ, "JIRA_USERNAME"),
            api_token=_require(environ, "JIRA_API_TOKEN"),
        )

    def create_client(self, config: ReleaseConfig | None = None) -> JiraClient:
        """Create a Jira client with its own dispatcher.

        Args:
            config: Release configuration providing the rate-limit fallback delay.
        """
        return JiraClient(
            base_url=self.base_url,
            username=self.username,
            api_token=self.api_token,
            rate_limit_fallback=config.rate_limit_fallback if config is not None else None,
        )


class SlackSettings(BaseModel):
    """Slack credentials."""

    model_config = ConfigDict(frozen=True)

    token: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SlackSettings:
        """Read SLACK_TOKEN.

        Raises:
            MissingParameterError: If the variable is unset or empty
        """
        environ = os.environ if environ is None else environ
        return cls(token=_require(environ, "SLACK_TOKEN"))

    def create_notifier(self) -> SlackNotifier:
        return SlackNotifier(token=self.token)
