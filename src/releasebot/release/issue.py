"""Builder for the CRP tracking issue.

A CRP ("Change Request Process") issue tracks an upcoming app release on the
release plan board. Its fields are Jira custom fields whose option ids are
specific to that board.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

from releasebot.changelog import Document

if TYPE_CHECKING:
    from releasebot.release.config import ReleaseConfig, RepoMapping
    from releasebot.release.models import Release


class CRPEnvironment(str, Enum):
    PLAY_STORE = "12394"
    APP_STORE = "12395"
    NOT_APPLICABLE = "12396"


class ReleaseType(str, Enum):
    MAJOR = "12651"
    MINOR = "12652"
    PATCH = "12653"

    @classmethod
    def from_version(cls, version: str) -> ReleaseType:
        """Infer the release type from an ``x.y.z`` version.

        Any suffix after the numeric part (e.g. ``-rc1``) is ignored.
        Versions with more than three components are patch releases.
        """
        match = re.match(r"[0-9.]*", version)
        numeric = match.group(0) if match else ""
        components = [comp for comp in numeric.split(".") if comp]
        if len(components) > 3:
            return cls.PATCH
        minor = components[1] if len(components) > 1 else "0"
        patch = components[2] if len(components) > 2 else "0"
        if int(minor) == 0 and int(patch) == 0:
            return cls.MAJOR
        if int(patch) == 0:
            return cls.MINOR
        return cls.PATCH


class InfoSecStatus(str, Enum):
    YES = "11942"
    NO = "11941"


class ClinicalApproval(str, Enum):
    APPROVED = "12568"
    UNAPPROVED = "12566"
    NOT_REQUIRED = "12567"


class RegulatoryApproval(str, Enum):
    APPROVED = "12571"
    UNAPPROVED = "12569"
    NOT_REQUIRED = "12570"


# Custom field ids on the CRP board
CHANGELOG_FIELD = "customfield_12537"
ENVIRONMENTS_FIELD = "customfield_12592"
RELEASE_TYPE_FIELD = "customfield_12794"
TARGET_DATE_FIELD = "customfield_11514"
CHANGE_SCOPE_FIELD = "customfield_12538"
TESTING_FIELD = "customfield_11512"
ACCOUNTABLE_PERSON_FIELD = "customfield_11505"
INFOSEC_FIELD = "customfield_12527"
SERVICE_CHANGES_FIELD = "customfield_13350"
CLINICAL_APPROVAL_FIELD = "customfield_12762"
REGULATORY_APPROVAL_FIELD = "customfield_12763"

CHANGE_SCOPE_TEXT = (
    "The headlines for this release are:\n"
    "There are a number of tickets from the Changelog that are yet to be moved to a completed "
    "status or resolution in their respective workflow. Each of these have been reviewed and "
    "commented on with why they do not impact the release, yet are in the codebase. "
    "These tickets are:"
)
TESTING_TEXT = (
    "Test plan -\n"
    "TestRail milestone (automated & manual test runs) -\n"
    "CI branch pipeline (automated unit tests and build) -\n"
    "Internal release notes/QA sign-off -"
)
SERVICE_CHANGES_TEXT = "Product Changes: \nService Changes: \nBOM:"


def target_date(config: ReleaseConfig, today: date | None = None) -> date:
    """Estimated store release date for a CRP created today."""
    return (today or date.today()) + timedelta(days=config.release_estimate_days)


def build_crp_issue_fields(
    config: ReleaseConfig,
    mapping: RepoMapping,
    release: Release,
    changelog: Document,
    today: date | None = None,
) -> dict[str, Any]:
    """Build the ``fields`` payload of a CRP issue.

    Args:
        config: Release configuration (board ids, people, estimates).
        mapping: The repository's CRP settings.
        release: The release being tracked.
        changelog: The rendered changelog.
        today: Creation date, defaults to today.

    Returns:
        The fields dictionary to send to Jira's create-issue endpoint.
    """
    return {
        "project": {"id": config.crp_project_id},
        "issuetype": {"id": config.crp_issue_type_id},
        "summary": mapping.summary(release),
        CHANGELOG_FIELD: changelog.to_adf(),
        ENVIRONMENTS_FIELD: [{"id": mapping.environment.value}],
        RELEASE_TYPE_FIELD: {"id": ReleaseType.from_version(release.version).value},
        TARGET_DATE_FIELD: target_date(config, today).isoformat(),
        CHANGE_SCOPE_FIELD: Document.from_text(CHANGE_SCOPE_TEXT).to_adf(),
        TESTING_FIELD: Document.from_text(TESTING_TEXT).to_adf(),
        ACCOUNTABLE_PERSON_FIELD: {"accountId": config.accountable_person_for(release)},
        INFOSEC_FIELD: {"id": InfoSecStatus.NO.value},
        SERVICE_CHANGES_FIELD: Document.from_text(SERVICE_CHANGES_TEXT).to_adf(),
        CLINICAL_APPROVAL_FIELD: {"id": ClinicalApproval.UNAPPROVED.value},
        REGULATORY_APPROVAL_FIELD: {"id": RegulatoryApproval.UNAPPROVED.value},
    }
