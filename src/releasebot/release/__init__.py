"""Release package - CRP issue creation and Fix Version workflow."""

from releasebot.release.config import JiraSettings, ReleaseConfig, RepoMapping, SlackSettings
from releasebot.release.exceptions import (
    InvalidParameterError,
    MissingParameterError,
    ReleaseError,
    ValidationError,
)
from releasebot.release.issue import CRPEnvironment, ReleaseType, build_crp_issue_fields
from releasebot.release.models import (
    FixVersionError,
    FixVersionErrorKind,
    FixVersionReport,
    Release,
    Repository,
)
from releasebot.release.workflow import ReleaseWorkflow, report_notification

__all__ = [
    "CRPEnvironment",
    "FixVersionError",
    "FixVersionErrorKind",
    "FixVersionReport",
    "InvalidParameterError",
    "JiraSettings",
    "MissingParameterError",
    "Release",
    "ReleaseConfig",
    "ReleaseError",
    "ReleaseType",
    "ReleaseWorkflow",
    "Repository",
    "RepoMapping",
    "SlackSettings",
    "ValidationError",
    "build_crp_issue_fields",
    "report_notification",
]
