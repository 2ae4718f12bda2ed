"""Jira client - Issue and version management through the Jira REST API."""

from releasebot.jira.client import JiraClient
from releasebot.jira.exceptions import (
    JiraApiError,
    JiraError,
    JiraTransportError,
    describe_transport_error,
)
from releasebot.jira.models import CreatedIssue, JiraIssue, Version

__all__ = [
    "CreatedIssue",
    "JiraApiError",
    "JiraClient",
    "JiraError",
    "JiraIssue",
    "JiraTransportError",
    "Version",
    "describe_transport_error",
]
