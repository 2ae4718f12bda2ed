"""Custom exceptions for the Jira client."""

from __future__ import annotations

import httpx


class JiraError(Exception):
    """Base exception for Jira client errors."""


class JiraApiError(JiraError):
    """Jira answered with a non-2xx status."""

    def __init__(self, status_code: int, details: str) -> None:
        super().__init__(f"Jira API error {status_code}: {details}")
        self.status_code = status_code
        self.details = details


class JiraTransportError(JiraError):
    """The request never got a response (connection error, timeout...)."""


def describe_transport_error(error: httpx.TransportError) -> str:
    """Human-friendly description of common network failures."""
    if isinstance(error, httpx.TimeoutException):
        message = "Request timed out"
    elif isinstance(error, httpx.ConnectError):
        message = "Cannot connect to host"
    elif isinstance(error, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)):
        message = "Network connection lost"
    else:
        return str(error) or type(error).__name__
    return f"{message} ({type(error).__name__})"
