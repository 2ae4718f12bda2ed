"""JiraClient - Talks to the Jira Cloud REST API through a rate-limited dispatcher."""

from __future__ import annotations

import base64
from collections.abc import Sequence
from typing import Any

import httpx

from releasebot.dispatcher import HttpRateLimitPolicy, RateLimitedDispatcher
from releasebot.dispatcher.policy import DEFAULT_FALLBACK_DELAY
from releasebot.jira.exceptions import (
    JiraApiError,
    JiraError,
    JiraTransportError,
    describe_transport_error,
)
from releasebot.jira.models import CreatedIssue, JiraIssue, Version
from releasebot.logging import get_logger, sanitize_for_log, truncate_output

logger = get_logger("jira")

JiraDispatcher = RateLimitedDispatcher[httpx.Request, httpx.Response]


class JiraClient:
    """Client for the Jira REST API (v3).

    Every request is sent through a RateLimitedDispatcher, so calls are
    serialized and 429 responses are retried once Jira's quota resets. Pass
    the same dispatcher to every client talking to one Jira instance to
    share a single rate limit.

    A shared dispatcher keeps the work and verify functions it was built
    with: requests built by this client (auth headers included) are sent by
    whatever ``work`` that dispatcher runs, and its own rate-limit policy
    applies.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        api_token: str,
        dispatcher: JiraDispatcher | None = None,
        rate_limit_fallback: float | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the Jira client.

        Args:
            base_url: Jira instance URL, e.g. "https://acme.atlassian.net"
            username: Account email used for basic auth
            api_token: Jira API token
            dispatcher: Shared dispatcher; one is created when omitted
            rate_limit_fallback: Seconds to wait after a 429 without reset header,
                for the dispatcher created when none is passed (default 1s)
            timeout: HTTP timeout in seconds

        Raises:
            ValueError: If both a dispatcher and rate_limit_fallback are given
        """
        if dispatcher is not None and rate_limit_fallback is not None:
            raise ValueError("rate_limit_fallback only applies to a dispatcher created by the client")
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.api_token = api_token
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._owns_dispatcher = dispatcher is None
        self.dispatcher: JiraDispatcher = dispatcher or RateLimitedDispatcher(
            work=self._send,
            verify=HttpRateLimitPolicy(
                fallback_delay=DEFAULT_FALLBACK_DELAY if rate_limit_fallback is None else rate_limit_fallback
            ),
            name="jira-dispatcher",
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            credentials = base64.b64encode(f"{self.username}:{self.api_token}".encode()).decode()
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Basic {credentials}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client, and the dispatcher if this client created it."""
        if self._owns_dispatcher:
            await self.dispatcher.aclose()
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(self, request: httpx.Request) -> httpx.Response:
        return await self.client.send(request)

    async def _request(
        self,
        method: str,
        path: str,
        description: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request through the dispatcher.

        Args:
            method: HTTP method
            path: API path, relative to the base URL
            description: What the request does, for logs and errors
            json: Request body

        Returns:
            The successful response

        Raises:
            JiraApiError: If Jira answers with a non-2xx status
            JiraTransportError: If the request could not be sent
        """
        logger.info("[JIRA] %s", description)
        request = self.client.build_request(method, path, json=json)
        logger.debug(
            "[JIRA-API] Request for %s: %s %s %s",
            description,
            method,
            request.url,
            truncate_output(sanitize_for_log(request.content.decode("utf-8", "replace"))),
        )

        try:
            response = await self.dispatcher.submit(request)
        except httpx.TransportError as e:
            raise JiraTransportError(f"{description} failed: {describe_transport_error(e)}") from e

        logger.debug(
            "[JIRA-API] Response for %s: %s %s",
            description,
            response.status_code,
            truncate_output(response.text),
        )

        if not response.is_success:
            raise JiraApiError(response.status_code, _error_details(response))

        return response

    async def create_issue(self, fields: dict[str, Any]) -> CreatedIssue:
        """Create an issue.

        Args:
            fields: The issue's "fields" payload (project, issuetype, summary...)

        Returns:
            The created issue's id, key and API url
        """
        project = fields.get("project", {}).get("id", "?")
        description = f"Creating a new issue <{fields.get('summary', '')}> on board #{project}"
        response = await self._request("POST", "/rest/api/3/issue", description, json={"fields": fields})
        issue = CreatedIssue.from_payload(_json(response))
        logger.info("[JIRA] Created issue %s", issue.key)
        return issue

    async def get_versions(self, project_id: int) -> list[Version]:
        """List the versions of a project."""
        response = await self._request(
            "GET",
            f"/rest/api/3/project/{project_id}/versions",
            f"Fetching versions for project #{project_id}",
        )
        return [Version.from_payload(item) for item in _json(response)]

    async def create_version(self, version: Version) -> Version:
        """Create a version on a project.

        Returns:
            The created version, with its id
        """
        response = await self._request(
            "POST",
            "/rest/api/3/version",
            f"Creating version <{version.name}> on project #{version.project_id}",
            json=version.to_payload(),
        )
        return Version.from_payload(_json(response))

    async def link_version(self, version: Version, ticket_key: str) -> None:
        """Add a version to the "Fix Version" field of a ticket."""
        target = {"id": version.id} if version.id is not None else {"name": version.name}
        await self._request(
            "PUT",
            f"/rest/api/3/issue/{ticket_key}",
            f"Setting Fix Version to <{version.name}> for ticket <{ticket_key}>",
            json={"update": {"fixVersions": [{"add": target}]}},
        )

    async def search(
        self,
        jql: str,
        fields: Sequence[str] = ("summary", "status"),
        max_results: int = 50,
    ) -> list[JiraIssue]:
        """Search issues with a JQL query."""
        response = await self._request(
            "POST",
            "/rest/api/3/search",
            f"Searching issues <{jql}>",
            json={"jql": jql, "fields": list(fields), "maxResults": max_results},
        )
        return [
            JiraIssue(id=str(item["id"]), key=item["key"], fields=item.get("fields") or {})
            for item in _json(response).get("issues", [])
        ]

    def browse_url(self, issue_key: str) -> str:
        """Web URL of an issue."""
        return f"{self.base_url}/browse/{issue_key}"


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise JiraError(f"Invalid JSON in Jira response: {truncate_output(response.text, 200)}") from e


def _error_details(response: httpx.Response) -> str:
    """Extract Jira's error messages from an error response."""
    try:
        data = response.json()
    except ValueError:
        return truncate_output(response.text, 500) or response.reason_phrase

    if not isinstance(data, dict):
        return truncate_output(response.text, 500)

    messages = list(data.get("errorMessages") or [])
    messages.extend(f"{field}: {message}" for field, message in (data.get("errors") or {}).items())
    return "; ".join(messages) or response.reason_phrase
