"""SlackNotifier - Posts workflow notifications to a Slack channel."""

from __future__ import annotations

from typing import Any

import httpx

from releasebot.logging import get_logger
from releasebot.slack.exceptions import SlackError
from releasebot.slack.models import Notification, Notify

logger = get_logger("slack")


class SlackNotifier:
    """Thin client for Slack's chat.postMessage Web API method."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://slack.com/api",
        timeout: float = 10.0,
    ) -> None:
        """Initialize the notifier.

        Args:
            token: Slack bot token
            base_url: Slack Web API URL (for testing)
            timeout: HTTP timeout in seconds
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for the Web API."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
                timeout=self.timeout,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def post(self, notification: Notification, channel: str) -> None:
        """Post a notification to a channel.

        Raises:
            SlackError: If the request fails or Slack rejects the message
        """
        payload: dict[str, Any] = {"channel": channel, "text": notification.text}
        if notification.attachments:
            payload["attachments"] = [attachment.to_payload() for attachment in notification.attachments]

        try:
            response = await self.client.post(f"{self.base_url}/chat.postMessage", json=payload)
        except httpx.HTTPError as e:
            raise SlackError(f"Failed to post to {channel}: {e}") from e

        if response.status_code != 200:
            raise SlackError(f"Slack request failed: {response.status_code} - {response.text}")

        data: dict[str, Any] = response.json()
        if not data.get("ok", False):
            raise SlackError(f"Slack rejected message for {channel}: {data.get('error', 'unknown error')}")

        logger.info("Posted message to Slack channel %s", channel)

    def for_channel(self, channel: str) -> Notify:
        """Return a notify callable posting to the given channel."""

        async def notify(notification: Notification) -> None:
            await self.post(notification, channel)

        return notify
