"""Custom exceptions for Slack notifications."""


class SlackError(Exception):
    """Posting to Slack failed."""
