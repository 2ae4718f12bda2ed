"""Slack - Notification sink for workflow results."""

from releasebot.slack.exceptions import SlackError
from releasebot.slack.models import Attachment, AttachmentColor, Notification, Notify
from releasebot.slack.notifier import SlackNotifier

__all__ = [
    "Attachment",
    "AttachmentColor",
    "Notification",
    "Notify",
    "SlackError",
    "SlackNotifier",
]
