"""releasebot - Jira release tracking for mobile app release branches."""

__version__ = "0.1.0"
