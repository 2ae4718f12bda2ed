"""Exceptions for the Release module."""


class ReleaseError(Exception):
    """Base exception for release workflow errors."""


class ValidationError(ReleaseError):
    """Invalid input. Never retried, reported verbatim to the caller."""


class InvalidParameterError(ValidationError):
    """A parameter has a value we cannot work with."""

    def __init__(self, key: str, value: str, expected: str) -> None:
        super().__init__(f'Invalid value for parameter `{key}`: expected "{expected}", got "{value}".')
        self.key = key
        self.value = value
        self.expected = expected


class MissingParameterError(ValidationError):
    """A required parameter was not provided."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Missing value for parameter `{key}`.")
        self.key = key
