"""Custom exceptions for the rate-limited dispatcher."""


class DispatcherError(Exception):
    """Base exception for dispatcher errors."""


class DispatcherClosedError(DispatcherError):
    """The dispatcher was closed before the request could run."""


class RateLimitExhaustedError(DispatcherError):
    """A request was rate-limited more times than the dispatcher allows."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Request still rate-limited after {attempts} attempts")
        self.attempts = attempts
