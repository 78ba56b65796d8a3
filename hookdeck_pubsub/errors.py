"""Error taxonomy for channel/subscription reconciliation and delivery observation."""

from typing import Any, Optional


class PubSubError(Exception):
    """Base class for all pub-sub layer errors."""


class ConfigurationError(PubSubError):
    """Raised when a required setting (API key, publish auth) is missing or incomplete."""


class AuthMismatchError(PubSubError):
    """Existing channel's inbound auth type disagrees with the configured publish auth."""

    def __init__(self, channel_name: str, found: Optional[str], expected: Optional[str]) -> None:
        self.channel_name = channel_name
        self.found = found
        self.expected = expected
        super().__init__(
            f'Channel "{channel_name}" authentication "{found}" '
            f'does not match publishAuth "{expected}"'
        )


class TransportError(PubSubError):
    """Network or HTTP failure talking to the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class NotFoundError(TransportError):
    """The backend resource does not exist (HTTP 404)."""


class PollTimeoutError(PubSubError, TimeoutError):
    """Polling exhausted its attempt budget without a ready result."""

    def __init__(self, attempts: int, what: str = "result") -> None:
        self.attempts = attempts
        super().__init__(f"Max iterations/timeout of {attempts} exceeded. No {what} received.")


class PollCancelledError(PubSubError):
    """Polling was stopped early through its cancel event."""

    def __init__(self, attempts: int, what: str = "result") -> None:
        self.attempts = attempts
        super().__init__(f"Polling for {what} cancelled after {attempts} attempts.")
