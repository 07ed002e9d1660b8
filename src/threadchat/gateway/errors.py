"""Gateway error hierarchy.

Backends translate their transport-specific failures into these so the
session loop only has to know about three outcomes: could not log in,
could not fetch, could not send.
"""


class GatewayError(Exception):
    """Base class for all messaging backend failures."""


class AuthenticationError(GatewayError):
    """Login rejected or stored session no longer valid."""


class FetchError(GatewayError):
    """A thread or the inbox could not be fetched."""

    def __init__(self, message: str, thread_id: str | None = None) -> None:
        super().__init__(message)
        self.thread_id = thread_id


class SendError(GatewayError):
    """A message could not be delivered."""

    def __init__(self, message: str, thread_id: str | None = None) -> None:
        super().__init__(message)
        self.thread_id = thread_id
