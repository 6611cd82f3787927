"""Error taxonomy for session operations.

Every failure a user gesture can produce is one of these. Each carries a
user-facing ``message`` so the action boundary can show it without having
to know which operation raised it.
"""

GENERIC_TRANSPORT_MESSAGE = "Failed to connect to the server. Please try again."


class ChatClientError(Exception):
    """Base class for errors surfaced to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ChatClientError):
    """Raised when user input is missing or empty.

    Attributes:
        field: Name of the offending input (``user_id`` or ``message``).
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class BusyError(ChatClientError):
    """Raised when an exclusive slot (login, send) is already occupied."""


class RemoteError(ChatClientError):
    """Raised when the server answers with a non-success payload.

    Attributes:
        status_code: HTTP status of the response, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(ChatClientError):
    """Raised when no usable response arrives (connection or stream failure)."""

    def __init__(self, message: str = GENERIC_TRANSPORT_MESSAGE) -> None:
        super().__init__(message)
