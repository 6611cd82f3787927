"""Action boundary: run a user-triggered operation and report its outcome.

Every handler bound to a user gesture goes through :func:`run_action`, so no
session error ever propagates past the UI or ends the session.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Literal

from pydantic import BaseModel

from chat_client.session.errors import (
    BusyError,
    ChatClientError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)

NotificationKind = Literal["info", "positive", "negative", "warning"]


class Notification(BaseModel):
    """A transient, auto-dismissing notice for the user.

    Attributes:
        message: Text to show.
        kind: Severity, using NiceGUI's notification types.
        field: Input the notice belongs to; shown inline when set.
    """

    message: str
    kind: NotificationKind = "info"
    field: str | None = None


def describe_error(error: ChatClientError) -> Notification:
    """Map a session error onto the notice shown for it."""
    if isinstance(error, ValidationError):
        return Notification(message=error.message, kind="warning", field=error.field)
    if isinstance(error, BusyError):
        return Notification(message=error.message, kind="warning")
    return Notification(message=error.message, kind="negative")


async def run_action(
    action: Awaitable[object],
    notify: Callable[[Notification], None],
    success_message: str | None = None,
) -> bool:
    """Await an operation and turn its outcome into notifications.

    Args:
        action: The operation's awaitable.
        notify: Receives the notice for a failure (or success).
        success_message: Optional notice shown when the operation succeeds.

    Returns:
        True if the operation completed without a session error.
    """
    try:
        await action
    except TransportError as e:
        # Underlying cause is for diagnostics only; the user sees the generic text
        logger.error(f"Transport failure: {e.message}", exc_info=e)
        notify(describe_error(e))
        return False
    except ChatClientError as e:
        logger.info(f"{type(e).__name__}: {e.message}")
        notify(describe_error(e))
        return False

    if success_message:
        notify(Notification(message=success_message, kind="positive"))
    return True
