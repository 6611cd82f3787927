"""Confirmation gate in front of conversation deletion."""

import logging
from collections.abc import Awaitable, Callable
from enum import Enum

logger = logging.getLogger(__name__)


class ConfirmationState(str, Enum):
    IDLE = "idle"
    AWAITING = "awaiting"


class DeleteConfirmationFlow:
    """Two-step delete: ``request_delete`` then a separate ``confirm``.

    At most one target is pending. Requesting again replaces it, so two quick
    delete clicks never act on two conversations.

    Args:
        delete: Coroutine function performing the deletion of a session ID.
    """

    def __init__(self, delete: Callable[[str], Awaitable[None]]) -> None:
        self._delete = delete
        self._target: str | None = None

    @property
    def state(self) -> ConfirmationState:
        if self._target is None:
            return ConfirmationState.IDLE
        return ConfirmationState.AWAITING

    @property
    def pending(self) -> str | None:
        return self._target

    def request_delete(self, session_id: str) -> None:
        if self._target is not None and self._target != session_id:
            logger.debug(f"Replacing pending delete of {self._target} with {session_id}")
        self._target = session_id

    async def confirm(self) -> bool:
        """Delete the pending target, if any.

        The flow is back in IDLE before the deletion starts, whatever its
        outcome. Errors from the deletion propagate.

        Returns:
            True if a deletion was attempted, False when nothing was pending.
        """
        target = self._target
        if target is None:
            return False
        self._target = None
        await self._delete(target)
        return True

    def cancel(self) -> None:
        self._target = None
