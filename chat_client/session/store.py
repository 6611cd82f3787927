"""Client-side cache of the user's conversation summaries."""

import logging
from collections.abc import Awaitable, Callable

from chat_client.models.schemas import ConversationSummary

logger = logging.getLogger(__name__)

FetchConversations = Callable[[str], Awaitable[list[ConversationSummary]]]


class ConversationStore:
    """Conversation summaries keyed by session ID, in server order.

    Every refresh replaces the whole mapping. When refreshes overlap, the one
    that resolves last wins; nothing is merged. A refresh that resolves after
    :meth:`clear` is dropped so a signed-out client never repopulates.

    Args:
        fetch: Coroutine function returning the summaries for a user ID.
    """

    def __init__(self, fetch: FetchConversations) -> None:
        self._fetch = fetch
        self._conversations: dict[str, ConversationSummary] = {}
        self._generation = 0

    def __len__(self) -> int:
        return len(self._conversations)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._conversations

    async def refresh(self, user_id: str) -> list[ConversationSummary]:
        """Fetch the user's summaries and replace the cache with them.

        Args:
            user_id: User whose conversations to fetch.

        Returns:
            The cached summaries after this refresh resolved.

        Raises:
            RemoteError: The server rejected the request.
            TransportError: No response received.
        """
        generation = self._generation
        summaries = await self._fetch(user_id)

        if generation != self._generation:
            logger.debug(f"Discarding conversations for {user_id}: store was cleared")
            return self.list()

        conversations: dict[str, ConversationSummary] = {}
        for summary in summaries:
            conversations[summary.session_id] = summary
        self._conversations = conversations
        logger.info(f"Loaded {len(conversations)} conversations for {user_id}")
        return self.list()

    def list(self) -> list[ConversationSummary]:
        return list(self._conversations.values())

    def get(self, session_id: str) -> ConversationSummary | None:
        return self._conversations.get(session_id)

    def clear(self) -> None:
        """Drop every summary and invalidate refreshes still in flight."""
        self._conversations = {}
        self._generation += 1
