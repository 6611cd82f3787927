"""HTTP client for the remote chat service.

Wraps an ``httpx.AsyncClient`` and translates every outcome into either a
validated payload or one of the session error types:

- no response at all (connection refused, reset, timeout) -> TransportError
- a response with a non-2xx status or ``success: false`` -> RemoteError

Nothing here retries. A failed call is repeated only when the user repeats
the action.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from chat_client.api.config import ClientConfig, get_client_config
from chat_client.models.schemas import (
    ChatHistoryResponse,
    ConversationListResponse,
    ConversationSummary,
    DeleteConversationRequest,
    DeleteConversationResponse,
    ErrorResponse,
    Message,
    StartChatRequest,
    StartChatResponse,
    StreamMessageRequest,
)
from chat_client.session.errors import RemoteError, TransportError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

START_PATH = "/api/chat/start"
STREAM_PATH = "/api/chat/stream"
HISTORY_PATH = "/api/chat/history"
DELETE_PATH = "/api/chat/delete"
CONVERSATIONS_PATH = "/api/user/conversations"


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Return the server's error text when the body carries one."""
    try:
        payload = ErrorResponse.model_validate(response.json())
    except ValueError:
        return fallback
    return payload.error or fallback


class ChatApiClient:
    """Async client for the ``/api/chat`` and ``/api/user`` endpoints.

    Args:
        config: Client configuration. Loads from environment if not provided.
        transport: Optional httpx transport, used to plug in a fake server.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_client_config()
        self._client = httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=httpx.Timeout(self._config.request_timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self, method: str, path: str, fallback: str, **kwargs: Any
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise TransportError() from e

        if not response.is_success:
            message = _error_message(response, fallback)
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise RemoteError(message, response.status_code)
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: type[ModelT]) -> ModelT:
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            logger.warning(f"Unexpected payload from {response.request.url.path}: {e}")
            raise RemoteError(
                "Invalid response from server", response.status_code
            ) from e

    async def start_chat(self, user_id: str, session_id: str = "") -> str:
        """Start a new session or join an existing one.

        Args:
            user_id: The signed-in user.
            session_id: Session to join, or ``""`` to have the server mint one.

        Returns:
            The session ID the server bound the user to.

        Raises:
            RemoteError: Non-2xx response or malformed payload.
            TransportError: No response received.
        """
        body = StartChatRequest(user_id=user_id, session_id=session_id)
        response = await self._request(
            "POST",
            START_PATH,
            "Failed to start chat",
            json=body.model_dump(by_alias=True),
        )
        return self._parse(response, StartChatResponse).session_id

    async def stream_message(
        self, user_id: str, session_id: str, message: str
    ) -> AsyncGenerator[str]:
        """Send a message and yield the reply as raw text fragments.

        The body has no framing: fragments are yielded in arrival order and
        concatenate to the full reply. Closing the generator closes the
        response.

        Raises:
            RemoteError: The server rejected the request (non-2xx).
            TransportError: The connection failed before or during the stream.
        """
        body = StreamMessageRequest(user_id=user_id, session_id=session_id, message=message)
        try:
            async with self._client.stream(
                "POST",
                STREAM_PATH,
                json=body.model_dump(by_alias=True),
                headers={"Accept": "text/plain"},
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise RemoteError(
                        _error_message(response, "Failed to send message"),
                        response.status_code,
                    )
                async for text in response.aiter_text():
                    if text:
                        yield text
        except httpx.RequestError as e:
            logger.warning(f"POST {STREAM_PATH} failed mid-stream: {e!r}")
            raise TransportError() from e

    async def list_conversations(self, user_id: str) -> list[ConversationSummary]:
        """Fetch every conversation summary for a user, in server order."""
        response = await self._request(
            "GET",
            CONVERSATIONS_PATH,
            "Failed to load conversations",
            params={"userID": user_id},
        )
        return self._parse(response, ConversationListResponse).conversations or []

    async def get_history(self, user_id: str, session_id: str) -> list[Message]:
        """Fetch the stored messages of one session, oldest first."""
        response = await self._request(
            "GET",
            HISTORY_PATH,
            "Failed to load chat history",
            params={"userID": user_id, "sessionID": session_id},
        )
        messages = self._parse(response, ChatHistoryResponse).messages or []
        return [m.to_message() for m in messages]

    async def delete_conversation(self, user_id: str, session_id: str) -> None:
        """Delete a conversation.

        Raises:
            RemoteError: Non-2xx response or ``success: false``.
            TransportError: No response received.
        """
        body = DeleteConversationRequest(user_id=user_id, session_id=session_id)
        response = await self._request(
            "POST",
            DELETE_PATH,
            "Failed to delete conversation",
            json=body.model_dump(by_alias=True),
        )
        result = self._parse(response, DeleteConversationResponse)
        if not result.success:
            raise RemoteError(
                result.error or "Failed to delete conversation", response.status_code
            )
