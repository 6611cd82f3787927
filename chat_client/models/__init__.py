"""Pydantic models for the remote chat API and the client-side view state.

Provides type safety and validation for every payload crossing the wire.

Models:
    - Message: Rendered message in the active conversation
    - ConversationSummary: Sidebar entry (session ID and message count)
    - StartChatRequest / StartChatResponse: Session creation or join
    - StreamMessageRequest: Streaming send payload
    - ChatHistoryResponse: Stored messages for one session
    - ConversationListResponse: All conversations for a user
    - DeleteConversationRequest / DeleteConversationResponse: Deletion
"""

from chat_client.models.schemas import (
    ChatHistoryResponse,
    ConversationListResponse,
    ConversationSummary,
    DeleteConversationRequest,
    DeleteConversationResponse,
    ErrorResponse,
    HistoryMessage,
    Message,
    Role,
    StartChatRequest,
    StartChatResponse,
    StreamMessageRequest,
)

__all__ = [
    "ChatHistoryResponse",
    "ConversationListResponse",
    "ConversationSummary",
    "DeleteConversationRequest",
    "DeleteConversationResponse",
    "ErrorResponse",
    "HistoryMessage",
    "Message",
    "Role",
    "StartChatRequest",
    "StartChatResponse",
    "StreamMessageRequest",
]
