from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Speaker of a rendered message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message in the active conversation.

    Attributes:
        role: Who wrote the message.
        content: The message text (markdown for assistant messages).
    """

    role: Role
    content: str


class ConversationSummary(BaseModel):
    """Sidebar entry for one of the user's conversations.

    Attributes:
        session_id: Server-issued conversation identifier.
        message_count: Number of stored messages in the conversation.
    """

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionID", min_length=1)
    message_count: int = Field(0, alias="messageCount", ge=0)


class StartChatRequest(BaseModel):
    """Body of ``POST /api/chat/start``. An empty session_id asks for a new one."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userID")
    session_id: str = Field("", alias="sessionID")


class StartChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionID", min_length=1)
    success: bool = True


class StreamMessageRequest(BaseModel):
    """Body of ``POST /api/chat/stream``."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userID")
    session_id: str = Field(..., alias="sessionID")
    message: str = Field(..., min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class HistoryMessage(BaseModel):
    """One stored message as returned by ``GET /api/chat/history``.

    Attributes:
        type: Server message kind (human, ai, system or unknown).
        content: The message text.
    """

    type: str
    content: str = ""

    def to_message(self) -> Message:
        role = Role.USER if self.type == "human" else Role.ASSISTANT
        return Message(role=role, content=self.content)


class ChatHistoryResponse(BaseModel):
    # The server encodes an empty history as null
    messages: list[HistoryMessage] | None = None


class ConversationListResponse(BaseModel):
    conversations: list[ConversationSummary] | None = None


class DeleteConversationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userID")
    session_id: str = Field(..., alias="sessionID", min_length=1)


class DeleteConversationResponse(BaseModel):
    success: bool = False
    error: str | None = None


class ErrorResponse(BaseModel):
    """Error payload the server attaches to non-2xx responses."""

    error: str | None = None
