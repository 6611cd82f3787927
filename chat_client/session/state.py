"""Client-side session state owned by the SessionController."""

from dataclasses import dataclass, field

from chat_client.models.schemas import Message, Role


@dataclass
class StreamingBuffer:
    """Accumulator for the assistant reply of one in-flight send.

    Attributes:
        session_id: Session that was current when the send was issued.
        text: Reply text received so far.
        complete: Set once the stream ended normally.
        orphaned: Set when the owning session stopped being current.
    """

    session_id: str
    text: str = ""
    complete: bool = False
    orphaned: bool = False


@dataclass
class ClientSessionState:
    """Everything the controller knows about the signed-in user.

    ``session_id == ""`` means no session is current yet.
    """

    user_id: str = ""
    session_id: str = ""
    messages: list[Message] = field(default_factory=list)
    streaming: StreamingBuffer | None = None
    input_enabled: bool = False

    @property
    def signed_in(self) -> bool:
        return bool(self.user_id)

    def add_message(self, role: Role, content: str) -> Message:
        message = Message(role=role, content=content)
        self.messages.append(message)
        return message

    def reset(self) -> None:
        self.user_id = ""
        self.session_id = ""
        self.messages = []
        self.streaming = None
        self.input_enabled = False
